"""Configuration package exposing settings and pipeline policies."""

from .policies import PipelinePolicy
from .settings import Settings, get_settings

__all__ = ["PipelinePolicy", "Settings", "get_settings"]
