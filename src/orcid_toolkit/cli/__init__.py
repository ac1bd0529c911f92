"""Command-line interface for the ORCID toolkit."""

from .main import app

__all__ = ["app"]
