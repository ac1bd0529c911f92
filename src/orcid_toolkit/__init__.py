"""ORCID public data file toolkit."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("orcid-toolkit")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .entities import ExtractedIdentifier, NormalizedName, Record

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "ExtractedIdentifier",
    "NormalizedName",
    "Record",
]
