"""Utility helpers shared across toolkit modules."""

from .helpers import (
    STDIO_MARKER,
    OutputError,
    compile_name_filter,
    ensure_directory,
    nfc,
    open_output,
    trailing_segment,
)
from .logging import configure_logging, get_logger, log_timing, logging_context

__all__ = [
    "configure_logging",
    "get_logger",
    "log_timing",
    "logging_context",
    "STDIO_MARKER",
    "OutputError",
    "compile_name_filter",
    "ensure_directory",
    "nfc",
    "open_output",
    "trailing_segment",
]
