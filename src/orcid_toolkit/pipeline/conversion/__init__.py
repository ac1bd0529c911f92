"""Conversion of record archives into JSON lines or bulk-load rows."""

from .io import NameSink, OutputError, OutputFormat, build_row
from .main import convert, convert_archive, convert_document, is_document

__all__ = [
    "NameSink",
    "OutputError",
    "OutputFormat",
    "build_row",
    "convert",
    "convert_archive",
    "convert_document",
    "is_document",
]
