"""Organization identifier extraction."""

from .main import ExtractFormat, IdentifierWriter, extract, extract_archive, extract_document

__all__ = ["ExtractFormat", "IdentifierWriter", "extract", "extract_archive", "extract_document"]
