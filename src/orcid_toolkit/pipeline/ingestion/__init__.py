"""Archive ingestion: reading, entry filtering and batched hand-off."""

from .archive import (
    ArchiveEntry,
    ArchiveError,
    ArchiveReader,
    ReaderMetrics,
    filter_record_entries,
    read_document,
)
from .producer import BatchChannel, BatchProducer, ChannelClosed, produce_batches

__all__ = [
    "ArchiveEntry",
    "ArchiveError",
    "ArchiveReader",
    "ReaderMetrics",
    "filter_record_entries",
    "read_document",
    "BatchChannel",
    "BatchProducer",
    "ChannelClosed",
    "produce_batches",
]
