"""Streaming access to compressed record archives."""

from __future__ import annotations

import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, Tuple

from ...utils.logging import get_logger

# Errors raised by tarfile and the decompression layers underneath it.
STREAM_ERRORS = (tarfile.TarError, EOFError, OSError, zlib.error)


class ArchiveError(RuntimeError):
    """Raised when an archive cannot be opened or its entry stream breaks."""


@dataclass(frozen=True)
class ArchiveEntry:
    """A record document read from the archive (or a standalone file)."""

    name: str
    content: str


@dataclass
class ReaderMetrics:
    """Counters maintained by the thread that drives the reader."""

    entries_seen: int = 0
    entries_skipped: int = 0
    entries_read: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "entries_seen": self.entries_seen,
            "entries_skipped": self.entries_skipped,
            "entries_read": self.entries_read,
        }


class ArchiveReader:
    """Sequential, single-pass reader over a tar stream.

    Compression (gzip, bzip2, xz or none) is detected from the stream. The
    constructor reads the first header so that unreadable inputs fail before
    any output is produced.
    """

    def __init__(self, source: Path | str | BinaryIO) -> None:
        self._log = get_logger(module=__name__)
        self.metrics = ReaderMetrics()
        self._owned: BinaryIO | None = None
        if isinstance(source, (str, Path)):
            self.name = str(source)
            try:
                self._owned = open(source, "rb")
            except OSError as exc:
                raise ArchiveError(f"Cannot open archive {source}: {exc}") from exc
            fileobj = self._owned
        else:
            self.name = getattr(source, "name", "<stream>")
            fileobj = source
        try:
            self._tar = tarfile.open(fileobj=fileobj, mode="r|*")
        except STREAM_ERRORS as exc:
            self.close()
            raise ArchiveError(f"Cannot read archive {self.name}: {exc}") from exc
        self._consumed = False
        self._log.debug("Opened archive", archive=self.name)

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        tar = getattr(self, "_tar", None)
        if tar is not None:
            tar.close()
        if self._owned is not None:
            self._owned.close()
            self._owned = None

    def members(self) -> Iterator[Tuple[str, BinaryIO | None]]:
        """Yield ``(name, stream)`` pairs; the stream is only valid until the next item.

        Non-regular members yield ``None`` as their stream.
        """

        if self._consumed:
            raise ArchiveError(f"Archive {self.name} has already been read")
        self._consumed = True
        iterator = iter(self._tar)
        while True:
            try:
                member = next(iterator)
            except StopIteration:
                return
            except STREAM_ERRORS as exc:
                raise ArchiveError(f"Archive {self.name} is corrupt: {exc}") from exc
            self.metrics.entries_seen += 1
            if not member.isfile():
                yield member.name, None
                continue
            try:
                stream = self._tar.extractfile(member)
            except STREAM_ERRORS:
                stream = None
            yield member.name, stream

    def record_entries(self, suffix: str = ".xml") -> Iterator[ArchiveEntry]:
        return filter_record_entries(self.members(), suffix=suffix, metrics=self.metrics)


def filter_record_entries(
    members: Iterable[Tuple[str, BinaryIO | None]],
    *,
    suffix: str = ".xml",
    metrics: ReaderMetrics | None = None,
) -> Iterator[ArchiveEntry]:
    """Keep record documents, reading each one eagerly into memory as text.

    Entries with another suffix, without content, or whose content is not
    readable UTF-8 are skipped.
    """

    log = get_logger(module=__name__)
    stats = metrics if metrics is not None else ReaderMetrics()
    for name, stream in members:
        if stream is None or not name.endswith(suffix):
            stats.entries_skipped += 1
            continue
        try:
            content = stream.read().decode("utf-8")
        except (UnicodeDecodeError, *STREAM_ERRORS) as exc:
            stats.entries_skipped += 1
            log.debug("Skipping unreadable entry", entry=name, error=str(exc))
            continue
        stats.entries_read += 1
        yield ArchiveEntry(name=name, content=content)


def read_document(path: Path | str) -> ArchiveEntry:
    """Read a standalone record document as a single entry."""

    source = Path(path)
    try:
        content = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArchiveError(f"Cannot read document {source}: {exc}") from exc
    return ArchiveEntry(name=source.name, content=content)


__all__ = [
    "ArchiveEntry",
    "ArchiveError",
    "ArchiveReader",
    "ReaderMetrics",
    "filter_record_entries",
    "read_document",
]
