"""General-purpose helpers shared by the pipeline stages."""

from __future__ import annotations

import re
import sys
import unicodedata
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

STDIO_MARKER = "-"


def trailing_segment(value: str) -> str:
    """Return the part of *value* after its last ``/``.

    Values without a ``/`` are returned unchanged.
    """

    _, separator, tail = value.rpartition("/")
    return tail if separator else value


def nfc(text: str) -> str:
    """Return the NFC normal form of *text*."""

    return unicodedata.normalize("NFC", text)


def compile_name_filter(pattern: str | None) -> re.Pattern[str] | None:
    """Compile the optional display-name filter.

    Raises :class:`re.error` for invalid expressions so callers can surface
    the problem before any input is read.
    """

    if pattern is None or not pattern.strip():
        return None
    return re.compile(nfc(pattern))


def ensure_directory(path: Path | str) -> Path:
    """Ensure that a directory exists and return the resolved Path."""

    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)
    return target.resolve()


class OutputError(RuntimeError):
    """Raised when the output destination cannot be opened or written."""


def _open_destination(path: Path) -> TextIO:
    try:
        ensure_directory(path.parent)
        return path.open("w", encoding="utf-8", newline="")
    except OSError as exc:
        raise OutputError(f"Cannot open output {path}: {exc}") from exc


@contextmanager
def open_output(destination: Path | str) -> Iterator[TextIO]:
    """Open *destination* for text output, ``-`` meaning standard output.

    The file is opened on entry so an unusable destination fails before any
    input is read. Files are written as UTF-8 with ``\\n`` newlines; one that
    is still empty when the block fails is removed again. Standard output is
    left open on exit and only flushed.
    """

    if str(destination) == STDIO_MARKER:
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()
        return

    path = Path(destination)
    handle = _open_destination(path)
    try:
        yield handle
    except BaseException:
        empty = handle.tell() == 0
        handle.close()
        if empty:
            path.unlink(missing_ok=True)
        raise
    try:
        handle.close()
    except OSError as exc:
        raise OutputError(f"Cannot close output {path}: {exc}") from exc


__all__ = [
    "STDIO_MARKER",
    "OutputError",
    "trailing_segment",
    "nfc",
    "compile_name_filter",
    "ensure_directory",
    "open_output",
]
