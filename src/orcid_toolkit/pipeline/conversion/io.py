"""Output sink serializing normalized names as JSON lines or CSV rows."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TextIO
from uuid import uuid4

from ...entities.core import NormalizedName, OutputRow
from ...utils.helpers import OutputError


class OutputFormat(str, Enum):
    """Serialization selected once per run."""

    JSON = "json"
    INVENIO_RDM_NAMES = "invenio-rdm-names"


def dumps_compact(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def dumps_pretty(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def run_timestamp() -> str:
    """RFC 3339 timestamp (UTC) shared by all rows of a run."""

    return datetime.now(timezone.utc).isoformat()


def build_row(name: NormalizedName, created: str) -> OutputRow:
    """Wrap *name* for bulk loading; ``created`` doubles as ``updated``."""

    return OutputRow(
        created=created,
        updated=created,
        id=str(uuid4()),
        json=dumps_compact(name.to_payload()),
        pid=name.orcid,
    )


class NameSink:
    """Single buffered writer owned by the consuming thread.

    Records are written in the order :meth:`write` is called.
    """

    def __init__(
        self,
        stream: TextIO,
        output_format: OutputFormat,
        *,
        created: str | None = None,
        pretty: bool = False,
    ) -> None:
        self.stream = stream
        self.output_format = OutputFormat(output_format)
        self.created = created or run_timestamp()
        self.pretty = pretty
        self.written = 0
        self._csv = (
            csv.writer(stream, lineterminator="\n")
            if self.output_format is OutputFormat.INVENIO_RDM_NAMES
            else None
        )

    def write(self, name: NormalizedName) -> None:
        try:
            if self._csv is not None:
                self._csv.writerow(build_row(name, self.created).as_tuple())
            else:
                dump = dumps_pretty if self.pretty else dumps_compact
                self.stream.write(dump(name.to_payload()))
                self.stream.write("\n")
        except OSError as exc:
            raise OutputError(f"Error writing output record: {exc}") from exc
        self.written += 1

    def flush(self) -> None:
        try:
            self.stream.flush()
        except OSError as exc:
            raise OutputError(f"Error flushing output: {exc}") from exc


__all__ = [
    "OutputFormat",
    "OutputError",
    "NameSink",
    "build_row",
    "dumps_compact",
    "dumps_pretty",
    "run_timestamp",
]
