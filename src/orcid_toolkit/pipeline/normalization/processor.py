"""Parallel transform stage applying decode + normalize to archive batches."""

from __future__ import annotations

import re
from concurrent import futures
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence

from ...entities.core import NormalizedName
from ...utils.helpers import nfc
from ..ingestion.archive import ArchiveEntry
from .decoder import DecodeError, decode_record
from .normalizer import NormalizationError, collect_org_ids, normalize_record
from .resolver import OrgResolver


class OutcomeStatus(str, Enum):
    OK = "ok"
    DECODE_FAILED = "decode_failed"
    NORMALIZE_FAILED = "normalize_failed"
    FILTERED = "filtered"


@dataclass(frozen=True)
class TransformOutcome:
    """Result of transforming one archive entry.

    ``payload`` is only set for ``OK`` outcomes; ``error`` and ``path``
    describe failures.
    """

    entry_name: str
    status: OutcomeStatus
    payload: Any = None
    orcid: Optional[str] = None
    error: Optional[str] = None
    path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK


Transform = Callable[[ArchiveEntry], TransformOutcome]


class RecordTransformer:
    """Decode, normalize and optionally filter a single entry."""

    def __init__(
        self,
        resolver: OrgResolver,
        name_filter: re.Pattern[str] | None = None,
    ) -> None:
        self.resolver = resolver
        self.name_filter = name_filter

    def __call__(self, entry: ArchiveEntry) -> TransformOutcome:
        try:
            record = decode_record(entry.content)
        except DecodeError as exc:
            return TransformOutcome(
                entry.name, OutcomeStatus.DECODE_FAILED, error=exc.message, path=exc.path
            )
        try:
            name: NormalizedName = normalize_record(record, self.resolver)
        except NormalizationError as exc:
            return TransformOutcome(
                entry.name, OutcomeStatus.NORMALIZE_FAILED, orcid=record.orcid, error=str(exc)
            )
        if self.name_filter is not None and not self.name_filter.search(nfc(name.display_name)):
            return TransformOutcome(entry.name, OutcomeStatus.FILTERED, orcid=record.orcid)
        return TransformOutcome(entry.name, OutcomeStatus.OK, payload=name, orcid=record.orcid)


class OrgIdTransformer:
    """Decode an entry and collect its raw organization identifiers."""

    def __call__(self, entry: ArchiveEntry) -> TransformOutcome:
        try:
            record = decode_record(entry.content)
        except DecodeError as exc:
            return TransformOutcome(
                entry.name, OutcomeStatus.DECODE_FAILED, error=exc.message, path=exc.path
            )
        return TransformOutcome(
            entry.name, OutcomeStatus.OK, payload=collect_org_ids(record), orcid=record.orcid
        )


class ParallelTransformStage:
    """Apply a transform to every entry of a batch using a worker pool.

    Batches are processed one after the other; results within a batch come
    back in completion order. With a single worker the transform runs inline.
    """

    def __init__(self, transform: Transform, *, workers: int = 1) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.transform = transform
        self.workers = workers
        self._executor: futures.Executor | None = None

    def __enter__(self) -> "ParallelTransformStage":
        if self.workers > 1:
            self._executor = futures.ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="orcid-transform"
            )
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None

    def process_batch(self, batch: Sequence[ArchiveEntry]) -> List[TransformOutcome]:
        if self._executor is None or len(batch) <= 1:
            return [self.transform(entry) for entry in batch]
        pending = [self._executor.submit(self.transform, entry) for entry in batch]
        return [future.result() for future in futures.as_completed(pending)]

    def process(self, batches: Iterable[Sequence[ArchiveEntry]]) -> Iterator[TransformOutcome]:
        for batch in batches:
            yield from self.process_batch(batch)


__all__ = [
    "OutcomeStatus",
    "TransformOutcome",
    "Transform",
    "RecordTransformer",
    "OrgIdTransformer",
    "ParallelTransformStage",
]
