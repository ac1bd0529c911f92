"""Shared driver for archive runs: producer thread, transform pool, metrics."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator

from ..config.settings import Settings
from ..utils.logging import get_logger
from .ingestion.archive import ArchiveReader, ReaderMetrics
from .ingestion.producer import produce_batches
from .normalization.processor import (
    OutcomeStatus,
    ParallelTransformStage,
    Transform,
    TransformOutcome,
)


@dataclass
class PipelineMetrics:
    """Per-run counters, updated by the consuming thread only."""

    entries_read: int = 0
    entries_skipped: int = 0
    batches: int = 0
    records_decoded: int = 0
    decode_failures: int = 0
    normalization_failures: int = 0
    filtered: int = 0
    written: int = 0

    def absorb_reader(self, reader: ReaderMetrics) -> None:
        self.entries_read = reader.entries_read
        self.entries_skipped = reader.entries_skipped

    def record(self, outcome: TransformOutcome) -> None:
        if outcome.status is OutcomeStatus.DECODE_FAILED:
            self.decode_failures += 1
            return
        self.records_decoded += 1
        if outcome.status is OutcomeStatus.NORMALIZE_FAILED:
            self.normalization_failures += 1
        elif outcome.status is OutcomeStatus.FILTERED:
            self.filtered += 1

    def as_dict(self) -> Dict[str, int]:
        return {
            "entries_read": self.entries_read,
            "entries_skipped": self.entries_skipped,
            "batches": self.batches,
            "records_decoded": self.records_decoded,
            "decode_failures": self.decode_failures,
            "normalization_failures": self.normalization_failures,
            "filtered": self.filtered,
            "written": self.written,
        }


def report_outcome(outcome: TransformOutcome, *, log=None) -> None:
    """Log the diagnostic for a failed outcome; successes stay silent."""

    log = log or get_logger(module=__name__)
    if outcome.status is OutcomeStatus.DECODE_FAILED:
        log.warning(
            "Error parsing XML content",
            entry=outcome.entry_name,
            path=outcome.path,
            error=outcome.error,
        )
    elif outcome.status is OutcomeStatus.NORMALIZE_FAILED:
        log.warning(
            "Error converting record",
            entry=outcome.entry_name,
            orcid=outcome.orcid,
            error=outcome.error,
        )
    elif outcome.status is OutcomeStatus.FILTERED:
        log.debug("Record excluded by name filter", orcid=outcome.orcid)


@contextmanager
def archive_outcomes(
    input_path: Path | str,
    transform: Transform,
    settings: Settings,
    metrics: PipelineMetrics,
) -> Iterator[Iterator[TransformOutcome]]:
    """Open *input_path* and yield an iterator of successful outcomes.

    The archive is opened before the block is entered so that an unreadable
    input fails before the caller touches its output. Failed outcomes are
    logged and counted in *metrics*; batches keep their arrival order.
    """

    policy = settings.pipeline
    log = get_logger(module=__name__)
    with ArchiveReader(input_path) as reader:
        entries = reader.record_entries(suffix=policy.record_suffix)
        with ParallelTransformStage(transform, workers=policy.effective_workers) as stage, produce_batches(
            entries, batch_size=policy.batch_size, capacity=policy.queue_capacity
        ) as batches:

            def successful() -> Iterator[TransformOutcome]:
                for batch in batches:
                    metrics.batches += 1
                    for outcome in stage.process_batch(batch):
                        metrics.record(outcome)
                        if outcome.ok:
                            yield outcome
                        else:
                            report_outcome(outcome, log=log)

            yield successful()
        metrics.absorb_reader(reader.metrics)


__all__ = ["PipelineMetrics", "archive_outcomes", "report_outcome"]
