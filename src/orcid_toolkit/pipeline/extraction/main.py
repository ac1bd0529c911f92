"""Entry points listing the organization identifiers found in ORCID dumps."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, Set, TextIO

from ...config.settings import Settings, get_settings
from ...entities.core import ExtractedIdentifier
from ...utils.logging import get_logger, log_timing
from ..conversion.io import OutputError
from ..conversion.main import is_document
from ..ingestion.archive import read_document
from ..normalization.decoder import decode_record
from ..normalization.normalizer import collect_org_ids
from ..normalization.processor import OrgIdTransformer
from ..runner import PipelineMetrics, archive_outcomes


class ExtractFormat(str, Enum):
    ORG_IDS = "org-ids"


class IdentifierWriter:
    """Write each distinct identifier once, in first-seen order."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.seen: Set[ExtractedIdentifier] = set()

    def write_new(self, identifiers: Iterable[ExtractedIdentifier]) -> int:
        written = 0
        for identifier in identifiers:
            if identifier in self.seen:
                continue
            self.seen.add(identifier)
            try:
                self.stream.write(identifier.to_json())
                self.stream.write("\n")
            except OSError as exc:
                raise OutputError(f"Error writing identifier: {exc}") from exc
            written += 1
        return written


def extract_archive(
    input_path: Path | str,
    output: TextIO,
    *,
    settings: Settings | None = None,
) -> PipelineMetrics:
    settings = settings or get_settings()
    logger = get_logger(module=__name__)
    metrics = PipelineMetrics()
    writer = IdentifierWriter(output)

    with log_timing("extract_archive", logger_=logger, input=str(input_path)), archive_outcomes(
        input_path, OrgIdTransformer(), settings, metrics
    ) as outcomes:
        for outcome in outcomes:
            metrics.written += writer.write_new(outcome.payload)
        output.flush()

    logger.info("Completed identifier extraction", input=str(input_path), **metrics.as_dict())
    return metrics


def extract_document(input_path: Path | str, output: TextIO) -> PipelineMetrics:
    """Single-document variant; decode errors propagate."""

    metrics = PipelineMetrics(entries_read=1)
    record = decode_record(read_document(input_path).content)
    metrics.records_decoded = 1
    metrics.written = IdentifierWriter(output).write_new(collect_org_ids(record))
    output.flush()
    return metrics


def extract(
    input_path: Path | str,
    output: TextIO,
    *,
    output_format: ExtractFormat = ExtractFormat.ORG_IDS,
    settings: Settings | None = None,
) -> PipelineMetrics:
    """Dispatch on the input type; ``org-ids`` is the only format."""

    ExtractFormat(output_format)
    if is_document(input_path):
        return extract_document(input_path, output)
    return extract_archive(input_path, output, settings=settings)


__all__ = ["ExtractFormat", "IdentifierWriter", "extract", "extract_archive", "extract_document"]
