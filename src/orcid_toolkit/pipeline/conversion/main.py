"""Entry points converting ORCID dumps into normalized name records."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TextIO

from ...config.settings import Settings, get_settings
from ...utils.helpers import nfc
from ...utils.logging import get_logger, log_timing
from ..ingestion.archive import read_document
from ..normalization.decoder import decode_record
from ..normalization.normalizer import normalize_record
from ..normalization.processor import RecordTransformer
from ..normalization.resolver import OrgResolver
from ..runner import PipelineMetrics, archive_outcomes
from .io import NameSink, OutputFormat

DOCUMENT_SUFFIX = ".xml"


def is_document(input_path: Path | str) -> bool:
    """Return ``True`` when *input_path* names a single record document."""

    return Path(input_path).suffix.lower() == DOCUMENT_SUFFIX


def convert_archive(
    input_path: Path | str,
    output: TextIO,
    *,
    output_format: OutputFormat = OutputFormat.INVENIO_RDM_NAMES,
    resolver: OrgResolver | None = None,
    name_filter: re.Pattern[str] | None = None,
    settings: Settings | None = None,
) -> PipelineMetrics:
    """Stream every record of an archive through decode, normalize and write.

    Per-record failures are logged and skipped; archive and write failures
    propagate.
    """

    settings = settings or get_settings()
    logger = get_logger(module=__name__)
    resolver = resolver or OrgResolver()
    metrics = PipelineMetrics()
    transform = RecordTransformer(resolver, name_filter)

    with log_timing("convert_archive", logger_=logger, input=str(input_path)), archive_outcomes(
        input_path, transform, settings, metrics
    ) as outcomes:
        sink = NameSink(output, output_format)
        for outcome in outcomes:
            sink.write(outcome.payload)
        sink.flush()
        metrics.written = sink.written

    logger.info("Completed archive conversion", input=str(input_path), **metrics.as_dict())
    return metrics


def convert_document(
    input_path: Path | str,
    output: TextIO,
    *,
    output_format: OutputFormat = OutputFormat.INVENIO_RDM_NAMES,
    resolver: OrgResolver | None = None,
    name_filter: re.Pattern[str] | None = None,
) -> PipelineMetrics:
    """Convert a single record document.

    Decode and normalization errors propagate: with one input there is
    nothing else to emit. JSON output is pretty-printed.
    """

    logger = get_logger(module=__name__)
    resolver = resolver or OrgResolver()
    metrics = PipelineMetrics()

    entry = read_document(input_path)
    metrics.entries_read = 1
    record = decode_record(entry.content)
    metrics.records_decoded = 1
    name = normalize_record(record, resolver)

    if name_filter is not None and not name_filter.search(nfc(name.display_name)):
        metrics.filtered = 1
        logger.info("Record excluded by name filter", orcid=record.orcid)
        return metrics

    sink = NameSink(output, output_format, pretty=True)
    sink.write(name)
    sink.flush()
    metrics.written = sink.written
    return metrics


def convert(
    input_path: Path | str,
    output: TextIO,
    *,
    output_format: OutputFormat = OutputFormat.INVENIO_RDM_NAMES,
    resolver: OrgResolver | None = None,
    name_filter: re.Pattern[str] | None = None,
    settings: Settings | None = None,
) -> PipelineMetrics:
    """Dispatch to :func:`convert_document` or :func:`convert_archive`."""

    if is_document(input_path):
        return convert_document(
            input_path,
            output,
            output_format=output_format,
            resolver=resolver,
            name_filter=name_filter,
        )
    return convert_archive(
        input_path,
        output,
        output_format=output_format,
        resolver=resolver,
        name_filter=name_filter,
        settings=settings,
    )


__all__ = ["convert", "convert_archive", "convert_document", "is_document"]
