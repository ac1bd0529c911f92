"""``convert`` and ``extract`` commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from orcid_toolkit.pipeline.conversion import OutputFormat, convert
from orcid_toolkit.pipeline.extraction import ExtractFormat, extract
from orcid_toolkit.pipeline.normalization import OrgResolver
from orcid_toolkit.utils.helpers import open_output
from orcid_toolkit.utils.logging import logging_context

from .common import get_state, parse_name_filter, positive, resolve_output, resolve_path


def convert_command(
    ctx: typer.Context,
    input_file: Path = typer.Option(
        ..., "--input-file", "-i", help="ORCID summaries archive (.tar.gz) or a single record XML."
    ),
    output_file: str = typer.Option(
        "-", "--output-file", "-o", help="Destination file; '-' writes to standard output."
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.INVENIO_RDM_NAMES, "--format", "-f", help="Output serialization."
    ),
    orgs_mappings_file: Optional[Path] = typer.Option(
        None,
        "--orgs-mappings-file",
        help="Header-less CSV of scheme,identifier,canonical org id rows.",
        show_default=False,
    ),
    name_filter: Optional[str] = typer.Option(
        None,
        "--name-filter",
        help="Regular expression the display name must match to be emitted.",
        show_default=False,
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", help="Archive entries per batch.", show_default=False
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", help="Transform worker threads.", show_default=False
    ),
) -> None:
    """Convert ORCID records into name records."""

    state = get_state(ctx)
    settings = state.settings.with_pipeline(
        batch_size=positive(batch_size, "--batch-size"),
        workers=positive(workers, "--workers"),
    )
    pattern = parse_name_filter(name_filter)
    input_resolved = resolve_path(input_file)
    resolver = OrgResolver.from_csv(orgs_mappings_file)

    with logging_context(run_id=state.run_id, step="convert"), open_output(
        resolve_output(output_file)
    ) as stream:
        convert(
            input_resolved,
            stream,
            output_format=output_format,
            resolver=resolver,
            name_filter=pattern,
            settings=settings,
        )


def extract_command(
    ctx: typer.Context,
    input_file: Path = typer.Option(
        ..., "--input-file", "-i", help="ORCID summaries archive (.tar.gz) or a single record XML."
    ),
    output_file: str = typer.Option(
        "-", "--output-file", "-o", help="Destination file; '-' writes to standard output."
    ),
    output_format: ExtractFormat = typer.Option(
        ExtractFormat.ORG_IDS, "--format", "-f", help="What to extract."
    ),
) -> None:
    """Extract the distinct organization identifiers referenced by records."""

    state = get_state(ctx)
    input_resolved = resolve_path(input_file)
    with logging_context(run_id=state.run_id, step="extract"), open_output(
        resolve_output(output_file)
    ) as stream:
        extract(input_resolved, stream, output_format=output_format, settings=state.settings)
