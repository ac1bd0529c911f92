"""Typer application exposing the ``convert`` and ``extract`` commands."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import typer
from rich.markup import escape
from rich.table import Table

from orcid_toolkit.pipeline.conversion import OutputError
from orcid_toolkit.pipeline.ingestion import ArchiveError
from orcid_toolkit.pipeline.normalization import DecodeError, NormalizationError, OrgMapError

from . import commands
from .common import CLIError, configure_state, console, parse_override

Describe = Callable[[BaseException], str]


class ToolkitTyper(typer.Typer):
    """Typer application that turns known failures into one-line errors.

    Registered exception types map to an exit code and a message renderer;
    anything unregistered propagates unchanged.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._failures: Dict[type, Tuple[int, Describe]] = {}

    def fails_with(self, exit_code: int, *exception_types: type, describe: Describe = str) -> None:
        for exception_type in exception_types:
            self._failures[exception_type] = (exit_code, describe)

    def _failure_for(self, exception: BaseException) -> Tuple[int, Describe] | None:
        for klass in type(exception).__mro__:
            if klass in self._failures:
                return self._failures[klass]
        return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().__call__(*args, **kwargs)
        except Exception as exc:
            failure = self._failure_for(exc)
            if failure is None:
                raise
            exit_code, describe = failure
            console.print(f"[bold red]Error:[/bold red] {escape(describe(exc))}")
            if kwargs.get("standalone_mode", True):
                raise SystemExit(exit_code) from exc
            return exit_code


def _describe_decode_error(exception: BaseException) -> str:
    if isinstance(exception, DecodeError):
        return f"Error parsing XML content at {exception.path}: {exception.message}"
    return str(exception)


app = ToolkitTyper(
    add_completion=False,
    help="Work with the ORCID Public Data File: convert records and extract organization ids.",
    no_args_is_help=True,
)
app.fails_with(2, CLIError)
app.fails_with(1, DecodeError, describe=_describe_decode_error)
app.fails_with(1, ArchiveError, OrgMapError, OutputError, NormalizationError)


def _context_table(ctx: typer.Context) -> Table:
    state = ctx.obj
    policy = state.settings.pipeline
    table = Table(title="Run configuration", show_header=False, box=None)
    for label, value in (
        ("Environment", state.environment),
        ("Run ID", state.run_id),
        ("Batch size", policy.batch_size),
        ("Queue capacity", policy.queue_capacity),
        ("Workers", policy.effective_workers),
        ("Log level", state.settings.log_level),
    ):
        table.add_row(label, str(value))
    return table


@app.callback()
def main(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(
        None,
        "--environment",
        "-e",
        help="Configuration environment (development, testing, production).",
        show_default=False,
    ),
    override: List[str] = typer.Option(  # noqa: B008 - Typer callback signature
        [],
        "--override",
        metavar="KEY=VALUE",
        help="Settings override in dotted.key=value form, e.g. pipeline.batch_size=512 (repeatable).",
    ),
    run_id: Optional[str] = typer.Option(
        None,
        "--run-id",
        help="Run identifier attached to every log line; generated when omitted.",
        show_default=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log at DEBUG and print the resolved run configuration.",
    ),
) -> None:
    """Resolve settings and logging before a subcommand runs."""

    configure_state(
        ctx,
        environment=environment,
        overrides=[parse_override(item) for item in override],
        run_id=run_id,
        verbose=verbose,
    )
    if verbose:
        console.print(_context_table(ctx))


app.command("convert")(commands.convert_command)
app.command("extract")(commands.extract_command)
