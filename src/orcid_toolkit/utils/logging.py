"""Centralised logging configuration built on loguru.

Every sink writes to stderr or a file; stdout belongs to the converted
record stream when the output destination is ``-``.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from typing import Any, Dict

from loguru import logger

from ..config.settings import Settings, get_settings

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[run_id]}</cyan> | "
    "<magenta>{extra[step]}</magenta> | "
    "{message} | {extra}"
)
_DEFAULT_EXTRA = {"run_id": "-", "step": "-"}


def _sink_options(level: str) -> Dict[str, Any]:
    # Producer and worker threads log concurrently.
    return {"level": level, "format": _LOG_FORMAT, "enqueue": True}


def configure_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """Replace all loguru sinks with the ones described by *settings*.

    ``level`` overrides ``settings.log_level`` (the CLI passes ``DEBUG`` for
    ``--verbose``). A rotating file sink is added when ``log_file`` is set.
    """

    cfg = settings or get_settings()
    options = _sink_options((level or cfg.log_level).upper())

    logger.remove()
    logger.configure(extra=dict(_DEFAULT_EXTRA))
    logger.add(sys.stderr, backtrace=False, diagnose=False, **options)
    if cfg.log_file is not None:
        cfg.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(cfg.log_file, rotation="10 MB", retention="14 days", **options)


def get_logger(**context: Any):
    """Return a logger bound to *context* (usually ``module=__name__``)."""

    return logger.bind(**context)


@contextmanager
def logging_context(**context: Any):
    """Bind ``run_id``/``step`` style fields for everything logged in the block."""

    with logger.contextualize(**context):
        yield logger


@contextmanager
def log_timing(step: str, *, logger_=logger, **context: Any):
    """Log the wall-clock duration of the block as ``Step timing``."""

    start = time.perf_counter()
    try:
        yield
    finally:
        logger_.info(
            "Step timing",
            step=step,
            seconds=round(time.perf_counter() - start, 3),
            **context,
        )


__all__ = ["configure_logging", "get_logger", "logging_context", "log_timing"]
