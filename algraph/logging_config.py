"""
structlog configuration for AL Graph.

Components never reach for a global logger: they accept one in their
constructor and fall back to `get_logger(__name__)` when none is given.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

_TRUTHY = {"1", "true", "yes", "on"}


def _debug_from_env() -> bool:
    return os.environ.get("ALGRAPH_DEBUG", "").strip().lower() in _TRUTHY


def configure_logging(debug: bool | None = None) -> None:
    """
    Configure structlog to render key/value events on stderr.

    Args:
        debug: Force debug logging on or off. When omitted, ALGRAPH_DEBUG
            decides.
    """

    if debug is None:
        debug = _debug_from_env()
    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def get_logger(name: str | None = None, **initial_values: object) -> structlog.typing.FilteringBoundLogger:
    return structlog.get_logger(name, **initial_values)
