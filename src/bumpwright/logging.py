"""Structured logging setup.

Modules obtain a logger with ``logger = get_logger(__name__)`` and log
events by name with keyword context::

    logger.debug("rule_selected", package="first", rule="minor")
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, verbose: bool = False) -> None:
    """Configure structlog to render to stderr.

    Args:
        verbose: Emit debug events instead of warnings and above
    """
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a logger bound to the given module name."""
    return structlog.get_logger(name)
