"""Structured logging configuration.

Loggers emit one JSON object per event on stderr so stdout stays free
for command results. structlog is preferred; a stdlib adapter with the
same call surface is used when it is not installed.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

LOG_LEVEL_ENV = "ICO_LOG_LEVEL"

_structlog_configured = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog or stdlib logger with structured output.
    """
    try:
        import structlog
    except ImportError:
        return _get_standard_logger(name)
    _configure_structlog(structlog)
    return structlog.get_logger(name)


def resolve_log_level() -> int:
    """Return the numeric level named by ``ICO_LOG_LEVEL`` (INFO when unset or unknown)."""
    level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _configure_structlog(structlog: Any) -> None:
    """Configure structlog JSON output on stderr, once per process."""
    global _structlog_configured
    if _structlog_configured:
        return
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level()),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    _structlog_configured = True


def _get_standard_logger(name: str) -> Any:
    """Return a stdlib-backed adapter writing to stderr."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(resolve_log_level())
    return _StructuredStandardLogger(logger)


class _StructuredStandardLogger:
    """Stdlib logger adapter that accepts structured keyword fields."""

    def __init__(self, logger: logging.Logger, context: dict[str, object] | None = None) -> None:
        self._logger = logger
        self._context = dict(context or {})

    def bind(self, **fields: object) -> "_StructuredStandardLogger":
        """Return a logger that adds the given fields to every event."""
        return _StructuredStandardLogger(self._logger, {**self._context, **fields})

    def debug(self, event: str, **fields: object) -> None:
        """Log a debug-level structured event."""
        self._emit(logging.DEBUG, event, fields)

    def info(self, event: str, **fields: object) -> None:
        """Log an info-level structured event."""
        self._emit(logging.INFO, event, fields)

    def warning(self, event: str, **fields: object) -> None:
        """Log a warning-level structured event."""
        self._emit(logging.WARNING, event, fields)

    def error(self, event: str, **fields: object) -> None:
        """Log an error-level structured event."""
        self._emit(logging.ERROR, event, fields)

    def _emit(self, level: int, event: str, fields: dict[str, object]) -> None:
        """Render context and fields as one JSON message at the given level."""
        if not self._logger.isEnabledFor(level):
            return
        payload = {"event": event, **self._context, **fields}
        self._logger.log(level, json.dumps(payload, sort_keys=True, default=str))
