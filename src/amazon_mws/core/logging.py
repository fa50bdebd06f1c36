"""structlog setup for the MWS client."""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_log_file: IO[str] | None = None


def _drop_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    raise structlog.DropEvent


def configure_logging(
    level: str = "info",
    log_path: str | None = None,
    mute: bool = False,
) -> None:
    """
    Configure structlog for the library.

    Args:
        level: Minimum level name to emit
        log_path: File to append to (stderr when not given)
        mute: Drop every event
    """
    global _log_file

    min_level = LOG_LEVELS.get(level.lower(), logging.INFO)

    if _log_file is not None:
        _log_file.close()
        _log_file = None

    if log_path:
        _log_file = open(log_path, "a", encoding="utf-8")
        output: IO[str] = _log_file
    else:
        output = sys.stderr

    processors: list[Any] = [_drop_event] if mute else []
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y/%m/%d %H:%M:%S"),
        structlog.processors.CallsiteParameterAdder(
            [
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "event", "filename", "func_name", "lineno"]
        ),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )


def reset_logging() -> None:
    """Restore structlog defaults (for testing)."""
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None
    structlog.reset_defaults()
