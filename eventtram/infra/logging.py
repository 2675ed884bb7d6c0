"""
Structured logging setup (structlog).

Library modules obtain loggers through get_logger(); applications that want
readable or JSON output call configure_logging() once at startup. Until then
records go to the stdlib logger of the same name, so debug output stays
silent under the default WARNING root level.
"""

import logging
import sys
from typing import Any

import structlog

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure structlog for the process.

    Args:
        log_level: Level name, case-insensitive. Unknown names fall back to INFO.
        json_format: Render JSON lines instead of the console renderer.
    """
    level = _LEVELS.get(log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a lazily configured structlog logger over the stdlib logger `name`."""
    return structlog.wrap_logger(logging.getLogger(name))
