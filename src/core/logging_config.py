"""Structured logging configuration.

This module configures structlog with a stable JSON event format on top
of standard logging handlers. Maintenance modules log snake_case events
with keyword fields.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_CONFIGURED_LEVEL: str | None = None


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        level: Standard logging level name, e.g. ``INFO``.
    """
    global _CONFIGURED_LEVEL
    level_value = logging.getLevelName(level.upper())
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
    root_logger.setLevel(level_value)
    _CONFIGURED_LEVEL = level.upper()


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger writing through the named standard logger.
    """
    if _CONFIGURED_LEVEL is None:
        configure_logging()
    return structlog.get_logger(name)
