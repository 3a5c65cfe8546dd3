"""Utility functions for Unsubscribe Finder."""

import logging

import structlog

from unsubscribe_finder.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog from application settings.

    Args:
        settings: Application settings providing ``log_level`` and ``log_json``.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
