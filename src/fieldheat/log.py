"""Structured logging setup (structlog on top of stdlib logging)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog

from fieldheat.config import LogFormat, get_settings

if TYPE_CHECKING:
    from fieldheat.config import Settings

_configured = False


def configure_logging(settings: Settings | None = None, *, force: bool = False) -> None:
    """Configure stdlib + structlog once per process."""
    global _configured  # noqa: PLW0603
    if _configured and not force:
        return

    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if settings.log_format == LogFormat.JSON:
        renderer: Any = structlog.processors.JSONRenderer()
        logging.basicConfig(level=log_level, format="%(message)s")
    else:
        renderer = structlog.dev.ConsoleRenderer()
        logging.basicConfig(level=log_level)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True
