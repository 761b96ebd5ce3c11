"""
Structured logging setup.

Usage:
    from rolegate.core.config import get_settings
    from rolegate.core.logging import configure_logging

    configure_logging(get_settings())

    logger = structlog.get_logger()
    logger.info("Role assigned", subject_id=str(user.id), role_id=str(role.id))

Bind request-scoped values with structlog.contextvars.bind_contextvars()
and they are merged into every event.
"""

import logging

import structlog

from .config import Settings


def configure_logging(settings: Settings) -> None:
    """Install the structlog processor chain for the given settings."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
