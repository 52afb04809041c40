"""Logging setup shared by the application entry points."""

from __future__ import annotations

import logging

from chat_relay.core.config import Settings

LOG_FORMAT = "%(levelname)s %(name)s %(message)s"

_ENVIRONMENT_LEVELS = {
    "local": logging.DEBUG,
    "development": logging.DEBUG,
    "staging": logging.INFO,
    "production": logging.WARNING,
}


def resolve_log_level(settings: Settings) -> int:
    """Return the numeric log level for the given settings."""

    if settings.log_level:
        level = logging.getLevelName(settings.log_level.upper())
        if isinstance(level, int):
            return level
    return _ENVIRONMENT_LEVELS.get(settings.environment, logging.INFO)


def configure_logging(settings: Settings) -> None:
    level = resolve_log_level(settings)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("chat_relay").setLevel(level)
    # httpx logs every request at INFO, including the URL
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
