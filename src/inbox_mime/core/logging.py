"""Logging setup for applications embedding the message model.

Modules only create loggers below ``inbox_mime`` and never install
handlers on import. Applications call :func:`configure_logging` once,
either for the whole process or for the package loggers alone.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from .config import LoggingSettings

PACKAGE_LOGGER = "inbox_mime"

# Loggers reporting dropped headers, charset fallbacks and section fetches.
DECODING_LOGGERS = ("inbox_mime.message", "inbox_mime.transport")


def _formatter(structured: bool) -> dict[str, Any]:
    if structured:
        return {"format": "{asctime} {levelname} {name} {message}", "style": "{"}
    return {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}


def _package_loggers(settings: LoggingSettings, handlers: list[str]) -> dict[str, Any]:
    package: dict[str, Any] = {"level": settings.level}
    if handlers:
        package.update(handlers=handlers, propagate=False)
    loggers = {PACKAGE_LOGGER: package}
    if settings.trace_decoding:
        for name in DECODING_LOGGERS:
            loggers[name] = {"level": "DEBUG"}
    return loggers


def configure_logging(settings: LoggingSettings, *, attach_root: bool = True) -> None:
    """Route package log records to a console handler.

    With ``attach_root`` the handler goes on the root logger and its level
    follows ``settings.level``. Otherwise only the ``inbox_mime`` loggers
    are touched, which suits applications that own their root logger.
    """
    handler_level = "DEBUG" if settings.trace_decoding else settings.level
    dict_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": _formatter(settings.structured)},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": handler_level,
            },
        },
        "loggers": _package_loggers(settings, [] if attach_root else ["console"]),
    }
    if attach_root:
        dict_config["root"] = {"handlers": ["console"], "level": settings.level}

    logging.config.dictConfig(dict_config)


__all__ = ["DECODING_LOGGERS", "PACKAGE_LOGGER", "configure_logging"]
