"""Core utilities for configuration, logging, errors, and shared types."""

from .config import (
    AppSettings,
    DecodingSettings,
    LoggingSettings,
    SearchSettings,
    load_app_settings,
)
from .errors import (
    EmptySearchValueError,
    InvalidDateHeaderError,
    MessageModelError,
    NotEmbeddedMessageError,
    UnknownPartError,
    UnsupportedCharsetError,
    UnsupportedOperatorError,
)
from .logging import configure_logging
from .models import EmailAddress

__all__ = [
    "AppSettings",
    "DecodingSettings",
    "EmailAddress",
    "EmptySearchValueError",
    "InvalidDateHeaderError",
    "LoggingSettings",
    "MessageModelError",
    "NotEmbeddedMessageError",
    "SearchSettings",
    "UnknownPartError",
    "UnsupportedCharsetError",
    "UnsupportedOperatorError",
    "configure_logging",
    "load_app_settings",
]
