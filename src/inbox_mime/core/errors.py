"""Exception types raised by the message model and search conditions."""

from __future__ import annotations


class MessageModelError(RuntimeError):
    """Base class for errors raised by the package."""


class UnsupportedCharsetError(MessageModelError):
    """Raised when a header uses a charset Python has no codec for."""

    def __init__(self, charset: str) -> None:
        super().__init__(f"Unsupported charset '{charset}'")
        self.charset = charset


class InvalidDateHeaderError(MessageModelError, ValueError):
    """Raised when a Date header cannot be parsed even after normalization."""

    def __init__(self, raw_value: str) -> None:
        super().__init__(f'Invalid Date header found: "{raw_value}"')
        self.raw_value = raw_value


class EmptySearchValueError(MessageModelError, ValueError):
    """Raised when a text search condition is built with an empty value."""


class UnsupportedOperatorError(MessageModelError, ValueError):
    """Raised when a comparison operator has no IMAP search keyword."""

    def __init__(self, operator: str, kind: str) -> None:
        super().__init__(f"Operator '{operator}' is not supported for {kind} searches")
        self.operator = operator


class NotEmbeddedMessageError(MessageModelError):
    """Raised when a non message/rfc822 attachment is opened as a message."""


class UnknownPartError(MessageModelError, LookupError):
    """Raised by message sources when a section path does not exist."""


__all__ = [
    "EmptySearchValueError",
    "InvalidDateHeaderError",
    "MessageModelError",
    "NotEmbeddedMessageError",
    "UnknownPartError",
    "UnsupportedCharsetError",
    "UnsupportedOperatorError",
]
