"""Client-side model of MIME messages and IMAP search queries."""

from .core import EmailAddress, configure_logging, load_app_settings
from .ingestion import MessageFetcher
from .message import Attachment, EmbeddedMessage, Headers, Message, Part
from .search import SearchExpression, serialize

__all__ = [
    "Attachment",
    "EmailAddress",
    "EmbeddedMessage",
    "Headers",
    "Message",
    "MessageFetcher",
    "Part",
    "SearchExpression",
    "configure_logging",
    "load_app_settings",
    "serialize",
]
