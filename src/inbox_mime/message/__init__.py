"""MIME part tree, header normalization and message accessors."""

from .headers import Headers, header_snapshot_from_bytes, header_snapshot_from_message
from .html import merge_html_documents
from .message import BaseMessage, EmbeddedMessage, Message
from .parameters import ParameterMap, PartParameters
from .part import Attachment, Part, gather_attachments, is_attachment_structure

__all__ = [
    "Attachment",
    "BaseMessage",
    "EmbeddedMessage",
    "Headers",
    "Message",
    "ParameterMap",
    "Part",
    "PartParameters",
    "gather_attachments",
    "header_snapshot_from_bytes",
    "header_snapshot_from_message",
    "is_attachment_structure",
    "merge_html_documents",
]
