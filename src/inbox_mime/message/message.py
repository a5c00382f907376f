"""Messages: a part tree plus normalized headers."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from threading import Lock
from typing import Any

from ..core.config import DecodingSettings
from ..core.datetime_utils import parse_date_header
from ..core.interfaces import MessageSource
from ..core.models import EmailAddress
from .headers import Headers
from .html import merge_html_documents
from .part import SUBTYPE_HTML, SUBTYPE_PLAIN, Attachment, Part, gather_attachments


def _decode_addresses(records: Any) -> list[EmailAddress]:
    addresses: list[EmailAddress] = []
    for record in records or []:
        if isinstance(record, Mapping) and record.get("mailbox") is not None:
            addresses.append(
                EmailAddress(
                    mailbox=record["mailbox"],
                    host=record.get("host"),
                    name=record.get("personal"),
                )
            )
    return addresses


def _as_text(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


class BaseMessage(Part):
    """Accessors shared by top-level and embedded messages."""

    def __init__(
        self,
        source: MessageSource,
        mailbox: str,
        number: int,
        part_number: str | None,
        structure: Mapping[str, Any],
        headers: Headers,
        settings: DecodingSettings | None = None,
    ) -> None:
        # pylint: disable=too-many-arguments
        super().__init__(source, mailbox, number, part_number, structure, settings)
        self._headers = headers
        self._attachments: list[Attachment] | None = None
        self._attachments_lock = Lock()

    # Headers -----------------------------------------------------------------
    def get_headers(self) -> Headers:
        return self._headers

    def get_id(self) -> str | None:
        """Return the Message-ID, in its ``<...>`` form."""
        return self._headers.get("message_id")

    def get_subject(self) -> str | None:
        return self._headers.get("subject")

    def get_size(self) -> int | str | None:
        return self._headers.get("size")

    def get_date(self) -> datetime | None:
        """Return the parsed Date header, or ``None`` when it is absent.

        Raises :class:`~inbox_mime.core.errors.InvalidDateHeaderError` when
        the header is present but cannot be parsed.
        """
        date_header = self._headers.get("date")
        if date_header is None:
            return None
        return parse_date_header(date_header)

    def get_in_reply_to(self) -> list[str]:
        value = self._headers.get("in_reply_to")
        return value.split() if value else []

    def get_references(self) -> list[str]:
        value = self._headers.get("references")
        return value.split() if value else []

    def get_from(self) -> EmailAddress | None:
        addresses = self._addresses("from")
        return addresses[0] if addresses else None

    def get_to(self) -> list[EmailAddress]:
        return self._addresses("to")

    def get_cc(self) -> list[EmailAddress]:
        return self._addresses("cc")

    def get_bcc(self) -> list[EmailAddress]:
        return self._addresses("bcc")

    def get_reply_to(self) -> list[EmailAddress]:
        return self._addresses("reply_to")

    def get_sender(self) -> list[EmailAddress]:
        return self._addresses("sender")

    def get_return_path(self) -> list[EmailAddress]:
        return self._addresses("return_path")

    def _addresses(self, header: str) -> list[EmailAddress]:
        return _decode_addresses(self._headers.get(header))

    # Bodies ------------------------------------------------------------------
    def get_all_contents_by_subtype(self, subtype: str) -> list[str | bytes]:
        """Return the decoded content of every descendant of ``subtype``.

        Descendants are visited depth first, parents before children. A
        message without matching parts but of the requested subtype itself
        yields its own content.
        """
        wanted = subtype.lower()
        contents = [
            part.get_decoded_content()
            for part in self.descendants()
            if part.subtype == wanted
        ]
        if contents:
            return contents
        if self.subtype == wanted:
            return [self.get_decoded_content()]
        return []

    def get_body_html(self) -> str | None:
        html_parts = self.get_all_contents_by_subtype(SUBTYPE_HTML)
        return _as_text(html_parts[0]) if html_parts else None

    def get_body_html_parts(self) -> list[str]:
        return [_as_text(part) for part in self.get_all_contents_by_subtype(SUBTYPE_HTML)]

    def get_complete_body_html(self) -> str | None:
        """Return all HTML parts merged into one document."""
        html_parts = self.get_body_html_parts()
        if not html_parts:
            return None
        if len(html_parts) == 1:
            return html_parts[0]
        return merge_html_documents(html_parts, self._settings.html_parser)

    def get_body_text(self) -> str | None:
        plain_parts = self.get_all_contents_by_subtype(SUBTYPE_PLAIN)
        return _as_text(plain_parts[0]) if plain_parts else None

    def get_complete_body_text(self) -> str | None:
        """Return all plain text parts joined by newlines."""
        plain_parts = self.get_all_contents_by_subtype(SUBTYPE_PLAIN)
        if not plain_parts:
            return None
        return "\n".join(_as_text(part) for part in plain_parts)

    # Attachments -------------------------------------------------------------
    def get_attachments(self) -> list[Attachment]:
        """Return the attachments found anywhere below this message."""
        if self._attachments is None:
            with self._attachments_lock:
                if self._attachments is None:
                    self._attachments = gather_attachments(self)
        return self._attachments

    def has_attachments(self) -> bool:
        return len(self.get_attachments()) > 0


class Message(BaseMessage):
    """A top-level message of a mailbox."""

    def __init__(
        self,
        source: MessageSource,
        mailbox: str,
        number: int,
        structure: Mapping[str, Any],
        headers: Headers,
        settings: DecodingSettings | None = None,
    ) -> None:
        # pylint: disable=too-many-arguments
        super().__init__(source, mailbox, number, None, structure, headers, settings)

    @property
    def mailbox(self) -> str:
        return self._mailbox

    def __repr__(self) -> str:
        return f"Message(mailbox={self._mailbox!r}, number={self._number!r})"


class EmbeddedMessage(BaseMessage):
    """A ``message/rfc822`` attachment read as a message of its own."""


__all__ = ["BaseMessage", "EmbeddedMessage", "Message"]
