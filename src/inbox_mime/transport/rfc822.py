"""In-memory message source backed by raw RFC 822 messages.

Useful for messages read from files or fetched whole (``RFC822``) by a
transport that cannot report body structures itself. Structure, header
and section snapshots are derived with the standard library parser and
have the same shape an IMAP server reports.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from email import policy
from email.message import Message as RawEmailMessage
from email.parser import BytesParser
from email.utils import collapse_rfc2231_value
from typing import Any

from ..core.errors import UnknownPartError
from ..core.interfaces import MessageSource
from ..message.headers import header_snapshot_from_message

LOGGER = logging.getLogger(__name__)

_RFC822 = "message/rfc822"


def _parameter_records(part: RawEmailMessage, header: str) -> list[dict[str, str]]:
    params = part.get_params(header=header) or []
    records: list[dict[str, str]] = []
    for attribute, value in params[1:]:
        if isinstance(value, tuple):
            value = collapse_rfc2231_value(value)
        records.append({"attribute": attribute, "value": value})
    return records


def _payload_bytes(part: RawEmailMessage) -> bytes:
    if part.get_content_type() == _RFC822:
        return part.get_payload(0).as_bytes()
    if part.is_multipart():
        return b""
    payload = part.get_payload()
    if isinstance(payload, bytes):
        return payload
    return payload.encode("utf-8", "surrogateescape")


def structure_from_message(part: RawEmailMessage) -> dict[str, Any]:
    """Describe ``part`` as a body-structure snapshot."""
    structure: dict[str, Any] = {
        "type": part.get_content_maintype(),
        "subtype": part.get_content_subtype().upper(),
        "encoding": str(part.get("Content-Transfer-Encoding", "7bit")).strip().lower(),
        "parameters": _parameter_records(part, "content-type"),
        "dparameters": _parameter_records(part, "content-disposition"),
        "disposition": part.get_content_disposition(),
        "id": part.get("Content-ID"),
        "description": part.get("Content-Description"),
    }
    if part.is_multipart():
        structure["parts"] = [
            structure_from_message(child) for child in part.get_payload()
        ]
    if part.get_content_type() == _RFC822 or not part.is_multipart():
        content = _payload_bytes(part)
        structure["bytes"] = len(content)
        if part.get_content_maintype() == "text":
            structure["lines"] = len(content.splitlines())
    return structure


def resolve_section(message: RawEmailMessage, part_path: str) -> RawEmailMessage:
    """Return the part an IMAP section path such as ``2.1`` designates."""
    current = message
    for depth, segment in enumerate(part_path.split(".")):
        if not segment.isdigit() or int(segment) < 1:
            raise UnknownPartError(f"Invalid section path {part_path!r}")
        index = int(segment) - 1
        container = current
        if container.get_content_type() == _RFC822:
            container = container.get_payload(0)
        elif depth > 0 and not container.is_multipart():
            raise UnknownPartError(f"Section {part_path!r} does not exist")
        if container.is_multipart():
            children = container.get_payload()
            if index >= len(children):
                raise UnknownPartError(f"Section {part_path!r} does not exist")
            current = children[index]
        elif index == 0:
            current = container
        else:
            raise UnknownPartError(f"Section {part_path!r} does not exist")
    return current


class Rfc822MessageSource(MessageSource):
    """Serve structure, headers and sections of raw messages held in memory."""

    def __init__(self, messages: Mapping[str, Mapping[int, bytes]] | None = None) -> None:
        self._raw: dict[str, dict[int, bytes]] = {}
        self._parsed: dict[tuple[str, int], RawEmailMessage] = {}
        self._parser = BytesParser(policy=policy.compat32)
        for mailbox, items in (messages or {}).items():
            for number, raw in items.items():
                self.add(mailbox, number, raw)

    def add(self, mailbox: str, number: int, raw: bytes) -> None:
        """Store a raw message under ``mailbox`` and message ``number``."""
        self._raw.setdefault(mailbox, {})[number] = raw
        self._parsed.pop((mailbox, number), None)

    def numbers(self, mailbox: str) -> list[int]:
        return sorted(self._raw.get(mailbox, {}))

    def fetch_structure(self, mailbox: str, number: int) -> dict[str, Any]:
        return structure_from_message(self._message(mailbox, number))

    def fetch_header_blob(self, mailbox: str, number: int) -> dict[str, Any]:
        snapshot = header_snapshot_from_message(self._message(mailbox, number))
        snapshot["size"] = len(self._raw[mailbox][number])
        snapshot["msgno"] = str(number)
        return snapshot

    def fetch_part_body(self, mailbox: str, number: int, part_path: str) -> bytes:
        LOGGER.debug("Resolving section %s of message %s", part_path, number)
        return _payload_bytes(resolve_section(self._message(mailbox, number), part_path))

    def _message(self, mailbox: str, number: int) -> RawEmailMessage:
        key = (mailbox, number)
        if key not in self._parsed:
            try:
                raw = self._raw[mailbox][number]
            except KeyError as exc:
                raise UnknownPartError(
                    f"Message {number} does not exist in {mailbox}"
                ) from exc
            self._parsed[key] = self._parser.parsebytes(raw)
        return self._parsed[key]


__all__ = ["Rfc822MessageSource", "resolve_section", "structure_from_message"]
