"""Normalization of raw header snapshots into typed header maps."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from email import policy
from email.message import Message as RawEmailMessage
from email.parser import BytesParser
from email.utils import getaddresses
from typing import Any

from ..core.errors import UnsupportedCharsetError
from .parameters import ParameterMap
from .transcoding import decode_encoded_words

LOGGER = logging.getLogger(__name__)

ADDRESS_HEADERS = (
    "from",
    "to",
    "cc",
    "bcc",
    "reply_to",
    "sender",
    "return_path",
)
TEXT_HEADERS = ("date", "subject")
SINGLE_HEADERS = ("message_id", "in_reply_to", "references", "date", "subject")


def normalize_header_name(name: str) -> str:
    """Lower-case a header name and use underscores instead of hyphens."""
    return name.lower().replace("-", "_")


def _decode_address_records(records: Any) -> list[Any]:
    decoded: list[Any] = []
    for record in records or []:
        if not isinstance(record, Mapping) or record.get("mailbox") is None:
            decoded.append(record)
            continue
        personal = record.get("personal")
        decoded.append(
            {
                **record,
                "host": record.get("host"),
                "personal": decode_encoded_words(personal)
                if personal is not None
                else None,
            }
        )
    return decoded


def _parse_header(key: str, value: Any) -> Any:
    if key == "msgno":
        return int(value)
    if key in ADDRESS_HEADERS:
        return _decode_address_records(value)
    if key in TEXT_HEADERS and isinstance(value, str):
        return decode_encoded_words(value)
    return value


class Headers(ParameterMap):
    """Message headers keyed by normalized (lower-case) header name.

    A header whose encoded words use a charset Python cannot decode, or
    whose value has the wrong shape (a non-numeric ``msgno``), is left out
    of the map; the remaining headers are still available.
    """

    def __init__(self, raw_headers: Mapping[str, Any]) -> None:
        super().__init__(self._parse_all(raw_headers))

    @staticmethod
    def _parse_all(raw_headers: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
        for raw_key, value in raw_headers.items():
            key = normalize_header_name(raw_key)
            try:
                yield key, _parse_header(key, value)
            except (UnsupportedCharsetError, TypeError, ValueError) as exc:
                LOGGER.debug("Skipping header %s: %s", key, exc)

    def __getitem__(self, key: str) -> Any:
        return super().__getitem__(normalize_header_name(key))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_header_name(key) in self._items


def _address_records(values: list[str]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for personal, address in getaddresses(values):
        record: dict[str, Any] = {"personal": personal or None}
        if address:
            mailbox, separator, host = address.rpartition("@")
            if separator:
                record.update(mailbox=mailbox, host=host)
            else:
                record.update(mailbox=address, host=None)
        records.append(record)
    return records


def header_snapshot_from_message(message: RawEmailMessage) -> dict[str, Any]:
    """Build a raw header snapshot from a parsed ``email`` message.

    Encoded words are kept as-is so that :class:`Headers` decodes them.
    """
    snapshot: dict[str, Any] = {}
    for name in ADDRESS_HEADERS:
        values = message.get_all(name.replace("_", "-"))
        if values:
            snapshot[name] = _address_records([str(value) for value in values])
    for name in SINGLE_HEADERS:
        value = message.get(name.replace("_", "-"))
        if value is not None:
            snapshot[name] = str(value)
    return snapshot


def header_snapshot_from_bytes(raw: bytes) -> dict[str, Any]:
    """Parse RFC 822 header bytes into a raw header snapshot."""
    parser = BytesParser(policy=policy.compat32)
    message = parser.parsebytes(raw, headersonly=True)
    snapshot = header_snapshot_from_message(message)
    snapshot["size"] = len(raw)
    return snapshot


__all__ = [
    "ADDRESS_HEADERS",
    "Headers",
    "header_snapshot_from_bytes",
    "header_snapshot_from_message",
    "normalize_header_name",
]
