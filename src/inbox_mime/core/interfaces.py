"""Protocol interfaces for the transport collaborator.

The message model never talks to a server itself. Whatever owns the
connection implements these protocols and hands over raw snapshots.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

StructureSnapshot = Mapping[str, Any]
HeaderSnapshot = Mapping[str, Any]


class MessageSource(Protocol):
    """Read access to the raw structure, headers and sections of a message."""

    def fetch_structure(self, mailbox: str, number: int) -> StructureSnapshot:
        """Return the body structure snapshot of a message."""
        raise NotImplementedError

    def fetch_header_blob(self, mailbox: str, number: int) -> HeaderSnapshot:
        """Return the raw header key/value snapshot of a message."""
        raise NotImplementedError

    def fetch_part_body(self, mailbox: str, number: int, part_path: str) -> bytes:
        """Return the still transfer-encoded bytes of one body section."""
        raise NotImplementedError


class SearchBackend(Protocol):
    """Server-side evaluation of serialized search queries."""

    def run_search(
        self,
        mailbox: str,
        query: str,
        sort_criteria: str | None = None,
        descending: bool = False,
        charset: str | None = None,
    ) -> Sequence[int]:
        """Return the message numbers matching ``query`` in server order."""
        raise NotImplementedError


class MessageTransport(MessageSource, SearchBackend, Protocol):
    """A transport offering both message reads and searches."""


__all__ = [
    "HeaderSnapshot",
    "MessageSource",
    "MessageTransport",
    "SearchBackend",
    "StructureSnapshot",
]
