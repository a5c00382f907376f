"""MIME part tree reconstructed from protocol body-structure snapshots."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from pathlib import PurePosixPath
from threading import Lock
from typing import TYPE_CHECKING, Any

from ..core.config import DecodingSettings
from ..core.errors import NotEmbeddedMessageError
from ..core.interfaces import MessageSource
from .headers import Headers, header_snapshot_from_bytes
from .parameters import PartParameters
from .transcoding import (
    ENCODING_7BIT,
    ENCODING_8BIT,
    ENCODING_BASE64,
    ENCODING_BINARY,
    ENCODING_QUOTED_PRINTABLE,
    ENCODING_UNKNOWN,
    decode_text,
    decode_transfer_encoding,
)

if TYPE_CHECKING:
    from .message import EmbeddedMessage

LOGGER = logging.getLogger(__name__)

TYPE_TEXT = "text"
TYPE_MULTIPART = "multipart"
TYPE_MESSAGE = "message"
TYPE_APPLICATION = "application"
TYPE_AUDIO = "audio"
TYPE_IMAGE = "image"
TYPE_VIDEO = "video"
TYPE_MODEL = "model"
TYPE_OTHER = "other"

SUBTYPE_PLAIN = "plain"
SUBTYPE_HTML = "html"
SUBTYPE_RFC822 = "rfc822"

DISPOSITION_ATTACHMENT = "attachment"
DISPOSITION_INLINE = "inline"

# Index order of the numeric codes c-client style servers report.
_TYPES = (
    TYPE_TEXT,
    TYPE_MULTIPART,
    TYPE_MESSAGE,
    TYPE_APPLICATION,
    TYPE_AUDIO,
    TYPE_IMAGE,
    TYPE_VIDEO,
    TYPE_MODEL,
    TYPE_OTHER,
)
_ENCODINGS = (
    ENCODING_7BIT,
    ENCODING_8BIT,
    ENCODING_BINARY,
    ENCODING_BASE64,
    ENCODING_QUOTED_PRINTABLE,
    ENCODING_UNKNOWN,
)
_BODY_SUBTYPES = (SUBTYPE_PLAIN, SUBTYPE_HTML)


def _resolve_code(value: Any, names: Sequence[str], default: str) -> str:
    if value is None:
        return default
    if isinstance(value, int):
        return names[value] if 0 <= value < len(names) else names[-1]
    return str(value).lower()


def _lower_or_none(value: Any) -> str | None:
    return str(value).lower() if value else None


def is_attachment_structure(structure: Mapping[str, Any]) -> bool:
    """Tell whether a structure snapshot describes an attachment.

    Multipart containers never qualify. Parts with an ``attachment``
    disposition always do. ``inline`` parts qualify when they carry a file
    name and are not a plain or HTML body; parts without a disposition
    qualify when they carry a file name.
    """
    if _resolve_code(structure.get("type"), _TYPES, TYPE_OTHER) == TYPE_MULTIPART:
        return False
    parameters = PartParameters.from_structure(structure)
    has_filename = "filename" in parameters or "name" in parameters
    disposition = _lower_or_none(structure.get("disposition"))
    if disposition == DISPOSITION_ATTACHMENT:
        return True
    if disposition == DISPOSITION_INLINE:
        subtype = _lower_or_none(structure.get("subtype"))
        return has_filename and subtype not in _BODY_SUBTYPES
    return has_filename


class Part:
    """One node of a MIME part tree.

    Children are built eagerly from the structure snapshot; the section
    content is fetched from the message source on first use and cached.
    """

    def __init__(
        self,
        source: MessageSource,
        mailbox: str,
        number: int,
        part_number: str | None,
        structure: Mapping[str, Any],
        settings: DecodingSettings | None = None,
    ) -> None:
        self._source = source
        self._mailbox = mailbox
        self._number = number
        self._part_number = part_number
        self._structure = structure
        self._settings = settings or DecodingSettings()
        self._type = _resolve_code(structure.get("type"), _TYPES, TYPE_OTHER)
        self._subtype = _lower_or_none(structure.get("subtype"))
        self._encoding = _resolve_code(
            structure.get("encoding"), _ENCODINGS, ENCODING_7BIT
        )
        self._disposition = _lower_or_none(structure.get("disposition"))
        self._parameters = PartParameters.from_structure(structure)
        self._content: bytes | None = None
        self._content_lock = Lock()
        self._parts = tuple(self._build_children())

    # Structure ---------------------------------------------------------------
    @property
    def number(self) -> int:
        """Message number the part belongs to."""
        return self._number

    @property
    def part_number(self) -> str | None:
        """Dotted section path, ``None`` for the top-level message."""
        return self._part_number

    @property
    def type(self) -> str:
        return self._type

    @property
    def subtype(self) -> str | None:
        return self._subtype

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def disposition(self) -> str | None:
        return self._disposition

    @property
    def parameters(self) -> PartParameters:
        return self._parameters

    @property
    def charset(self) -> str | None:
        return self._parameters.get("charset")

    @property
    def size(self) -> int | None:
        return self._structure.get("bytes")

    @property
    def lines(self) -> int | None:
        return self._structure.get("lines")

    @property
    def content_id(self) -> str | None:
        return self._structure.get("id")

    @property
    def description(self) -> str | None:
        return self._structure.get("description")

    def is_container(self) -> bool:
        """True for multipart parts and messages wrapping other parts."""
        return self._type == TYPE_MULTIPART or self.has_children()

    def get_parts(self) -> tuple[Part, ...]:
        """Return the direct children in protocol order."""
        return self._parts

    def has_children(self) -> bool:
        return len(self._parts) > 0

    def walk(self) -> Iterator[Part]:
        """Yield this part, then every descendant depth first."""
        yield self
        for child in self._parts:
            yield from child.walk()

    def descendants(self) -> Iterator[Part]:
        """Yield every descendant depth first, excluding this part."""
        for child in self._parts:
            yield from child.walk()

    def __iter__(self) -> Iterator[Part]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    # Content -----------------------------------------------------------------
    def get_content(self) -> bytes:
        """Return the raw, still transfer-encoded section bytes."""
        if self._type == TYPE_MULTIPART:
            return b""
        if self._content is None:
            with self._content_lock:
                if self._content is None:
                    section = self._part_number or "1"
                    LOGGER.debug(
                        "Fetching section %s of message %s in %s",
                        section,
                        self._number,
                        self._mailbox,
                    )
                    self._content = self._source.fetch_part_body(
                        self._mailbox, self._number, section
                    )
        return self._content

    def get_decoded_content(self) -> str | bytes:
        """Return the content with its transfer encoding undone.

        Text parts are transcoded from their charset to ``str``; other parts
        are returned as ``bytes``.
        """
        content = decode_transfer_encoding(self.get_content(), self._encoding)
        if self._type == TYPE_TEXT:
            return decode_text(content, self.charset, self._settings)
        return content

    # Tree construction -------------------------------------------------------
    def _child_structures(self) -> list[Mapping[str, Any]]:
        structures = list(self._structure.get("parts") or [])
        # An encapsulated multipart message is addressed through its own parts.
        if (
            self._type == TYPE_MESSAGE
            and self._subtype == SUBTYPE_RFC822
            and len(structures) == 1
            and structures[0].get("parts")
        ):
            structures = list(structures[0]["parts"])
        return structures

    def _child_number(self, index: int) -> str:
        if self._part_number is None:
            return str(index)
        return f"{self._part_number}.{index}"

    def _build_children(self) -> Iterator[Part]:
        for index, structure in enumerate(self._child_structures(), start=1):
            part_class = Attachment if is_attachment_structure(structure) else Part
            yield part_class(
                self._source,
                self._mailbox,
                self._number,
                self._child_number(index),
                structure,
                self._settings,
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(part_number={self._part_number!r}, "
            f"type={self._type!r}, subtype={self._subtype!r})"
        )


class Attachment(Part):
    """A part meant to be saved rather than rendered as the message body."""

    @property
    def filename(self) -> str | None:
        return self._parameters.get("filename") or self._parameters.get("name")

    @property
    def file_extension(self) -> str | None:
        if not self.filename:
            return None
        suffix = PurePosixPath(self.filename).suffix
        return suffix[1:] if suffix else None

    def is_embedded_message(self) -> bool:
        """True when the attachment is a complete ``message/rfc822`` message."""
        return self._type == TYPE_MESSAGE and self._subtype == SUBTYPE_RFC822

    def get_embedded_message(self) -> EmbeddedMessage:
        """Open the attachment as a message with its own headers and parts."""
        # pylint: disable=import-outside-toplevel
        from .message import EmbeddedMessage

        if not self.is_embedded_message():
            raise NotEmbeddedMessageError(
                f"Attachment {self._part_number} is not an embedded message"
            )
        raw = decode_transfer_encoding(self.get_content(), self._encoding)
        return EmbeddedMessage(
            self._source,
            self._mailbox,
            self._number,
            self._part_number,
            self._structure,
            Headers(header_snapshot_from_bytes(raw)),
            self._settings,
        )


def gather_attachments(part: Part) -> list[Attachment]:
    """Collect attachments below ``part`` in pre-order; ``part`` is excluded."""
    return [child for child in part.descendants() if isinstance(child, Attachment)]


__all__ = [
    "Attachment",
    "DISPOSITION_ATTACHMENT",
    "DISPOSITION_INLINE",
    "Part",
    "SUBTYPE_HTML",
    "SUBTYPE_PLAIN",
    "SUBTYPE_RFC822",
    "TYPE_APPLICATION",
    "TYPE_AUDIO",
    "TYPE_IMAGE",
    "TYPE_MESSAGE",
    "TYPE_MODEL",
    "TYPE_MULTIPART",
    "TYPE_OTHER",
    "TYPE_TEXT",
    "TYPE_VIDEO",
    "gather_attachments",
    "is_attachment_structure",
]
