"""Tests for the MIME part tree."""

# pylint: disable=protected-access

from __future__ import annotations

import base64
import quopri
from typing import Any

import pytest

from inbox_mime.core.config import DecodingSettings
from inbox_mime.core.errors import NotEmbeddedMessageError
from inbox_mime.message import Attachment, Part, is_attachment_structure


class DummySource:
    """Message source serving predetermined section bodies."""

    def __init__(self, sections: dict[str, bytes] | None = None) -> None:
        self.sections = sections or {}
        self.calls: list[str] = []

    def fetch_structure(self, mailbox: str, number: int) -> dict[str, Any]:
        raise AssertionError("Structure is passed in directly")

    def fetch_header_blob(self, mailbox: str, number: int) -> dict[str, Any]:
        raise AssertionError("Headers are passed in directly")

    def fetch_part_body(self, mailbox: str, number: int, part_path: str) -> bytes:
        self.calls.append(part_path)
        return self.sections[part_path]


def leaf(
    type_: str | int,
    subtype: str,
    *,
    encoding: str | int = "7bit",
    disposition: str | None = None,
    parameters: list[dict[str, str]] | None = None,
    dparameters: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    return {
        "type": type_,
        "subtype": subtype,
        "encoding": encoding,
        "disposition": disposition,
        "parameters": parameters or [],
        "dparameters": dparameters or [],
        "bytes": 10,
    }


def multipart(subtype: str, *parts: dict[str, Any]) -> dict[str, Any]:
    return {"type": "multipart", "subtype": subtype, "parts": list(parts)}


def build(structure: dict[str, Any], source: DummySource | None = None) -> Part:
    return Part(source or DummySource(), "INBOX", 7, None, structure)


def test_children_are_numbered_and_walked_in_pre_order() -> None:
    root = build(
        multipart(
            "MIXED",
            multipart("ALTERNATIVE", leaf("text", "PLAIN"), leaf("text", "HTML")),
            leaf(
                "application",
                "PDF",
                encoding="base64",
                disposition="attachment",
                dparameters=[{"attribute": "filename", "value": "report.pdf"}],
            ),
        )
    )

    assert [part.part_number for part in root.walk()] == [None, "1", "1.1", "1.2", "2"]
    assert [part.part_number for part in root.descendants()] == ["1", "1.1", "1.2", "2"]
    assert [part.part_number for part in root.get_parts()] == ["1", "2"]
    assert root.has_children()
    assert root.is_container()
    assert not root.get_parts()[1].has_children()
    assert isinstance(root.get_parts()[1], Attachment)


def test_numeric_type_and_encoding_codes_are_resolved() -> None:
    part = build(leaf(3, "OCTET-STREAM", encoding=3))

    assert part.type == "application"
    assert part.subtype == "octet-stream"
    assert part.encoding == "base64"


def test_out_of_range_codes_map_to_other_and_unknown() -> None:
    part = build(leaf(42, "X", encoding=9))

    assert part.type == "other"
    assert part.encoding == "unknown"


@pytest.mark.parametrize(
    ("encoding", "encode"),
    [
        ("base64", base64.encodebytes),
        ("quoted-printable", quopri.encodestring),
        ("7bit", lambda data: data),
        ("binary", lambda data: data),
    ],
)
def test_decoding_inverts_transfer_encoding(encoding: str, encode: Any) -> None:
    plain = b"\x00\x01 binary payload \xff with = signs\n" * 20
    source = DummySource({"1": encode(plain)})
    part = Part(source, "INBOX", 7, "1", leaf("application", "OCTET-STREAM", encoding=encoding))

    assert part.get_decoded_content() == plain


def test_base64_tolerates_missing_padding() -> None:
    source = DummySource({"1": b"aGVsbG8gd29ybGQ"})
    part = Part(source, "INBOX", 7, "1", leaf("application", "OCTET-STREAM", encoding="base64"))

    assert part.get_decoded_content() == b"hello world"


def test_text_is_transcoded_from_declared_charset() -> None:
    source = DummySource({"1": b"caf=E9"})
    part = Part(
        source,
        "INBOX",
        7,
        "1",
        leaf(
            "text",
            "PLAIN",
            encoding="quoted-printable",
            parameters=[{"attribute": "charset", "value": "iso-8859-1"}],
        ),
    )

    assert part.charset == "iso-8859-1"
    assert part.get_decoded_content() == "café"


@pytest.mark.parametrize("charset", [None, "x-unknown", "default"])
def test_missing_or_unknown_charset_falls_back(charset: str | None) -> None:
    parameters = [{"attribute": "charset", "value": charset}] if charset else []
    source = DummySource({"1": "café".encode("utf-8")})
    part = Part(source, "INBOX", 7, "1", leaf("text", "PLAIN", parameters=parameters))

    assert part.get_decoded_content() == "café"


def test_fallback_charset_comes_from_settings() -> None:
    source = DummySource({"1": b"caf\xe9"})
    part = Part(
        source,
        "INBOX",
        7,
        "1",
        leaf("text", "PLAIN"),
        DecodingSettings(fallback_charset="latin-1"),
    )

    assert part.get_decoded_content() == "café"


def test_content_is_fetched_once() -> None:
    source = DummySource({"2": b"data"})
    part = Part(source, "INBOX", 7, "2", leaf("application", "ZIP"))

    assert part.get_content() == b"data"
    assert part.get_content() == b"data"
    assert source.calls == ["2"]


def test_multipart_has_no_content_of_its_own() -> None:
    source = DummySource()
    root = build(multipart("MIXED", leaf("text", "PLAIN")), source)

    assert root.get_content() == b""
    assert source.calls == []


def test_single_part_root_fetches_first_section() -> None:
    source = DummySource({"1": b"just text"})
    root = build(leaf("text", "PLAIN"), source)

    assert root.get_decoded_content() == "just text"
    assert source.calls == ["1"]


@pytest.mark.parametrize(
    ("structure", "expected"),
    [
        (leaf("application", "PDF", disposition="attachment"), True),
        (leaf("text", "PLAIN", disposition="ATTACHMENT"), True),
        (
            leaf(
                "image",
                "PNG",
                disposition="inline",
                dparameters=[{"attribute": "filename", "value": "logo.png"}],
            ),
            True,
        ),
        (
            leaf(
                "text",
                "PLAIN",
                disposition="inline",
                dparameters=[{"attribute": "filename", "value": "body.txt"}],
            ),
            False,
        ),
        (leaf("image", "PNG", disposition="inline"), False),
        (
            leaf("application", "PDF", parameters=[{"attribute": "name", "value": "a.pdf"}]),
            True,
        ),
        (leaf("text", "HTML"), False),
        ({**multipart("MIXED"), "disposition": "attachment"}, False),
    ],
)
def test_attachment_qualification(structure: dict[str, Any], expected: bool) -> None:
    assert is_attachment_structure(structure) is expected


def test_attachment_exposes_filename_and_extension() -> None:
    root = build(
        multipart(
            "MIXED",
            leaf("text", "PLAIN"),
            leaf(
                "application",
                "PDF",
                disposition="attachment",
                parameters=[{"attribute": "name", "value": "fallback.PDF"}],
            ),
            leaf(
                "application",
                "OCTET-STREAM",
                disposition="attachment",
                dparameters=[{"attribute": "filename", "value": "archive.tar.gz"}],
            ),
            leaf("application", "OCTET-STREAM", disposition="attachment"),
        )
    )
    _, named, filed, anonymous = root.get_parts()

    assert isinstance(named, Attachment)
    assert named.filename == "fallback.PDF"
    assert named.file_extension == "PDF"
    assert isinstance(filed, Attachment)
    assert filed.file_extension == "gz"
    assert isinstance(anonymous, Attachment)
    assert anonymous.filename is None
    assert anonymous.file_extension is None


def test_encapsulated_multipart_is_flattened() -> None:
    embedded = {
        "type": "message",
        "subtype": "RFC822",
        "disposition": "attachment",
        "parts": [multipart("ALTERNATIVE", leaf("text", "PLAIN"), leaf("text", "HTML"))],
    }
    root = build(multipart("MIXED", leaf("text", "PLAIN"), embedded))
    attachment = root.get_parts()[1]

    assert isinstance(attachment, Attachment)
    assert attachment.is_embedded_message()
    assert [part.part_number for part in attachment.get_parts()] == ["2.1", "2.2"]


def test_non_message_attachment_cannot_be_opened_as_message() -> None:
    root = build(multipart("MIXED", leaf("application", "PDF", disposition="attachment")))
    attachment = root.get_parts()[0]

    assert isinstance(attachment, Attachment)
    with pytest.raises(NotEmbeddedMessageError):
        attachment.get_embedded_message()
