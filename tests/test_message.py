"""Tests for message accessors built on the part tree."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from inbox_mime.core.errors import InvalidDateHeaderError
from inbox_mime.core.models import EmailAddress
from inbox_mime.message import EmbeddedMessage, Headers, Message


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


def text_part(subtype: str, **extra: Any) -> dict[str, Any]:
    return {
        "type": "text",
        "subtype": subtype,
        "encoding": "7bit",
        "parameters": [{"attribute": "charset", "value": "utf-8"}],
        **extra,
    }


def make_message(
    structure: dict[str, Any],
    sections: dict[str, bytes] | None = None,
    headers: dict[str, Any] | None = None,
) -> Message:
    return Message(DummySource(sections), "INBOX", 3, structure, Headers(headers or {}))


def alternative_message() -> Message:
    structure = {
        "type": "multipart",
        "subtype": "MIXED",
        "parts": [
            {
                "type": "multipart",
                "subtype": "ALTERNATIVE",
                "parts": [text_part("PLAIN"), text_part("HTML")],
            },
            text_part("PLAIN"),
            text_part("HTML"),
        ],
    }
    sections = {
        "1.1": b"first text",
        "1.2": b"<html><body><p>A</p></body></html>",
        "2": b"second text",
        "3": b"<html><body><p>B</p></body></html>",
    }
    return make_message(structure, sections)


def test_address_accessors_skip_malformed_records() -> None:
    raw_to = [
        {"mailbox": "alice", "host": "example.com", "personal": "Alice"},
        {"host": "example.org", "personal": "No Mailbox"},
        {"mailbox": "bob", "host": "example.org"},
    ]
    message = make_message(
        text_part("PLAIN"),
        headers={
            "from": [{"mailbox": "jane", "host": "example.com", "personal": "Jane"}],
            "to": raw_to,
        },
    )

    assert message.get_from() == EmailAddress("jane", "example.com", "Jane")
    assert [address.address for address in message.get_to()] == [
        "alice@example.com",
        "bob@example.org",
    ]
    assert message.get_headers()["to"][1] == {"host": "example.org", "personal": "No Mailbox"}
    assert message.get_cc() == []
    assert message.get_reply_to() == []
    assert message.get_sender() == []
    assert message.get_return_path() == []
    assert message.get_bcc() == []


def test_from_is_none_without_valid_record() -> None:
    message = make_message(text_part("PLAIN"), headers={"from": [{"host": "x.org"}]})

    assert message.get_from() is None


def test_simple_header_accessors() -> None:
    message = make_message(
        text_part("PLAIN"),
        headers={
            "message_id": "<id@example.com>",
            "subject": "Status",
            "size": 2048,
            "date": "Fri, 21 Nov 1997 09:55:06 -0600",
            "in_reply_to": "<parent@example.com>",
            "references": "<root@example.com> <parent@example.com>",
        },
    )

    assert message.get_id() == "<id@example.com>"
    assert message.get_subject() == "Status"
    assert message.get_size() == 2048
    assert message.get_date() == datetime(1997, 11, 21, 15, 55, 6, tzinfo=UTC)
    assert message.get_in_reply_to() == ["<parent@example.com>"]
    assert message.get_references() == ["<root@example.com>", "<parent@example.com>"]
    assert message.number == 3
    assert message.mailbox == "INBOX"


def test_missing_headers_resolve_to_empty_results() -> None:
    message = make_message(text_part("PLAIN"))

    assert message.get_id() is None
    assert message.get_subject() is None
    assert message.get_date() is None
    assert message.get_in_reply_to() == []
    assert message.get_references() == []


def test_invalid_date_surfaces_typed_error() -> None:
    message = make_message(text_part("PLAIN"), headers={"date": "sometime soon"})

    with pytest.raises(InvalidDateHeaderError) as excinfo:
        message.get_date()
    assert excinfo.value.raw_value == "sometime soon"


def test_contents_by_subtype_are_collected_in_pre_order() -> None:
    message = alternative_message()

    assert message.get_all_contents_by_subtype("plain") == ["first text", "second text"]
    assert message.get_all_contents_by_subtype("PLAIN") == ["first text", "second text"]
    assert message.get_all_contents_by_subtype("calendar") == []
    assert message.get_body_text() == "first text"
    assert message.get_body_html() == "<html><body><p>A</p></body></html>"
    assert message.get_complete_body_text() == "first text\nsecond text"


def test_contents_by_subtype_are_idempotent() -> None:
    message = alternative_message()

    first = message.get_all_contents_by_subtype("html")
    second = message.get_all_contents_by_subtype("html")

    assert first == second
    assert message.get_body_html_parts() == first


def test_single_part_message_falls_back_to_own_content() -> None:
    message = make_message(text_part("PLAIN"), {"1": b"only body"})

    assert message.get_all_contents_by_subtype("plain") == ["only body"]
    assert message.get_body_text() == "only body"
    assert message.get_complete_body_text() == "only body"
    assert message.get_body_html() is None
    assert message.get_complete_body_html() is None


def test_complete_body_html_merges_documents() -> None:
    merged = alternative_message().get_complete_body_html()

    assert merged is not None
    assert merged.count("<p>A</p>") == 1
    assert merged.count("<p>B</p>") == 1
    assert merged.index("<p>A</p>") < merged.index("<p>B</p>")
    assert merged.count("<html>") == 1


def test_complete_body_html_returns_single_part_verbatim() -> None:
    html = "<html><head><title>t</title></head><body><p>only</p></body></html>"
    message = make_message(text_part("HTML"), {"1": html.encode()})

    assert message.get_complete_body_html() == html


def test_attachments_exclude_root_and_are_cached() -> None:
    structure = {
        "type": "multipart",
        "subtype": "MIXED",
        "parts": [
            text_part("PLAIN"),
            {
                "type": "multipart",
                "subtype": "MIXED",
                "parts": [
                    {
                        "type": "application",
                        "subtype": "PDF",
                        "encoding": "base64",
                        "disposition": "attachment",
                        "dparameters": [{"attribute": "filename", "value": "doc.pdf"}],
                    }
                ],
            },
        ],
    }
    message = make_message(structure, {"2.1": b"JVBERi0="})

    attachments = message.get_attachments()

    assert len(attachments) == 1
    assert attachments[0].part_number == "2.1"
    assert attachments[0].filename == "doc.pdf"
    assert attachments[0].get_decoded_content() == b"%PDF-"
    assert message.get_attachments() is attachments
    assert message.has_attachments()


def test_message_attachment_root_is_never_counted() -> None:
    structure = {
        "type": "application",
        "subtype": "PDF",
        "disposition": "attachment",
        "dparameters": [{"attribute": "filename", "value": "doc.pdf"}],
    }
    message = make_message(structure)

    assert message.get_attachments() == []
    assert not message.has_attachments()


def test_embedded_message_reads_its_own_headers_and_parts() -> None:
    structure = {
        "type": "multipart",
        "subtype": "MIXED",
        "parts": [
            text_part("PLAIN"),
            {
                "type": "message",
                "subtype": "RFC822",
                "disposition": "attachment",
                "parts": [
                    {
                        "type": "multipart",
                        "subtype": "ALTERNATIVE",
                        "parts": [text_part("PLAIN"), text_part("HTML")],
                    }
                ],
            },
        ],
    }
    sections = {
        "1": b"outer",
        "2": (
            b"From: Inner Sender <inner@example.com>\r\n"
            b"Subject: =?utf-8?q?Forwarded_r=C3=A9sum=C3=A9?=\r\n"
            b"Content-Type: multipart/alternative; boundary=b\r\n"
            b"\r\n"
            b"--b\r\n...\r\n--b--\r\n"
        ),
        "2.1": b"inner text",
        "2.2": b"<p>inner</p>",
    }
    message = make_message(structure, sections)

    attachment = message.get_attachments()[0]
    embedded = attachment.get_embedded_message()

    assert isinstance(embedded, EmbeddedMessage)
    assert embedded.get_subject() == "Forwarded résumé"
    assert embedded.get_from() == EmailAddress("inner", "example.com", "Inner Sender")
    assert [part.part_number for part in embedded.get_parts()] == ["2.1", "2.2"]
    assert embedded.get_body_text() == "inner text"
    assert embedded.get_body_html() == "<p>inner</p>"
    assert message.get_body_text() == "outer"
