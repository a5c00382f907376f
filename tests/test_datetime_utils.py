"""Tests for Date header normalization and search date formatting."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from inbox_mime.core.datetime_utils import (
    format_search_date,
    normalize_date_header,
    parse_date_header,
)
from inbox_mime.core.errors import InvalidDateHeaderError

EXPECTED = datetime(1997, 11, 21, 9, 55, 6, tzinfo=timezone(timedelta(hours=-6)))


@pytest.mark.parametrize(
    "raw",
    [
        "Fri, 21 Nov 1997 09:55:06 -0600",
        "21 Nov 1997 09:55:06 -0600",
        "21 11 97 09:55:06 -0600",
        "21 11 1997 09:55:06 -0600",
        "Fri, 21 Nov 1997 09:55:06 -0600 (MDT)",
        "Fri, 21 Nov 1997 09:55:06 -0600 <relay.example.com>",
        "Fri, 21 Nov 1997 09:55:06 -06:00",
        "21 11 1997 09:55:06 -06:00",
    ],
)
def test_variants_parse_to_same_instant(raw: str) -> None:
    assert parse_date_header(raw) == EXPECTED


def test_missing_timezone_is_utc() -> None:
    parsed = parse_date_header("21 Nov 1997 09:55:06")

    assert parsed == datetime(1997, 11, 21, 9, 55, 6, tzinfo=UTC)
    assert parsed.utcoffset() == timedelta(0)


def test_ut_zone_is_utc() -> None:
    assert parse_date_header("Fri, 21 Nov 1997 09:55:06 UT") == datetime(
        1997, 11, 21, 9, 55, 6, tzinfo=UTC
    )


def test_normalization_passes_run_in_order() -> None:
    assert (
        normalize_date_header("Fri, 21 Nov 1997 09:55:06 -0600 (MDT)")
        == "21 Nov 1997 09:55:06 -0600"
    )
    assert normalize_date_header("21 11 97 09:55:06") == "97-11-21 09:55:06 +0000"
    assert normalize_date_header("21 Nov 1997 09:55:06 -06:00") == (
        "21 Nov 1997 09:55:06 -0600"
    )


def test_unparsable_header_raises_with_raw_value() -> None:
    with pytest.raises(InvalidDateHeaderError) as excinfo:
        parse_date_header("not a date at all")

    assert excinfo.value.raw_value == "not a date at all"
    assert isinstance(excinfo.value, ValueError)


def test_format_search_date_uses_imap_layout() -> None:
    assert format_search_date(date(2024, 3, 5)) == "05-Mar-2024"
    assert format_search_date(datetime(1999, 12, 31, 23, 59)) == "31-Dec-1999"
