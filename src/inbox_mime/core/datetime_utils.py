"""Datetime helpers for message Date headers and search queries.

Date headers found in the wild are frequently non-conformant, so
:func:`parse_date_header` rewrites the raw value through an ordered list of
normalization passes before handing it to a parser. Each pass assumes the
ones before it already ran:

1. drop commas
2. strip a leading weekday word
3. strip parenthetical comments, e.g. ``(CST)``
4. strip bracketed route text, e.g. ``<relay.example.com>``
5. map the ``UT`` zone abbreviation to ``UTC``
6. drop the colon from numeric offsets (``-06:00`` becomes ``-0600``)
7. append ``+0000`` when no numeric offset follows the time
8. reorder numeric ``DD MM YY(YY)`` dates to ``YY(YY)-MM-DD``
9. collapse whitespace
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from email.utils import parsedate_to_datetime

from .errors import InvalidDateHeaderError

__all__ = [
    "DATE_NORMALIZATION_PASSES",
    "format_search_date",
    "normalize_date_header",
    "parse_date_header",
    "shift_days",
]

_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

_WEEKDAY_PREFIX = re.compile(r"^[a-zA-Z]+ ?")
_COMMENT = re.compile(r"\(.*\)")
_ROUTE = re.compile(r"<.*>")
_UT_ZONE = re.compile(r"\bUT\b")
_COLON_OFFSET = re.compile(r"(?<=\s)([+\-]\d\d):(\d\d)\b")
_NUMERIC_OFFSET = re.compile(r"\d\d:\d\d:\d\d.* [+\-]\d\d:?\d\d")
_NUMERIC_DATE = re.compile(r"^(\d\d) (\d\d) (\d\d(?:\d\d)?) ")
_WHITESPACE = re.compile(r"\s+")

_NUMERIC_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%y-%m-%d %H:%M %z",
)


def _drop_commas(value: str) -> str:
    return value.replace(",", "")


def _strip_weekday(value: str) -> str:
    return _WEEKDAY_PREFIX.sub("", value, count=1)


def _strip_comments(value: str) -> str:
    return _COMMENT.sub("", value)


def _strip_routes(value: str) -> str:
    return _ROUTE.sub("", value)


def _expand_ut_zone(value: str) -> str:
    return _UT_ZONE.sub("UTC", value)


def _compact_offset(value: str) -> str:
    return _COLON_OFFSET.sub(r"\1\2", value)


def _default_timezone(value: str) -> str:
    if _NUMERIC_OFFSET.search(value) is None:
        return f"{value.rstrip()} +0000"
    return value


def _reorder_numeric_date(value: str) -> str:
    return _NUMERIC_DATE.sub(r"\3-\2-\1 ", value, count=1)


def _collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


DATE_NORMALIZATION_PASSES: tuple[Callable[[str], str], ...] = (
    _drop_commas,
    _strip_weekday,
    _strip_comments,
    _strip_routes,
    _expand_ut_zone,
    _compact_offset,
    _default_timezone,
    _reorder_numeric_date,
    _collapse_whitespace,
)


def normalize_date_header(value: str) -> str:
    """Run ``value`` through every normalization pass in order."""
    for normalize in DATE_NORMALIZATION_PASSES:
        value = normalize(value)
    return value


def _parse_normalized(value: str) -> datetime | None:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is not None:
        return parsed
    for date_format in _NUMERIC_FORMATS:
        try:
            return datetime.strptime(value, date_format)
        except ValueError:
            continue
    return None


def parse_date_header(raw_value: str) -> datetime:
    """Parse a Date header into a timezone-aware ``datetime``.

    Values without a timezone are interpreted as UTC. Raises
    :class:`InvalidDateHeaderError` carrying ``raw_value`` when the header
    cannot be parsed.
    """
    parsed = _parse_normalized(normalize_date_header(raw_value))
    if parsed is None:
        raise InvalidDateHeaderError(raw_value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def shift_days(value: date | datetime, days: int) -> date:
    """Return the calendar date ``days`` away from ``value``."""
    return _as_date(value) + timedelta(days=days)


def format_search_date(value: date | datetime) -> str:
    """Render ``value`` as an IMAP search date (``DD-Mon-YYYY``).

    Month names are always English; ``strftime("%b")`` would follow the
    process locale.
    """
    day = _as_date(value)
    return f"{day.day:02d}-{_MONTHS[day.month - 1]}-{day.year:04d}"
