"""Search predicates serialized to IMAP ``SEARCH`` keys (RFC 3501 6.4.4).

Conditions form a closed set of frozen dataclasses. Nothing is evaluated
locally: :func:`serialize` renders a tree into the query string the server
evaluates. Rendering is deterministic and keeps operands in the order
they were composed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import TypeAlias

from ..core.datetime_utils import format_search_date, shift_days
from ..core.errors import EmptySearchValueError, UnsupportedOperatorError

FIELD_INTERNAL_DATE = "internal"
FIELD_SENT_DATE = "sent"

_TEXT_KEYWORDS = {
    "subject": "SUBJECT",
    "body": "BODY",
    "text": "TEXT",
    "from": "FROM",
    "to": "TO",
    "cc": "CC",
    "bcc": "BCC",
}

_SYSTEM_FLAGS = {
    "seen": "SEEN",
    "unseen": "UNSEEN",
    "answered": "ANSWERED",
    "unanswered": "UNANSWERED",
    "flagged": "FLAGGED",
    "unflagged": "UNFLAGGED",
    "deleted": "DELETED",
    "undeleted": "UNDELETED",
    "draft": "DRAFT",
    "undraft": "UNDRAFT",
    "recent": "RECENT",
    "new": "NEW",
    "old": "OLD",
}

# operator -> (keyword suffix, days added to the date)
_DATE_OPERATORS = {
    "<": ("BEFORE", 0),
    "<=": ("BEFORE", 1),
    "=": ("ON", 0),
    ">=": ("SINCE", 0),
    ">": ("SINCE", 1),
}
_DATE_FIELDS = {FIELD_INTERNAL_DATE: "", FIELD_SENT_DATE: "SENT"}

# operator -> (keyword, offset added to the size)
_SIZE_OPERATORS = {
    ">": ("LARGER", 0),
    ">=": ("LARGER", -1),
    "<": ("SMALLER", 0),
    "<=": ("SMALLER", 1),
}

_ATOM_SPECIALS = re.compile(r'[\x00-\x20\x7f-\U0010ffff(){%*"\\\]]')
_LINE_BREAK = re.compile(r"[\r\n]")


def quote_search_value(value: str) -> str:
    """Render ``value`` as an atom, or as a quoted string when it must be.

    Non-ASCII text stays inside the quoted string rather than becoming a
    ``{n}`` literal, so the query must be sent with ``CHARSET UTF-8`` to a
    server accepting UTF-8 quoted strings (RFC 6855).
    """
    if value and _ATOM_SPECIALS.search(value) is None:
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _reject_line_breaks(value: str) -> None:
    if _LINE_BREAK.search(value):
        raise ValueError("Search values cannot contain line breaks")


class _Composable:
    """Operators shared by every condition: ``&``, ``|`` and ``~``."""

    __slots__ = ()

    def __and__(self, other: SearchCondition) -> And:
        return And(self, other)  # type: ignore[arg-type]

    def __or__(self, other: SearchCondition) -> Or:
        return Or(self, other)  # type: ignore[arg-type]

    def __invert__(self) -> Not:
        return Not(self)  # type: ignore[arg-type]

    def serialize(self) -> str:
        return serialize(self)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return self.serialize()


@dataclass(frozen=True, slots=True)
class All(_Composable):
    """Matches every message."""


@dataclass(frozen=True, slots=True)
class TextMatch(_Composable):
    """Substring match on a search field or, for any other name, a header.

    An empty value is only meaningful for headers, where it matches every
    message carrying the header.
    """

    field: str
    value: str

    def __post_init__(self) -> None:
        if not self.field:
            raise EmptySearchValueError("Text search field cannot be empty")
        _reject_line_breaks(self.field)
        _reject_line_breaks(self.value)
        if not self.value and self.is_header_match():
            return
        if not self.value:
            raise EmptySearchValueError(f"Search value for {self.field} cannot be empty")

    def is_header_match(self) -> bool:
        return self.field.lower() not in _TEXT_KEYWORDS


@dataclass(frozen=True, slots=True)
class Flag(_Composable):
    """Matches messages by system flag (``seen``, ``\\Flagged``) or keyword."""

    name: str

    def __post_init__(self) -> None:
        if not self.name.lstrip("\\"):
            raise EmptySearchValueError("Flag name cannot be empty")
        if self.name.startswith("\\") and self.keyword is None:
            raise ValueError(f"Unknown system flag {self.name!r}")
        if self.keyword is None and _ATOM_SPECIALS.search(self.name):
            raise ValueError(f"Invalid keyword flag {self.name!r}")

    @property
    def keyword(self) -> str | None:
        """Search keyword of a system flag, ``None`` for custom keywords."""
        return _SYSTEM_FLAGS.get(self.name.lstrip("\\").lower())


@dataclass(frozen=True, slots=True)
class DateCompare(_Composable):
    """Compares the internal or sent date with a calendar day."""

    field: str
    op: str
    date: date | datetime

    def __post_init__(self) -> None:
        if self.field not in _DATE_FIELDS:
            raise ValueError(f"Unknown date field {self.field!r}")
        if self.op not in _DATE_OPERATORS:
            raise UnsupportedOperatorError(self.op, "date")


@dataclass(frozen=True, slots=True)
class SizeCompare(_Composable):
    """Compares the RFC 822 size of a message with a byte count."""

    op: str
    size: int

    def __post_init__(self) -> None:
        if self.op not in _SIZE_OPERATORS:
            raise UnsupportedOperatorError(self.op, "size")
        if self.size < 0:
            raise ValueError("Message size cannot be negative")


@dataclass(frozen=True, slots=True)
class Not(_Composable):
    inner: SearchCondition


@dataclass(frozen=True, slots=True)
class And(_Composable):
    left: SearchCondition
    right: SearchCondition


@dataclass(frozen=True, slots=True)
class Or(_Composable):
    left: SearchCondition
    right: SearchCondition


SearchCondition: TypeAlias = (
    All | TextMatch | Flag | DateCompare | SizeCompare | Not | And | Or
)


def _operand(condition: SearchCondition) -> str:
    """Serialize an operand of NOT/OR, grouping conjunctions."""
    rendered = serialize(condition)
    if isinstance(condition, And):
        return f"({rendered})"
    return rendered


def serialize(condition: SearchCondition) -> str:
    """Render a condition tree as an IMAP search key sequence."""
    match condition:
        case All():
            return "ALL"
        case TextMatch(field=field, value=value):
            keyword = _TEXT_KEYWORDS.get(field.lower())
            if keyword is None:
                return f"HEADER {quote_search_value(field)} {quote_search_value(value)}"
            return f"{keyword} {quote_search_value(value)}"
        case Flag(name=name):
            return condition.keyword or f"KEYWORD {name}"
        case DateCompare(field=field, op=op, date=day):
            suffix, shift = _DATE_OPERATORS[op]
            return f"{_DATE_FIELDS[field]}{suffix} {format_search_date(shift_days(day, shift))}"
        case SizeCompare(op=op, size=size):
            keyword, offset = _SIZE_OPERATORS[op]
            if size + offset < 0:
                return "ALL"
            return f"{keyword} {size + offset}"
        case Not(inner=inner):
            return f"NOT {_operand(inner)}"
        case Or(left=left, right=right):
            return f"OR {_operand(left)} {_operand(right)}"
        case And(left=left, right=right):
            return f"{serialize(left)} {serialize(right)}"
    raise TypeError(f"Unsupported search condition {condition!r}")


__all__ = [
    "All",
    "And",
    "DateCompare",
    "FIELD_INTERNAL_DATE",
    "FIELD_SENT_DATE",
    "Flag",
    "Not",
    "Or",
    "SearchCondition",
    "SizeCompare",
    "TextMatch",
    "quote_search_value",
    "serialize",
]
