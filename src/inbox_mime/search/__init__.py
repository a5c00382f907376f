"""Composable search conditions rendered as IMAP SEARCH queries."""

from .conditions import (
    FIELD_INTERNAL_DATE,
    FIELD_SENT_DATE,
    All,
    And,
    DateCompare,
    Flag,
    Not,
    Or,
    SearchCondition,
    SizeCompare,
    TextMatch,
    quote_search_value,
    serialize,
)
from .expression import SearchExpression, all_of, any_of

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
    "SearchExpression",
    "SizeCompare",
    "TextMatch",
    "all_of",
    "any_of",
    "quote_search_value",
    "serialize",
]
