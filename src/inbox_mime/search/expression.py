"""Builder helpers assembling full search queries from conditions."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime
from functools import reduce

from .conditions import (
    FIELD_INTERNAL_DATE,
    All,
    And,
    DateCompare,
    Flag,
    Or,
    SearchCondition,
    SizeCompare,
    TextMatch,
    serialize,
)


class SearchExpression:
    """Ordered list of conditions that must all match.

    ``str(expression)`` renders the conditions left to right; an empty
    expression matches every message.
    """

    def __init__(self, conditions: Iterable[SearchCondition] = ()) -> None:
        self._conditions: list[SearchCondition] = list(conditions)

    def add(self, condition: SearchCondition) -> SearchExpression:
        """Append a condition and return the expression for chaining."""
        self._conditions.append(condition)
        return self

    @property
    def conditions(self) -> tuple[SearchCondition, ...]:
        return tuple(self._conditions)

    def to_condition(self) -> SearchCondition:
        """Fold the expression into a single condition tree."""
        return all_of(*self._conditions)

    def serialize(self) -> str:
        if not self._conditions:
            return "ALL"
        return " ".join(serialize(condition) for condition in self._conditions)

    def __iter__(self) -> Iterator[SearchCondition]:
        return iter(self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)

    def __str__(self) -> str:
        return self.serialize()

    def __repr__(self) -> str:
        return f"SearchExpression({self._conditions!r})"


def all_of(*conditions: SearchCondition) -> SearchCondition:
    """Conjunction of ``conditions``, left to right; no conditions is ``ALL``."""
    if not conditions:
        return All()
    return reduce(And, conditions)


def any_of(*conditions: SearchCondition) -> SearchCondition:
    """Disjunction of ``conditions``, left to right."""
    if not conditions:
        raise ValueError("any_of() needs at least one condition")
    return reduce(Or, conditions)


def subject(value: str) -> TextMatch:
    return TextMatch("subject", value)


def body(value: str) -> TextMatch:
    return TextMatch("body", value)


def text(value: str) -> TextMatch:
    return TextMatch("text", value)


def sender(value: str) -> TextMatch:
    return TextMatch("from", value)


def to(value: str) -> TextMatch:
    return TextMatch("to", value)


def cc(value: str) -> TextMatch:
    return TextMatch("cc", value)


def bcc(value: str) -> TextMatch:
    return TextMatch("bcc", value)


def header(name: str, value: str = "") -> TextMatch:
    """Match a header by name; an empty value matches its mere presence."""
    return TextMatch(name, value)


def since(day: date | datetime, field: str = FIELD_INTERNAL_DATE) -> DateCompare:
    return DateCompare(field, ">=", day)


def before(day: date | datetime, field: str = FIELD_INTERNAL_DATE) -> DateCompare:
    return DateCompare(field, "<", day)


def on(day: date | datetime, field: str = FIELD_INTERNAL_DATE) -> DateCompare:
    return DateCompare(field, "=", day)


def larger(size: int) -> SizeCompare:
    return SizeCompare(">", size)


def smaller(size: int) -> SizeCompare:
    return SizeCompare("<", size)


def seen() -> Flag:
    return Flag("seen")


def unseen() -> Flag:
    return Flag("unseen")


def flagged() -> Flag:
    return Flag("flagged")


__all__ = [
    "SearchExpression",
    "all_of",
    "any_of",
    "bcc",
    "before",
    "body",
    "cc",
    "flagged",
    "header",
    "larger",
    "on",
    "seen",
    "sender",
    "since",
    "smaller",
    "subject",
    "text",
    "to",
    "unseen",
]
