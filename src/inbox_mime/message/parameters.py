"""Read-only maps over protocol-returned parameter and header snapshots."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from email.utils import decode_rfc2231
from typing import Any
from urllib.parse import unquote_to_bytes

from ..core.errors import UnsupportedCharsetError
from .transcoding import decode_encoded_words, lookup_codec

LOGGER = logging.getLogger(__name__)

_RFC2231_SECTION = re.compile(r"^(?P<name>[^*]+)\*(?P<index>\d+)?(?P<extended>\*)?$")


class ParameterMap(Mapping[str, Any]):
    """Ordered mapping built once from a raw snapshot.

    Keys are case-sensitive here; subclasses normalize keys as their
    protocol requires.
    """

    def __init__(self, items: Iterable[tuple[str, Any]] = ()) -> None:
        self._items: dict[str, Any] = dict(items)

    def __getitem__(self, key: str) -> Any:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


def _raw_pairs(raw: Any) -> Iterator[tuple[str, Any]]:
    """Yield ``(attribute, value)`` from a list of records or a mapping."""
    if not raw:
        return
    if isinstance(raw, Mapping):
        yield from raw.items()
        return
    for record in raw:
        if isinstance(record, Mapping):
            attribute = record.get("attribute")
            if attribute is not None:
                yield str(attribute), record.get("value")
        else:
            attribute, value = record
            yield str(attribute), value


def _decode_plain_value(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return decode_encoded_words(value)
    except UnsupportedCharsetError:
        LOGGER.debug("Keeping undecodable parameter value %r", value)
        return value


def _decode_extended_value(value: str) -> str:
    charset, _language, text = decode_rfc2231(value)
    codec = "us-ascii"
    if charset:
        try:
            codec = lookup_codec(charset)
        except UnsupportedCharsetError:
            codec = "utf-8"
    return unquote_to_bytes(text).decode(codec, errors="replace")


class PartParameters(ParameterMap):
    """Content-Type and Content-Disposition parameters of a body part.

    Attribute names are lower-cased. RFC 2231 sections (``filename*0*``,
    ``filename*1*``) are joined under their base name and decoded; plain
    values are decoded from encoded-word form. Disposition parameters win
    over content-type parameters with the same name.
    """

    @classmethod
    def from_structure(cls, structure: Mapping[str, Any]) -> PartParameters:
        merged: dict[str, Any] = {}
        for source in ("parameters", "dparameters"):
            merged.update(cls._decode_pairs(_raw_pairs(structure.get(source))))
        return cls(merged.items())

    @staticmethod
    def _decode_pairs(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
        decoded: dict[str, Any] = {}
        sections: dict[str, list[tuple[int, str, bool]]] = {}
        for attribute, value in pairs:
            name = attribute.lower()
            match = _RFC2231_SECTION.match(name)
            if match is None or not isinstance(value, str):
                decoded[name] = _decode_plain_value(value)
                continue
            index = match.group("index")
            extended = index is None or match.group("extended") is not None
            sections.setdefault(match.group("name"), []).append(
                (int(index or 0), value, extended)
            )
        for name, parts in sections.items():
            parts.sort(key=lambda part: part[0])
            joined = "".join(part[1] for part in parts)
            if any(part[2] for part in parts):
                decoded[name] = _decode_extended_value(joined)
            else:
                decoded[name] = joined
        return decoded


__all__ = ["ParameterMap", "PartParameters"]
