"""Charset, encoded-word and transfer-encoding decoding helpers."""

from __future__ import annotations

import base64
import codecs
import logging
import quopri
import re
from email.header import decode_header

from ..core.config import DecodingSettings
from ..core.errors import UnsupportedCharsetError

LOGGER = logging.getLogger(__name__)

ENCODING_7BIT = "7bit"
ENCODING_8BIT = "8bit"
ENCODING_BINARY = "binary"
ENCODING_BASE64 = "base64"
ENCODING_QUOTED_PRINTABLE = "quoted-printable"
ENCODING_UNKNOWN = "unknown"

_BASE64_NOISE = re.compile(rb"[^A-Za-z0-9+/]")


def lookup_codec(charset: str) -> str:
    """Return the Python codec name for a MIME charset label.

    RFC 2231 language suffixes (``utf-8*en``) are ignored. Raises
    :class:`UnsupportedCharsetError` when Python has no matching codec.
    """
    label = charset.split("*", 1)[0].strip().strip('"')
    try:
        return codecs.lookup(label).name
    except LookupError as exc:
        raise UnsupportedCharsetError(charset) from exc


def decode_encoded_words(value: str) -> str:
    """Decode RFC 2047 encoded words embedded in a header value."""
    if "=?" not in value:
        return value
    chunks: list[str] = []
    for fragment, charset in decode_header(value):
        if isinstance(fragment, str):
            chunks.append(fragment)
        elif charset is None:
            # Unencoded runs come back as latin-1 bytes; backslashes are literal.
            chunks.append(fragment.decode("latin-1"))
        else:
            chunks.append(fragment.decode(lookup_codec(charset), errors="replace"))
    return "".join(chunks)


def decode_transfer_encoding(content: bytes, encoding: str) -> bytes:
    """Undo a Content-Transfer-Encoding; unknown encodings pass through."""
    if encoding == ENCODING_BASE64:
        cleaned = _BASE64_NOISE.sub(b"", content)
        if len(cleaned) % 4 == 1:
            cleaned = cleaned[:-1]
        cleaned += b"=" * (-len(cleaned) % 4)
        return base64.b64decode(cleaned)
    if encoding == ENCODING_QUOTED_PRINTABLE:
        return quopri.decodestring(content)
    return content


def decode_text(
    content: bytes, charset: str | None, settings: DecodingSettings
) -> str:
    """Transcode text bytes from ``charset`` into ``str``.

    Missing or unknown charsets fall back to ``settings.fallback_charset``.
    """
    codec = settings.fallback_charset
    if charset:
        try:
            codec = lookup_codec(charset)
        except UnsupportedCharsetError:
            LOGGER.debug(
                "Unknown charset %r, decoding as %s", charset, settings.fallback_charset
            )
    return content.decode(codec, errors=settings.errors)


__all__ = [
    "ENCODING_7BIT",
    "ENCODING_8BIT",
    "ENCODING_BASE64",
    "ENCODING_BINARY",
    "ENCODING_QUOTED_PRINTABLE",
    "ENCODING_UNKNOWN",
    "decode_encoded_words",
    "decode_text",
    "decode_transfer_encoding",
    "lookup_codec",
]
