"""Escaping rules used by the client-state payload serializer.

HTML pages carry image URLs as literal text inside attributes, while the
serialized payload stores the same URL inside a JavaScript string literal with
``/`` written as ``\\u002F`` and reserved symbols percent-encoded.  The helpers
below convert between the two so that a URL found in one artifact kind can be
located again, byte for byte, in the other.
"""

from __future__ import annotations

import json
from urllib.parse import unquote

ESCAPED_SLASH = "\\u002F"

# ``%`` has to stay first: later substitutions introduce percent signs.
RESERVED_SYMBOLS = (
    "%", "!", "@", "^", "#", "$", "&", "(", ")", "=",
    "+", ",", ";", "'", "[", "{", "]", "}",
)


def encode_path_separators(text: str) -> str:
    """Escape every forward slash the way the payload serializer does."""
    return text.replace("/", ESCAPED_SLASH)


def encode_reserved_symbols(text: str) -> str:
    """Percent-encode the reserved symbol set, ``%`` first."""
    for symbol in RESERVED_SYMBOLS:
        text = text.replace(symbol, f"%{ord(symbol):02X}")
    return text


def encode_payload_literal(text: str) -> str:
    """Return ``text`` as it appears inside a payload string literal."""
    return encode_path_separators(encode_reserved_symbols(text))


def decode_payload_literal(raw_match: str) -> str:
    """Recover the literal URL from a substring matched inside a payload.

    Trailing backslashes are dropped first: the scanning pattern stops at the
    next quote, so an escaped quote (``\\"``) leaves a dangling backslash that
    would otherwise make the literal undecodable.  A URL that genuinely ends in
    a backslash loses it here.
    """
    trimmed = raw_match.rstrip("\\")
    try:
        decoded = json.loads(f'"{trimmed}"')
    except json.JSONDecodeError:
        # Not a valid JSON escape sequence; keep the text and only undo the
        # slash escape the serializer is known to emit.
        decoded = trimmed.replace(ESCAPED_SLASH, "/").replace("\\u002f", "/")
    return unquote(decoded)
