"""Tests for the payload escape codec."""

from __future__ import annotations

import pytest

from image_localizer.codec import (
    decode_payload_literal,
    encode_path_separators,
    encode_payload_literal,
    encode_reserved_symbols,
)
from image_localizer.utils import local_name_for

from tests.helpers import SLASH


def test_encode_path_separators() -> None:
    assert encode_path_separators("https://a/b") == f"https:{SLASH}{SLASH}a{SLASH}b"


def test_encode_reserved_symbols_encodes_percent_first() -> None:
    assert encode_reserved_symbols("100%!") == "100%25%21"
    assert encode_reserved_symbols("a(1)=b&c") == "a%281%29%3Db%26c"
    assert encode_reserved_symbols("plain-name_1.jpg") == "plain-name_1.jpg"


def test_decode_payload_literal() -> None:
    raw = f"https:{SLASH}{SLASH}cdn.example.com{SLASH}a%2520b.jpg"
    assert decode_payload_literal(raw) == "https://cdn.example.com/a%20b.jpg"


def test_decode_payload_literal_accepts_lowercase_escape() -> None:
    slash = SLASH.lower()
    raw = f"https:{slash}{slash}cdn.example.com{slash}a.jpg"
    assert decode_payload_literal(raw) == "https://cdn.example.com/a.jpg"


def test_decode_payload_literal_strips_dangling_backslash() -> None:
    raw = f"https:{SLASH}{SLASH}cdn.example.com{SLASH}a.jpg\\"
    assert decode_payload_literal(raw) == "https://cdn.example.com/a.jpg"


def test_decode_payload_literal_drops_genuine_trailing_backslash() -> None:
    # A JSON-escaped backslash at the very end is indistinguishable from
    # truncation debris and is lost.
    raw = f"https:{SLASH}{SLASH}cdn.example.com{SLASH}a.jpg\\\\"
    assert decode_payload_literal(raw) == "https://cdn.example.com/a.jpg"


@pytest.mark.parametrize(
    "url",
    [
        "https://cdn.example.com/uploads/2024/Spring Sale (1)&co.png",
        "https://cdn.example.com/a%20b/c.jpg",
        "https://cdn.example.com/img/photo.jpg#crop=1,2",
        "https://cdn.example.com/café/Ünïcödé.jpg",
    ],
)
def test_payload_form_decodes_to_same_local_name(url: str) -> None:
    encoded = encode_payload_literal(url)
    assert decode_payload_literal(encoded) == url
    assert local_name_for(decode_payload_literal(encoded)) == local_name_for(url)
