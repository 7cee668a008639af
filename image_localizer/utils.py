"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import re
import unicodedata
from typing import Tuple
from urllib.parse import urlsplit

_WHITESPACE_PATTERN = re.compile(r"\s+")
_UNSAFE_PATTERN = re.compile(r"[^A-Za-z0-9_-]+")
_HYPHEN_RUN_PATTERN = re.compile(r"-{2,}")


def slugify(value: str) -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = unicodedata.normalize("NFD", value.lower())
    normalized = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    normalized = normalized.strip()
    normalized = _WHITESPACE_PATTERN.sub("-", normalized)
    normalized = _UNSAFE_PATTERN.sub("-", normalized)
    return _HYPHEN_RUN_PATTERN.sub("-", normalized)


def split_extension(path: str, fragment: str = "") -> Tuple[str, str]:
    """Split a URL path (and fragment, if it carries the extension) into stem and extension.

    The extension is returned lowercased and without its dot; it is empty when
    neither the fragment nor the path ends in a dot segment.
    """
    sources = [f"{path}#{fragment}", path] if fragment else [path]
    for source in sources:
        stem, dot, ext = source.rpartition(".")
        if dot and ext.isalnum():
            return stem, ext.lower()
    return path, ""


def local_name_for(url: str) -> str:
    """Derive the flat local file name for an absolute image URL.

    The query string never takes part, so URLs differing only in query share
    one local file.
    """
    parts = urlsplit(url)
    stem, ext = split_extension(parts.path, parts.fragment)
    name = slugify(stem.removeprefix("/"))
    return f"{name}.{ext}" if ext else name
