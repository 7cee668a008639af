"""Locate remote image URLs inside HTML pages and serialized payloads."""

from __future__ import annotations

import html
import logging
import re
from typing import Dict, Iterator, List, Optional, Pattern, Tuple
from urllib.parse import SplitResult, urlsplit, urlunsplit

from .codec import decode_payload_literal
from .config import LocalizerConfig
from .errors import MalformedUrlError
from .models import ArtifactKind, RemoteAsset
from .utils import local_name_for, split_extension

logger = logging.getLogger("image_localizer")

# Characters allowed between the scheme and the extension.  HTML attributes
# hold URLs verbatim, so the reserved symbols a payload percent-encodes are
# accepted literally; payload literals escape slashes and percent-encode those
# symbols, so their alphabet is narrower.
_HTML_BODY = r"[\w\s.~%!$&'()*+,;=:@/#\[\]{}^-]"
_PAYLOAD_BODY = r"(?:[\w\s.~%:-]|\\u002[Ff]|/)"

# Whatever follows the extension up to the end of the attribute or literal:
# query strings and further srcset entries.
_HTML_TAIL = r"[^\"'<>]*"
_PAYLOAD_TAIL = r"[^\"]*"

DESCRIPTOR_SEPARATOR = re.compile(r"\s+\d+(?:\.\d+)?[xwh](?![\w])\s*,?\s*", re.IGNORECASE)
_TOKEN = re.compile(r"https?:\S*", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s")


def build_pattern(extensions, kind: ArtifactKind) -> Pattern[str]:
    """Compile the scanning pattern for one artifact kind."""
    alternatives = "|".join(
        re.escape(ext) for ext in sorted(extensions, key=len, reverse=True)
    )
    if kind is ArtifactKind.HTML:
        body, tail = _HTML_BODY, _HTML_TAIL
    else:
        body, tail = _PAYLOAD_BODY, _PAYLOAD_TAIL
    return re.compile(
        rf"https?:{body}*?\.(?:{alternatives})(?![A-Za-z0-9]){tail}",
        re.IGNORECASE,
    )


def trim_token(token: str) -> str:
    """Drop list separators and an unbalanced closing parenthesis from ``token``."""
    while token:
        last = token[-1]
        if last in ",;" or (last == ")" and token.count("(") < token.count(")")):
            token = token[:-1]
        else:
            break
    return token


def iter_token_spans(run: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(offset, token)`` for each URL token of a matched run.

    A run taken from a ``srcset`` holds several ``url descriptor`` pairs,
    e.g. ``a.jpg 1x, b.jpg 2x``; descriptors and separators are dropped.
    """
    start = 0
    for separator in [*DESCRIPTOR_SEPARATOR.finditer(run), None]:
        end = separator.start() if separator else len(run)
        for found in _TOKEN.finditer(run, start, end):
            yield found.start(), trim_token(found.group(0))
        if separator:
            start = separator.end()


def split_candidates(run: str) -> Iterator[str]:
    """Break a matched run into individual URL tokens."""
    for _, token in iter_token_spans(run):
        yield token


def parse_candidate(candidate: str) -> SplitResult:
    """Parse a candidate into a structured URL or raise ``MalformedUrlError``."""
    if _WHITESPACE.search(candidate):
        raise MalformedUrlError(candidate, "contains whitespace")
    try:
        parts = urlsplit(candidate)
        hostname, _port = parts.hostname, parts.port
    except ValueError as exc:
        raise MalformedUrlError(candidate, str(exc)) from exc
    if parts.scheme.lower() not in ("http", "https"):
        raise MalformedUrlError(candidate, "unsupported scheme")
    if not hostname:
        raise MalformedUrlError(candidate, "missing hostname")
    if not parts.path.startswith("/"):
        raise MalformedUrlError(candidate, "missing path")
    return parts


def normalize_url(parts: SplitResult) -> str:
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, parts.fragment)
    )


class UrlExtractor:
    """Scan artifacts for image URLs served from the configured origin."""

    def __init__(self, config: LocalizerConfig) -> None:
        self.config = config
        self._patterns: Dict[ArtifactKind, Pattern[str]] = {
            kind: build_pattern(config.extensions, kind) for kind in ArtifactKind
        }

    def pattern_for(self, kind: ArtifactKind) -> Pattern[str]:
        return self._patterns[ArtifactKind(kind)]

    def iter_candidates(
        self, text: str, kind: ArtifactKind
    ) -> Iterator[Tuple[int, str, str]]:
        """Yield ``(offset, artifact_form, raw_url)`` triples in document order."""
        kind = ArtifactKind(kind)
        for match in self.pattern_for(kind).finditer(text):
            for offset, token in iter_token_spans(match.group(0)):
                if kind is ArtifactKind.PAYLOAD:
                    raw_url = decode_payload_literal(token)
                else:
                    raw_url = html.unescape(token)
                yield match.start() + offset, token, raw_url

    def resolve(self, raw_url: str, report: bool = True) -> Optional[str]:
        """Return the normalized URL of an eligible candidate, else ``None``."""
        try:
            parts = parse_candidate(raw_url)
        except MalformedUrlError as exc:
            if report:
                logger.warning("Skipping %s", exc)
            return None
        if parts.hostname != self.config.origin_host:
            return None
        _, ext = split_extension(parts.path, parts.fragment)
        if ext not in self.config.extensions:
            if report:
                logger.debug("Skipping %s: extension %r not eligible", raw_url, ext)
            return None
        return normalize_url(parts)

    def extract(self, text: str, kind: ArtifactKind) -> List[RemoteAsset]:
        """Return deduplicated remote assets in order of first occurrence."""
        assets: Dict[str, RemoteAsset] = {}
        for _, artifact_form, raw_url in self.iter_candidates(text, kind):
            absolute_url = self.resolve(raw_url)
            if absolute_url is None or absolute_url in assets:
                continue
            assets[absolute_url] = RemoteAsset(
                absolute_url=absolute_url,
                artifact_form=artifact_form,
                local_name=local_name_for(absolute_url),
            )
        return list(assets.values())

    def locate(self, text: str, kind: ArtifactKind) -> List[Tuple[int, int, str]]:
        """Return ``(start, end, absolute_url)`` for every eligible occurrence.

        Spans cover whole tokens and never overlap, so a URL that prefixes a
        longer one is never matched inside it.
        """
        spans = []
        for offset, artifact_form, raw_url in self.iter_candidates(text, kind):
            absolute_url = self.resolve(raw_url, report=False)
            if absolute_url is not None:
                spans.append((offset, offset + len(artifact_form), absolute_url))
        return spans
