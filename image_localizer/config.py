"""Configuration objects and constants for the localizer."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple
from urllib.parse import urlsplit

from .errors import ConfigError

DEFAULT_PUBLIC_PATH = "/_images"
DEFAULT_EXTENSIONS = ("jpg", "jpeg", "gif", "png", "webp", "svg")
DEFAULT_TIMEOUT = 30.0
DEFAULT_CHUNK_SIZE = 64 * 1024
BASE_URL_ENV = "BASE_URL"

_HOSTNAME_LABEL = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def normalize_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    """Strip leading dots, lowercase and drop duplicates, keeping order."""
    seen = []
    for ext in extensions:
        cleaned = ext.strip().lstrip(".").lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return tuple(seen)


def is_valid_hostname(hostname: str) -> bool:
    if not hostname or len(hostname) > 253:
        return False
    labels = hostname.rstrip(".").split(".")
    return all(_HOSTNAME_LABEL.match(label) for label in labels)


@dataclass(frozen=True)
class LocalizerConfig:
    """Immutable settings shared by every component of one pipeline."""

    output_dir: Path
    origin_host: str
    public_path: str = DEFAULT_PUBLIC_PATH
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    timeout: float = DEFAULT_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        extensions = normalize_extensions(self.extensions)
        if not extensions:
            raise ConfigError("At least one image extension must be configured")
        host = self.origin_host.lower()
        if not is_valid_hostname(host):
            raise ConfigError(f"Invalid origin hostname: {self.origin_host!r}")
        if self.timeout <= 0:
            raise ConfigError("Timeout must be a positive number of seconds")
        # Frozen dataclass: normalized values are written back explicitly.
        object.__setattr__(self, "extensions", extensions)
        object.__setattr__(self, "origin_host", host)
        object.__setattr__(self, "public_path", "/" + self.public_path.strip("/"))
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    @classmethod
    def from_options(
        cls,
        dist_dir: Path,
        path: str = DEFAULT_PUBLIC_PATH,
        extensions: Optional[Iterable[str]] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "LocalizerConfig":
        """Build a config from the module options exposed to the site build.

        ``path`` is relative to the build output root ``dist_dir`` and doubles
        as the public prefix of rewritten references.  ``base_url`` falls back
        to the ``BASE_URL`` environment variable; only its hostname is used.
        """
        base_url = base_url or os.environ.get(BASE_URL_ENV)
        if not base_url:
            raise ConfigError(
                f"A base URL is required (pass base_url or set {BASE_URL_ENV})"
            )
        parsed = urlsplit(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ConfigError(f"Base URL must be an absolute http(s) URL: {base_url!r}")
        return cls(
            output_dir=Path(dist_dir) / path.strip("/"),
            origin_host=parsed.hostname,
            public_path=path,
            extensions=tuple(extensions) if extensions is not None else DEFAULT_EXTENSIONS,
            timeout=timeout,
        )
