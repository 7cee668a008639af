"""Exception types raised by the localization pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class LocalizerError(Exception):
    """Base class for all errors raised by ``image_localizer``."""


class ConfigError(LocalizerError):
    """Raised when the localizer options are invalid."""


class MalformedUrlError(LocalizerError):
    """A scanned candidate could not be parsed as an eligible image URL."""

    def __init__(self, candidate: str, reason: str) -> None:
        super().__init__(f"Malformed image URL {candidate!r}: {reason}")
        self.candidate = candidate
        self.reason = reason


class FetchError(LocalizerError):
    """Downloading a remote image failed."""

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"Failed to fetch {url}: {cause}")
        self.url = url
        self.cause = cause


class FilesystemError(LocalizerError):
    """The output directory or an artifact could not be read or written."""

    def __init__(self, path: Union[str, Path], cause: str) -> None:
        super().__init__(f"Filesystem error at {path}: {cause}")
        self.path = Path(path)
        self.cause = cause
