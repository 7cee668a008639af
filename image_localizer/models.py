"""Data models used throughout the localization pipeline."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import FetchError


class ArtifactKind(str, enum.Enum):
    """Kinds of build artifacts that can reference remote images."""

    HTML = "html"
    PAYLOAD = "payload"


@dataclass(frozen=True)
class RemoteAsset:
    """Remote image reference discovered while scanning an artifact."""

    absolute_url: str
    artifact_form: str
    local_name: str


class DownloadState(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class DownloadRecord:
    """Registry entry tracking the single fetch issued for a destination."""

    url: str
    destination: Path
    state: DownloadState = DownloadState.PENDING
    error: Optional[FetchError] = None
    waiter: Optional[asyncio.Future] = None


@dataclass
class AssetOutcome:
    """Result of localizing one asset within one artifact."""

    asset: RemoteAsset
    local_reference: Optional[str] = None
    error: Optional[FetchError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.local_reference is not None


@dataclass
class ArtifactResult:
    """Summary of a processed artifact."""

    route: str
    kind: ArtifactKind
    outcomes: List[AssetOutcome] = field(default_factory=list)

    @property
    def localized(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> List[AssetOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]
