"""Swap remote image URLs inside artifacts for their local copies."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .codec import encode_payload_literal
from .config import LocalizerConfig
from .errors import FetchError
from .extractor import UrlExtractor
from .images import AssetDownloader
from .models import ArtifactKind, AssetOutcome, RemoteAsset

logger = logging.getLogger("image_localizer")


class Rewriter:
    """Download every asset of an artifact and rewrite its references."""

    def __init__(
        self,
        config: LocalizerConfig,
        downloader: AssetDownloader,
        extractor: Optional[UrlExtractor] = None,
    ) -> None:
        self.config = config
        self.downloader = downloader
        self.extractor = extractor or UrlExtractor(config)

    def local_reference(self, asset: RemoteAsset) -> str:
        return f"{self.config.public_path.rstrip('/')}/{asset.local_name}"

    def replacement_for(self, asset: RemoteAsset, kind: ArtifactKind) -> str:
        reference = self.local_reference(asset)
        if kind is ArtifactKind.PAYLOAD:
            return encode_payload_literal(reference)
        return reference

    async def localize(self, asset: RemoteAsset) -> AssetOutcome:
        """Download one asset, reporting failure in the outcome instead of raising."""
        destination = self.config.output_dir / asset.local_name
        try:
            await self.downloader.download(asset.absolute_url, destination)
        except FetchError as exc:
            logger.error("Failed to fetch image %s: %s", exc.url, exc.cause)
            return AssetOutcome(asset=asset, error=exc)
        return AssetOutcome(asset=asset, local_reference=self.local_reference(asset))

    async def rewrite(
        self,
        text: str,
        assets: Sequence[RemoteAsset],
        kind: ArtifactKind,
    ) -> Tuple[str, List[AssetOutcome]]:
        """Return ``text`` with every downloaded asset replaced, plus per-asset outcomes.

        Downloads run concurrently; substitutions are applied once all of them
        have settled.  Every scanned occurrence is replaced as a whole token, so
        a URL that prefixes a longer one (``a.jpg`` and ``a.jpg-large.jpg``)
        never rewrites part of it.  Assets whose download failed keep their
        remote URL.
        """
        kind = ArtifactKind(kind)
        outcomes = list(await asyncio.gather(*(self.localize(asset) for asset in assets)))

        replacements: Dict[str, str] = {
            outcome.asset.absolute_url: self.replacement_for(outcome.asset, kind)
            for outcome in outcomes
            if outcome.succeeded
        }
        if not replacements:
            return text, outcomes

        pieces: List[str] = []
        cursor = 0
        for start, end, absolute_url in self.extractor.locate(text, kind):
            replacement = replacements.get(absolute_url)
            if replacement is None:
                continue
            pieces.append(text[cursor:start])
            pieces.append(replacement)
            cursor = end
        pieces.append(text[cursor:])
        return "".join(pieces), outcomes
