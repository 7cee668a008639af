"""High-level orchestration for localizing images in build artifacts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .config import LocalizerConfig
from .errors import FilesystemError
from .extractor import UrlExtractor
from .images import AssetDownloader
from .models import ArtifactKind, ArtifactResult
from .rewriter import Rewriter

logger = logging.getLogger("image_localizer")


class ImageLocalizer:
    """Entry points invoked by the static-site build for each artifact.

    One instance corresponds to one build run: its downloader remembers every
    image fetched so far, so pages sharing an image download it once.
    """

    def __init__(
        self,
        config: LocalizerConfig,
        downloader: Optional[AssetDownloader] = None,
    ) -> None:
        self.config = config
        self.downloader = downloader or AssetDownloader(config)
        self.extractor = UrlExtractor(config)
        self.rewriter = Rewriter(config, self.downloader, self.extractor)
        self.results: List[ArtifactResult] = []
        self._prepared = False

    def prepare(self) -> None:
        """Create the output directory if needed."""
        try:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(self.config.output_dir, str(exc)) from exc
        self._prepared = True

    async def _localize(
        self, route: str, text: str, kind: ArtifactKind
    ) -> Tuple[str, ArtifactResult]:
        if not self._prepared:
            self.prepare()
        result = ArtifactResult(route=route, kind=kind)
        self.results.append(result)

        assets = self.extractor.extract(text, kind)
        if not assets:
            logger.debug("%s: no remote images found", route)
            return text, result
        logger.info("%s: replacing %d images with local copies", route, len(assets))
        text, result.outcomes = await self.rewriter.rewrite(text, assets, kind)
        logger.info("%s: localized %d of %d images", route, result.localized, len(assets))
        return text, result

    async def process_page(self, route: str, html: str) -> str:
        """Return ``html`` with origin images pointing at local copies."""
        rewritten, _ = await self._localize(route, html, ArtifactKind.HTML)
        return rewritten

    async def process_payload(self, path: Union[str, Path]) -> ArtifactResult:
        """Rewrite a serialized payload file in place."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FilesystemError(path, str(exc)) from exc

        rewritten, result = await self._localize(str(path), text, ArtifactKind.PAYLOAD)
        if rewritten != text:
            try:
                path.write_text(rewritten, encoding="utf-8")
            except OSError as exc:
                raise FilesystemError(path, str(exc)) from exc
        return result

    async def process_artifact(
        self,
        kind: Union[ArtifactKind, str],
        content_or_path: Union[str, Path],
        route: Optional[str] = None,
    ) -> Optional[str]:
        """Dispatch an artifact by kind.

        HTML content is returned rewritten; payload files are updated on disk
        and ``None`` is returned.
        """
        kind = ArtifactKind(kind)
        if kind is ArtifactKind.HTML:
            return await self.process_page(route or "/", str(content_or_path))
        await self.process_payload(content_or_path)
        return None

    def close(self) -> None:
        self.downloader.close()
