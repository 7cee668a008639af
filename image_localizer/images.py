"""Image downloading and validation utilities."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional
from uuid import uuid4

import requests
from filetype import guess

from .config import LocalizerConfig
from .errors import FetchError
from .models import DownloadRecord, DownloadState

logger = logging.getLogger("image_localizer")

_SNIFF_BYTES = 262


def detect_non_image(data: bytes) -> Optional[str]:
    """Return the MIME type of ``data`` when it is recognisably not an image."""
    kind = guess(data)
    if kind and not kind.mime.startswith("image/"):
        return kind.mime
    return None


def _stream_to_file(
    session: requests.Session,
    url: str,
    destination: Path,
    timeout: float,
    chunk_size: int,
) -> None:
    """Fetch ``url`` and atomically move the body into ``destination``."""
    try:
        resp = session.get(url, stream=True, timeout=(timeout, timeout))
    except requests.RequestException as exc:
        raise FetchError(url, str(exc)) from exc

    part_path: Optional[Path] = None
    try:
        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise FetchError(url, f"HTTP {resp.status_code}") from exc
        content_type = resp.headers.get("Content-Type", "")
        if content_type.split(";")[0].strip().lower() == "text/html":
            raise FetchError(url, f"unexpected Content-Type {content_type}")

        # Created with open() so the final file gets the usual umask-derived mode.
        part_path = destination.with_name(f".{destination.name}.{uuid4().hex[:8]}.part")
        with part_path.open("xb") as handle:
            head = b""
            for chunk in resp.iter_content(chunk_size=chunk_size):
                if not chunk:
                    continue
                if len(head) < _SNIFF_BYTES:
                    head += chunk[: _SNIFF_BYTES - len(head)]
                handle.write(chunk)
        mime = detect_non_image(head)
        if mime:
            raise FetchError(url, f"response body is {mime}, not an image")
        part_path.replace(destination)
        part_path = None
    except requests.RequestException as exc:
        raise FetchError(url, str(exc)) from exc
    except OSError as exc:
        raise FetchError(url, f"failed to write {destination}: {exc}") from exc
    finally:
        resp.close()
        if part_path is not None:
            part_path.unlink(missing_ok=True)


class AssetDownloader:
    """Download remote images at most once per destination path.

    ``records`` is the registry of every destination requested through this
    instance; it lives as long as the downloader, which the pipeline keeps for
    one build run.  Failed downloads are not retried.
    """

    def __init__(
        self,
        config: LocalizerConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.records: Dict[Path, DownloadRecord] = {}

    async def download(self, url: str, destination: Path) -> None:
        """Ensure ``url`` is stored at ``destination``; raise ``FetchError`` on failure."""
        destination = Path(destination)
        record = self.records.get(destination)
        if record is None:
            record = DownloadRecord(url=url, destination=destination)
            record.waiter = asyncio.ensure_future(self._fetch(record))
            self.records[destination] = record
        else:
            logger.debug("Reusing %s download for %s", record.state.value, destination)

        if record.state is DownloadState.SUCCEEDED:
            return
        if record.state is DownloadState.FAILED:
            raise record.error
        await asyncio.shield(record.waiter)
        if record.error is not None:
            raise record.error

    async def _fetch(self, record: DownloadRecord) -> None:
        try:
            await asyncio.to_thread(
                _stream_to_file,
                self.session,
                record.url,
                record.destination,
                self.config.timeout,
                self.config.chunk_size,
            )
        except FetchError as exc:
            record.state = DownloadState.FAILED
            record.error = exc
        else:
            record.state = DownloadState.SUCCEEDED

    def close(self) -> None:
        self.session.close()
