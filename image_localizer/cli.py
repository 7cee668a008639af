"""Command-line entry point for the image localizer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Sequence

from .config import DEFAULT_EXTENSIONS, DEFAULT_PUBLIC_PATH, DEFAULT_TIMEOUT, LocalizerConfig
from .errors import ConfigError, FilesystemError
from .models import ArtifactKind
from .pipeline import ImageLocalizer

logger = logging.getLogger("image_localizer.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Download remote images referenced by generated pages and payloads "
            "and point the artifacts at the local copies."
        ),
    )
    parser.add_argument(
        "kind",
        choices=[kind.value for kind in ArtifactKind],
        help="Artifact kind of the given files",
    )
    parser.add_argument("files", nargs="+", type=Path, help="Artifacts to rewrite in place")
    parser.add_argument(
        "--dist",
        default="dist",
        type=Path,
        help="Build output root; images are stored below it",
    )
    parser.add_argument(
        "--path",
        default=DEFAULT_PUBLIC_PATH,
        help="Image directory relative to the build output root",
    )
    parser.add_argument(
        "--extension",
        dest="extensions",
        action="append",
        default=None,
        help=f"Eligible image extension, repeatable (default: {', '.join(DEFAULT_EXTENSIONS)})",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="URL of the CMS whose images are localized (default: $BASE_URL)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(list(sys.argv[1:] if argv is None else argv))


def _route_for(path: Path, dist: Path) -> str:
    try:
        relative = path.resolve().relative_to(dist.resolve())
    except ValueError:
        return str(path)
    return "/" + relative.as_posix()


async def run_files(
    localizer: ImageLocalizer,
    kind: ArtifactKind,
    files: List[Path],
    dist: Path,
) -> int:
    """Process every file, returning the number of artifacts that failed."""
    failures = 0
    for path in files:
        try:
            if kind is ArtifactKind.PAYLOAD:
                await localizer.process_payload(path)
                continue
            try:
                html = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise FilesystemError(path, str(exc)) from exc
            rewritten = await localizer.process_page(_route_for(path, dist), html)
            if rewritten != html:
                try:
                    path.write_text(rewritten, encoding="utf-8")
                except OSError as exc:
                    raise FilesystemError(path, str(exc)) from exc
        except FilesystemError as exc:
            logger.error("%s", exc)
            failures += 1
    return failures


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    try:
        config = LocalizerConfig.from_options(
            args.dist,
            path=args.path,
            extensions=args.extensions,
            base_url=args.base_url,
            timeout=args.timeout,
        )
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    localizer = ImageLocalizer(config)
    try:
        localizer.prepare()
    except FilesystemError as exc:
        logger.error("%s", exc)
        return 1

    kind = ArtifactKind(args.kind)
    overall_start = time.perf_counter()
    try:
        failures = asyncio.run(run_files(localizer, kind, args.files, args.dist))
    finally:
        localizer.close()
    total_elapsed = time.perf_counter() - overall_start

    total = len(args.files)
    localized = sum(result.localized for result in localizer.results)
    logger.info(
        "Finished in %.2fs (%d/%d artifacts succeeded, %d images localized)",
        total_elapsed,
        total - failures,
        total,
        localized,
    )
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
