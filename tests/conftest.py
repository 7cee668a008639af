"""Shared fixtures for the image localizer tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from image_localizer.config import LocalizerConfig

from tests.helpers import ORIGIN


@pytest.fixture
def dist_dir(tmp_path: Path) -> Path:
    dist = tmp_path / "dist"
    dist.mkdir()
    return dist


@pytest.fixture
def config(dist_dir: Path) -> LocalizerConfig:
    return LocalizerConfig(
        output_dir=dist_dir / "_images",
        origin_host=ORIGIN,
        extensions=("jpg", "png"),
        timeout=5.0,
    )
