"""Tests for localizer configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from image_localizer.config import DEFAULT_EXTENSIONS, LocalizerConfig
from image_localizer.errors import ConfigError


def test_from_options_defaults(tmp_path: Path) -> None:
    config = LocalizerConfig.from_options(tmp_path, base_url="https://CDN.example.com/api")
    assert config.output_dir == tmp_path / "_images"
    assert config.public_path == "/_images"
    assert config.origin_host == "cdn.example.com"
    assert config.extensions == DEFAULT_EXTENSIONS


def test_from_options_reads_base_url_from_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("BASE_URL", "https://cms.example.net")
    config = LocalizerConfig.from_options(tmp_path, path="media/")
    assert config.origin_host == "cms.example.net"
    assert config.output_dir == tmp_path / "media"
    assert config.public_path == "/media"


def test_missing_base_url(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("BASE_URL", raising=False)
    with pytest.raises(ConfigError, match="BASE_URL"):
        LocalizerConfig.from_options(tmp_path)


@pytest.mark.parametrize("base_url", ["cdn.example.com", "ftp://cdn.example.com", "https://"])
def test_rejects_non_http_base_url(tmp_path: Path, base_url: str) -> None:
    with pytest.raises(ConfigError):
        LocalizerConfig.from_options(tmp_path, base_url=base_url)


def test_normalizes_extensions(tmp_path: Path) -> None:
    config = LocalizerConfig(
        output_dir=tmp_path, origin_host="cdn.example.com", extensions=(".JPG", "png", "jpg")
    )
    assert config.extensions == ("jpg", "png")


def test_rejects_empty_extensions(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        LocalizerConfig.from_options(tmp_path, extensions=[], base_url="https://cdn.example.com")


@pytest.mark.parametrize("host", ["bad_host!", "-leading.example.com", ""])
def test_rejects_invalid_hostname(tmp_path: Path, host: str) -> None:
    with pytest.raises(ConfigError):
        LocalizerConfig(output_dir=tmp_path, origin_host=host)


def test_rejects_non_positive_timeout(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        LocalizerConfig(output_dir=tmp_path, origin_host="cdn.example.com", timeout=0)
