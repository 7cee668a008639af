"""Tests for the command-line entry point."""

from __future__ import annotations

import responses

from image_localizer.cli import main

from tests.helpers import JPEG_BYTES

IMAGE = "https://cdn.example.com/a/b.jpg"


@responses.activate
def test_rewrites_html_files_in_place(dist_dir) -> None:
    responses.add(responses.GET, IMAGE, body=JPEG_BYTES, content_type="image/jpeg")
    page = dist_dir / "about" / "index.html"
    page.parent.mkdir()
    page.write_text(f'<img src="{IMAGE}">', encoding="utf-8")

    status = main(
        ["html", str(page), "--dist", str(dist_dir), "--base-url", "https://cdn.example.com"]
    )

    assert status == 0
    assert page.read_text(encoding="utf-8") == '<img src="/_images/a-b.jpg">'
    assert (dist_dir / "_images" / "a-b.jpg").read_bytes() == JPEG_BYTES


@responses.activate
def test_missing_files_fail_without_stopping_the_run(dist_dir) -> None:
    responses.add(responses.GET, IMAGE, body=JPEG_BYTES, content_type="image/jpeg")
    page = dist_dir / "index.html"
    page.write_text(f'<img src="{IMAGE}">', encoding="utf-8")

    status = main(
        [
            "html",
            str(dist_dir / "missing.html"),
            str(page),
            "--dist",
            str(dist_dir),
            "--base-url",
            "https://cdn.example.com",
        ]
    )

    assert status == 1
    assert page.read_text(encoding="utf-8") == '<img src="/_images/a-b.jpg">'


def test_invalid_configuration_exits_with_usage_error(dist_dir, monkeypatch) -> None:
    monkeypatch.delenv("BASE_URL", raising=False)
    assert main(["payload", str(dist_dir / "payload.js"), "--dist", str(dist_dir)]) == 2
