"""Unit tests for logical asset path resolution."""

from __future__ import annotations

import typing as typ

import pytest

from docsite.assets import AssetResolver, content_digest, fingerprint_directory
from docsite.errors import AssetResolutionError
from docsite.settings import SettingsLayer, SettingsStore

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.parametrize(
    ("base", "logical", "expected"),
    [
        (None, "css/site.css", "/css/site.css"),
        (None, "/css/site.css", "/css/site.css"),
        (
            "https://cdn.example.com/",
            "css/site.css",
            "https://cdn.example.com/css/site.css",
        ),
        ("/static", "js/app.js", "/static/js/app.js"),
        ("/static", "https://upper.io/logo.svg", "https://upper.io/logo.svg"),
        (None, "//fonts.example.com/a.woff", "//fonts.example.com/a.woff"),
    ],
)
def test_resolve(base: str | None, logical: str, expected: str) -> None:
    assert AssetResolver(base).resolve(logical) == expected


@pytest.mark.parametrize("base", [None, "/static", "https://cdn.example.com/assets"])
def test_resolve_is_idempotent(base: str | None) -> None:
    resolver = AssetResolver(base, fingerprints={"css/site.css": "abc123def456"})
    once = resolver("css/site.css")
    assert resolver(once) == once


def test_fingerprint_appends_digest() -> None:
    resolver = AssetResolver(fingerprints={"css/site.css": "abc123def456"})
    assert resolver.resolve("css/site.css") == "/css/site.css?v=abc123def456"
    assert resolver.resolve("css/other.css") == "/css/other.css"


@pytest.mark.parametrize("bad", ["", "   ", None, 42])
def test_invalid_paths_raise(bad: typ.Any) -> None:
    with pytest.raises(AssetResolutionError):
        AssetResolver().resolve(bad)


def test_from_settings_uses_asset_base() -> None:
    settings = SettingsStore(
        [SettingsLayer(None, {"site/asset_base": "https://cdn.example.com"})]
    )
    resolver = AssetResolver.from_settings(settings)
    assert resolver("img/logo.png") == "https://cdn.example.com/img/logo.png"


def test_fingerprint_directory(tmp_path: Path) -> None:
    (tmp_path / "css").mkdir()
    (tmp_path / "css" / "site.css").write_bytes(b"body {}")
    digests = fingerprint_directory(tmp_path)
    assert digests == {"css/site.css": content_digest(b"body {}")}
    assert len(digests["css/site.css"]) == 12
