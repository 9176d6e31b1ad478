"""Tests for whole-site builds, output layout, snapshots, and serving.

Builds run against the scenario content tree from ``conftest.py``. The server
tests drive the Starlette application through its ``TestClient``.
"""

from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup
from starlette.testclient import TestClient

from docsite.build import SnapshotStore, build_site, output_path, write_output
from docsite.errors import ConfigParseError, RenderError
from docsite.generator import PageRenderer
from docsite.server import create_app, resolve_request
from docsite.settings import SettingsLayer, SettingsStore

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from docsite.build import BuildResult


@pytest.fixture
def result(scenario_settings: SettingsStore) -> BuildResult:
    return build_site(scenario_settings, max_workers=2)


def test_build_renders_every_page(result: BuildResult) -> None:
    assert list(result.documents) == [
        "/",
        "/db",
        "/db/getting-started",
        "/db/examples",
        "/about",
    ]
    assert result.report.ok
    assert result.report.rendered == list(result.documents)
    assert result.report.summary() == (
        "5 pages rendered, 0 documents skipped, 0 pages failed"
    )


def test_output_path_layout(tmp_path: Path) -> None:
    assert output_path("/", tmp_path) == tmp_path / "index.html"
    assert output_path("/db/examples", tmp_path) == (
        tmp_path / "db" / "examples" / "index.html"
    )


def test_write_output(result: BuildResult, tmp_path: Path) -> None:
    written = write_output(result, tmp_path / "public")
    assert (tmp_path / "public" / "index.html") in written
    page = tmp_path / "public" / "db" / "examples" / "index.html"
    assert page.read_bytes() == result.documents["/db/examples"]


def test_static_files_are_copied_and_fingerprinted(
    scenario_site_dir: Path, tmp_path: Path
) -> None:
    static = scenario_site_dir / "static" / "css"
    static.mkdir(parents=True)
    (static / "site.css").write_text("body {}", encoding="utf-8")
    settings = SettingsStore(
        [
            SettingsLayer(
                None,
                {
                    "site/static": "static",
                    "site/fingerprint": True,
                    "page/head/styles": ["css/site.css"],
                },
            ),
            SettingsLayer(None, {"site/content": "content"}),
        ],
        base_dir=scenario_site_dir,
    )
    built = build_site(settings, max_workers=1)
    soup = BeautifulSoup(built.documents["/about"].decode("utf-8"), "html.parser")
    href = soup.select_one('link[rel="stylesheet"]')["href"]
    assert href.startswith("/css/site.css?v=")

    write_output(built, tmp_path / "out")
    assert (tmp_path / "out" / "css" / "site.css").read_text(encoding="utf-8") == (
        "body {}"
    )


def test_failed_page_gets_fallback_document(scenario_settings: SettingsStore) -> None:
    def markup(text: str) -> str:
        if "Install" in text:
            msg = "cannot convert"
            raise ValueError(msg)
        return f"<p>{text}</p>"

    built = build_site(scenario_settings, renderer=PageRenderer(markup=markup))
    assert [error.url for error in built.report.render_errors] == [
        "/db/getting-started"
    ]
    assert not built.report.ok
    fallback = built.documents["/db/getting-started"]
    assert b'data-test="error-url"' in fallback
    assert b"<p>About this site." in built.documents["/about"]


def test_template_runtime_error_fails_only_that_page(
    tmp_path: Path, make_tree: cabc.Callable[..., Path]
) -> None:
    templates = make_tree(
        tmp_path / "templates",
        {
            "home.jinja": "<p>{{ title }}</p>\n",
            "page.jinja": "<p>{{ front_matter.weight + 1 }}</p>\n",
            "error.jinja": '<p data-test="error-url">{{ url }}</p>\n',
        },
    )
    make_tree(
        tmp_path / "content",
        {
            "good.md": "---\nweight: 1\n---\nGood.\n",
            "bad.md": "---\nweight: heavy\n---\nBad.\n",
        },
    )
    settings = SettingsStore(
        [SettingsLayer(None, {"site/content": "content"})],
        base_dir=tmp_path,
    )
    built = build_site(settings, renderer=PageRenderer(templates_dir=templates))
    assert [error.url for error in built.report.render_errors] == ["/bad"]
    assert "page.jinja" in built.report.render_errors[0].message
    assert built.report.rendered == ["/", "/good"]
    assert built.documents["/good"] == b"<p>2</p>\n"
    assert b'data-test="error-url">/bad<' in built.documents["/bad"]


def test_parse_errors_reach_the_report(
    scenario_site_dir: Path, scenario_settings: SettingsStore
) -> None:
    broken = scenario_site_dir / "content" / "db" / "broken.md"
    broken.write_text("---\ntitle: [\n---\n", encoding="utf-8")
    built = build_site(scenario_settings)
    assert len(built.report.parse_errors) == 1
    assert built.report.parse_errors[0].path.name == broken.name
    assert len(built.report.rendered) == 5


def test_invalid_worker_setting(scenario_site_dir: Path) -> None:
    settings = SettingsStore(
        [SettingsLayer(None, {"build/workers": 0, "site/content": "content"})],
        base_dir=scenario_site_dir,
    )
    with pytest.raises(ConfigParseError, match="positive integer"):
        build_site(settings)


def _builder(
    results: list[BuildResult | Exception],
) -> cabc.Callable[[], BuildResult]:
    pending = iter(results)

    def build() -> BuildResult:
        outcome = next(pending)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return build


def test_snapshot_store_keeps_previous_on_failure(result: BuildResult) -> None:
    store = SnapshotStore(_builder([result, RenderError("/", "bad template")]))
    with pytest.raises(RuntimeError):
        _ = store.current
    assert store.start() is result
    assert store.rebuild() is False
    assert store.current is result


def test_snapshot_store_swaps_on_success(
    result: BuildResult, scenario_settings: SettingsStore
) -> None:
    fresh = build_site(scenario_settings, max_workers=1)
    store = SnapshotStore(_builder([result, fresh]))
    store.start()
    assert store.rebuild() is True
    assert store.current is fresh


def test_resolve_request(result: BuildResult, scenario_site_dir: Path) -> None:
    (scenario_site_dir / "content" / "db" / "diagram.svg").write_text(
        "<svg/>", encoding="utf-8"
    )
    body, content_type = resolve_request(result, "/db/examples/")
    assert body == result.documents["/db/examples"]
    assert content_type.startswith("text/html")
    assert resolve_request(result, "/db/index.html")[0] == result.documents["/db"]
    assert resolve_request(result, "/db/diagram.svg") == (b"<svg/>", "image/svg+xml")
    assert resolve_request(result, "/db/examples.md") is None
    assert resolve_request(result, "/../settings.yaml") is None
    assert resolve_request(result, "/missing") is None


def test_app_serves_snapshot(result: BuildResult) -> None:
    store = SnapshotStore(lambda: result)
    store.start()
    client = TestClient(create_app(store))
    response = client.get("/about")
    assert response.status_code == 200
    assert response.content == result.documents["/about"]
    assert response.headers["content-type"].startswith("text/html")
    assert client.get("/nowhere").status_code == 404
    assert client.head("/db").status_code == 200
