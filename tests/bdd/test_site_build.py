"""Behaviour tests for building a whole site from a content tree.

These scenarios exercise the full pipeline: settings loading, the content
scan, navigation, and template rendering. They are backed by
``features/site_build.feature`` and use the scenario tree from
``tests/conftest.py`` (a ``db`` section with two pages and an ``about`` page).

Usage:
    Run these behaviour tests with pytest, for example:

        pytest tests/bdd/test_site_build.py -v

Prerequisites:
    - pytest-bdd and BeautifulSoup installed via the ``test`` extra.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from docsite.build import BuildResult, build_site
from docsite.errors import ContentParseError
from docsite.settings import load_settings

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "site_build.feature"
)
scenarios(FEATURE_FILE)

EXPECTED_PAGES = ["/", "/db", "/db/getting-started", "/db/examples", "/about"]


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _soup(scenario_state: dict[str, object], url: str) -> BeautifulSoup:
    result: BuildResult = scenario_state["result"]  # type: ignore[assignment]
    document = result.document(url)
    assert document is not None, f"expected a rendered document for {url!r}"
    return BeautifulSoup(document.decode("utf-8"), "html.parser")


def _split(urls: str) -> list[str]:
    return [url.strip() for url in urls.split(",")]


@given("a content tree with a db section and an about page")
def given_content_tree(
    scenario_site_dir: Path, scenario_state: dict[str, object]
) -> None:
    """Register the scenario settings file for the build step."""
    scenario_state["settings_path"] = scenario_site_dir / "settings.yaml"
    scenario_state["content_dir"] = scenario_site_dir / "content"


@given("a document with malformed front-matter")
def given_malformed_document(scenario_state: dict[str, object]) -> None:
    """Add a document whose front-matter block is not valid YAML."""
    content_dir: Path = scenario_state["content_dir"]  # type: ignore[assignment]
    broken = content_dir / "db" / "broken.md"
    broken.write_text("---\ntitle: [unclosed\n---\nNever shown.\n", encoding="utf-8")
    scenario_state["broken"] = broken


@when("I build the site")
def when_build(scenario_state: dict[str, object]) -> None:
    """Load the settings and build every page."""
    settings_path: Path = scenario_state["settings_path"]  # type: ignore[assignment]
    scenario_state["result"] = build_site(load_settings(settings_path))


@then(parsers.parse('the "{url}" page has breadcrumb links "{links}"'))
def then_breadcrumb(scenario_state: dict[str, object], url: str, links: str) -> None:
    """Verify the breadcrumb wrapper links every ancestor in order."""
    soup = _soup(scenario_state, url)
    crumbs = soup.select("[data-test='breadcrumb'] a")
    hrefs = [crumb.get("href") for crumb in crumbs]
    assert hrefs == _split(links), f"unexpected breadcrumb links {hrefs!r}"
    assert crumbs[-1].get("aria-current") == "page", (
        "expected the last breadcrumb to mark the current page"
    )


@then(parsers.parse('the "{url}" page lists top sections "{links}"'))
def then_top_sections(scenario_state: dict[str, object], url: str, links: str) -> None:
    """Verify the level-0 title index is rendered in tree order."""
    soup = _soup(scenario_state, url)
    hrefs = [a.get("href") for a in soup.select("[data-test='titles-0'] a")]
    assert hrefs == _split(links), f"unexpected top-level index {hrefs!r}"


@then("the home page has no breadcrumb")
def then_home_without_breadcrumb(scenario_state: dict[str, object]) -> None:
    """Verify the homepage layout omits the breadcrumb wrapper."""
    soup = _soup(scenario_state, "/")
    assert soup.select_one("[data-test='breadcrumb']") is None, (
        "expected no breadcrumb wrapper on the homepage"
    )


@then("the build report lists exactly one content parse error")
def then_one_parse_error(scenario_state: dict[str, object]) -> None:
    """Verify the malformed document is the only reported error."""
    result: BuildResult = scenario_state["result"]  # type: ignore[assignment]
    broken: Path = scenario_state["broken"]  # type: ignore[assignment]
    errors = result.report.errors
    assert len(errors) == 1, f"expected one error, got {errors!r}"
    assert isinstance(errors[0], ContentParseError)
    assert errors[0].path.name == broken.name


@then("every other page is rendered")
def then_other_pages_rendered(scenario_state: dict[str, object]) -> None:
    """Verify the remaining pages built normally."""
    result: BuildResult = scenario_state["result"]  # type: ignore[assignment]
    assert result.report.rendered == EXPECTED_PAGES, (
        f"unexpected rendered pages {result.report.rendered!r}"
    )
    assert result.document("/db/broken") is None
