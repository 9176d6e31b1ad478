"""Shared fixtures for the docsite test suite.

The ``scenario_site_dir`` fixture lays out the reference content tree used
throughout the tests::

    content/
        index.md                 (home)
        about.md                 (order: 2)
        db/
            index.md             (order: 1)
            getting-started.md   (order: 1)
            examples.md          (order: 2)

with a ``settings.yaml`` beside it that overrides the brand and menu.
"""

from __future__ import annotations

import textwrap
import typing as typ

import pytest

from docsite.content import ContentTreeBuilder
from docsite.settings import load_settings

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from docsite.content import Site
    from docsite.settings import SettingsStore

SCENARIO_SETTINGS = """\
page:
  brand: upper/db
  body:
    menu:
      - {url: /db, text: Database}
      - {url: /about, text: About}
    copyright: (c) upper
"""

SCENARIO_DOCUMENTS: dict[str, str] = {
    "index.md": "Welcome to the **docs**.\n",
    "about.md": "---\norder: 2\n---\nAbout this site.\n",
    "db/index.md": "---\norder: 1\n---\nThe database section.\n",
    "db/getting-started.md": "---\norder: 1\n---\nInstall it.\n",
    "db/examples.md": (
        "---\norder: 2\n---\n"
        "See [getting started](getting-started.md#install).\n\n"
        "```python\nprint('hi')\n```\n"
    ),
}


def write_tree(root: Path, documents: cabc.Mapping[str, str]) -> Path:
    """Write ``documents`` (relative path -> text) below ``root``."""
    for relative, text in documents.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text), encoding="utf-8")
    return root


@pytest.fixture
def make_tree() -> cabc.Callable[[Path, cabc.Mapping[str, str]], Path]:
    """Return the helper that writes a content tree from a mapping."""
    return write_tree


@pytest.fixture
def scenario_site_dir(tmp_path: Path) -> Path:
    """Return a directory holding ``settings.yaml`` and the scenario content."""
    write_tree(tmp_path / "content", SCENARIO_DOCUMENTS)
    (tmp_path / "settings.yaml").write_text(SCENARIO_SETTINGS, encoding="utf-8")
    return tmp_path


@pytest.fixture
def scenario_settings(scenario_site_dir: Path) -> SettingsStore:
    """Load the scenario's settings over the packaged defaults."""
    return load_settings(scenario_site_dir / "settings.yaml")


@pytest.fixture
def scenario_site(scenario_site_dir: Path, scenario_settings: SettingsStore) -> Site:
    """Build the scenario content tree into a site snapshot."""
    return ContentTreeBuilder(scenario_settings).build(scenario_site_dir / "content")
