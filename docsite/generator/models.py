"""Shared dataclasses used by the page rendering pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from docsite.content import Page


@dc.dataclass(frozen=True, slots=True)
class PageModel:
    """Structured page data passed to the templates as ``page``.

    Attributes
    ----------
    url : str
        Page URL.
    title : str
        Page title.
    level : int
        Depth in the tree; 0 for the homepage.
    is_section : bool
        True when the page is a directory.
    is_home : bool
        True for the configured homepage.
    front_matter : Mapping[str, Any]
        Read-only front-matter, including pass-through keys.
    source : Path or None
        Document the page was read from.
    """

    url: str
    title: str
    level: int
    is_section: bool
    is_home: bool
    front_matter: cabc.Mapping[str, typ.Any]
    source: Path | None

    @classmethod
    def from_page(cls, page: Page, *, is_home: bool) -> PageModel:
        return cls(
            url=page.url,
            title=page.title,
            level=page.level,
            is_section=page.is_section,
            is_home=is_home,
            front_matter=page.front_matter,
            source=page.source,
        )


__all__ = ["PageModel"]
