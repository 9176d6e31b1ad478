"""Derive breadcrumbs, side menus, and title indexes from a site snapshot.

Everything here is pure in-memory computation over an immutable
:class:`~docsite.content.Site`, so one resolver can be shared by every render
worker. Entries are small dataclasses the templates read by attribute; each
offers ``to_dict`` for JSON output.

Example
-------
>>> from docsite.navigation import NavigationResolver
>>> nav = NavigationResolver(site)  # doctest: +SKIP
>>> crumbs = nav.breadcrumb(site.page("/db/examples"))  # doctest: +SKIP
>>> [crumb.text for crumb in crumbs]  # doctest: +SKIP
['Home', 'db', 'examples']
>>> [entry.url for entry in nav.titles_at_level(0)]  # doctest: +SKIP
['/db', '/about']
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from docsite.content import Page, Site


@dc.dataclass(frozen=True, slots=True)
class Breadcrumb:
    """One step on the path from the site root to the current page."""

    text: str
    link: str
    is_current: bool = False

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "link": self.link}


@dc.dataclass(frozen=True, slots=True)
class NavEntry:
    """A link in a side menu or title index.

    Attributes
    ----------
    url : str
        Target page URL.
    text : str
        Page title.
    level : int
        Depth of the target page in the tree.
    is_section : bool
        True when the target has children of its own.
    is_current : bool
        True when the target is the page being rendered.
    """

    url: str
    text: str
    level: int
    is_section: bool = False
    is_current: bool = False

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "text": self.text}


class NavigationResolver:
    """Answer navigation questions about one site snapshot."""

    def __init__(self, site: Site) -> None:
        self.site = site
        self._levels: dict[int, list[NavEntry]] = {}
        for page in site.walk():
            if page.parent is None:
                continue
            depth = page.level - 1
            self._levels.setdefault(depth, []).append(_entry(page))

    def breadcrumb(self, page: Page) -> list[Breadcrumb]:
        """Return root-first crumbs ending with ``page`` itself.

        The result has ``page.level + 1`` entries and the last one links to
        ``page.url``.
        """
        return [
            Breadcrumb(
                text=ancestor.title,
                link=ancestor.url,
                is_current=ancestor.index == page.index,
            )
            for ancestor in self.site.ancestors(page)
        ]

    def side_menu(self, page: Page) -> list[NavEntry]:
        """Return a Section's children, or a leaf's siblings including itself."""
        if page.is_section:
            scope: Page | None = page
        else:
            scope = self.site.parent(page)
        if scope is None:
            return []
        return [_entry(child, current=page) for child in self.site.children(scope)]

    def children(self, page: Page) -> list[NavEntry]:
        """Return the direct children of ``page`` in tree order."""
        return [_entry(child, current=page) for child in self.site.children(page)]

    def titles_at_level(
        self, level: int, *, current: Page | None = None
    ) -> list[NavEntry]:
        """Return every page at index depth ``level`` in pre-order.

        Index depth counts from the homepage's children: 0 lists the top
        sections, 1 their immediate sub-pages. The index is global and does
        not depend on ``current`` beyond flagging it.
        """
        entries = self._levels.get(level, [])
        if current is None:
            return list(entries)
        return [
            dc.replace(entry, is_current=entry.url == current.url)
            for entry in entries
        ]

    def entry_for(self, url: str) -> NavEntry | None:
        """Return a navigation entry for the page at ``url``, if it exists."""
        page = self.site.get(url)
        return None if page is None else _entry(page)


def _entry(page: Page, *, current: Page | None = None) -> NavEntry:
    return NavEntry(
        url=page.url,
        text=page.title,
        level=page.level,
        is_section=page.is_section,
        is_current=current is not None and current.index == page.index,
    )


__all__ = ["Breadcrumb", "NavEntry", "NavigationResolver"]
