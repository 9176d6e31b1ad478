"""Immutable page tree produced by the content scan."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from types import MappingProxyType

from docsite._constants import HOME_URL, SETTING_HOME

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from docsite.errors import ContentParseError
    from docsite.settings import SettingsStore

_SLASHES = re.compile(r"/{2,}")


def normalize_url(url: str) -> str:
    """Return ``url`` with one leading slash and no trailing slash.

    Examples
    --------
    >>> normalize_url("db//examples/")
    '/db/examples'
    >>> normalize_url("")
    '/'
    """
    collapsed = _SLASHES.sub("/", f"/{url.strip()}")
    if len(collapsed) > 1:
        collapsed = collapsed.rstrip("/")
    return collapsed or HOME_URL


@dc.dataclass(frozen=True, slots=True)
class Page:
    """A content document, or a Section when ``is_section`` is set.

    Attributes
    ----------
    index : int
        Position of the page in :attr:`Site.pages` (pre-order).
    url : str
        Normalized slash path, unique within the site.
    title : str
        Front-matter title or the humanized file/directory name.
    level : int
        Depth in the tree; 0 for the homepage.
    parent : int or None
        Index of the containing Section. Never used to mutate it.
    raw_body : str
        Markdown following the front-matter block.
    front_matter : Mapping[str, Any]
        Read-only front-matter values, including pass-through keys.
    source : Path or None
        Document the page was read from; ``None`` for a directory without an
        index document.
    children : tuple[int, ...]
        Child indexes in navigation order (empty for leaves).
    is_section : bool
        True for directories.
    """

    index: int
    url: str
    title: str
    level: int
    parent: int | None
    raw_body: str
    front_matter: cabc.Mapping[str, typ.Any]
    source: Path | None
    children: tuple[int, ...] = ()
    is_section: bool = False

    @property
    def order(self) -> int | None:
        value = self.front_matter.get("order")
        return value if isinstance(value, int) else None

    @property
    def template(self) -> str | None:
        value = self.front_matter.get("template")
        return str(value) if value else None


class Site:
    """Read-only snapshot of the content tree and its settings.

    Pages are stored in a flat tuple in pre-order; parent and child relations
    are indexes into that tuple, so the snapshot holds no reference cycles
    and can be shared between render workers without locking.
    """

    __slots__ = ("_pages", "_url_index", "content_root", "parse_errors", "settings")

    def __init__(
        self,
        pages: cabc.Sequence[Page],
        *,
        settings: SettingsStore,
        content_root: Path,
        parse_errors: cabc.Sequence[ContentParseError] = (),
    ) -> None:
        if not pages:
            msg = "A site needs at least the homepage."
            raise ValueError(msg)
        self._pages = tuple(pages)
        self._url_index = MappingProxyType(
            {page.url: page.index for page in self._pages}
        )
        self.settings = settings
        self.content_root = content_root
        self.parse_errors = tuple(parse_errors)

    @property
    def pages(self) -> tuple[Page, ...]:
        return self._pages

    @property
    def root(self) -> Page:
        return self._pages[0]

    @property
    def home_url(self) -> str:
        return normalize_url(str(self.settings.lookup(SETTING_HOME, HOME_URL)))

    def get(self, url: str) -> Page | None:
        """Return the page at ``url`` or ``None``."""
        index = self._url_index.get(normalize_url(url))
        return None if index is None else self._pages[index]

    def page(self, url: str) -> Page:
        """Return the page at ``url``, raising ``KeyError`` when unknown."""
        found = self.get(url)
        if found is None:
            msg = f"Unknown page '{url}'."
            raise KeyError(msg)
        return found

    def parent(self, page: Page) -> Page | None:
        return None if page.parent is None else self._pages[page.parent]

    def children(self, page: Page) -> tuple[Page, ...]:
        return tuple(self._pages[index] for index in page.children)

    def ancestors(self, page: Page) -> list[Page]:
        """Return the chain from the root to ``page``, both included."""
        chain: list[Page] = []
        current: Page | None = page
        while current is not None:
            chain.append(current)
            current = self.parent(current)
        chain.reverse()
        return chain

    def walk(self) -> cabc.Iterator[Page]:
        """Yield every page in pre-order, depth-first."""
        stack = [self.root]
        while stack:
            page = stack.pop()
            yield page
            stack.extend(reversed(self.children(page)))

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> cabc.Iterator[Page]:
        return self.walk()


__all__ = ["Page", "Site", "normalize_url"]
