"""Rewrite relative links in Markdown content to site URLs."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from docsite._constants import DOCUMENT_SUFFIXES, INDEX_STEMS
from docsite.content import normalize_url

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

LINK_ATTRIBUTES = {"a": "href", "img": "src"}


class SiteLinkExtension(Extension):
    """Point relative links at the URLs the site serves them from.

    Content authors link between documents by file name (``../db/examples.md``)
    and to images beside them (``diagram.png``). Insert this extension into a
    ``markdown.Markdown`` instance to turn those into root-relative site URLs
    (``/db/examples``, ``/db/diagram.png``) so they keep working whatever the
    output layout.
    """

    def __init__(self, base_dir: str) -> None:
        super().__init__()
        self.base_dir = normalize_url(base_dir)

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link treeprocessor on the Markdown instance."""
        processor = SiteLinkTreeprocessor(md, self.base_dir)
        md.treeprocessors.register(processor, "docsite_site_links", 15)


class SiteLinkTreeprocessor(Treeprocessor):
    """Rewrite relative ``href``/``src`` attributes against a content directory."""

    def __init__(self, md: Markdown, base_dir: str) -> None:
        super().__init__(md)
        self.base_dir = base_dir

    def run(self, root: Element) -> Element:
        """Rewrite relative anchors and images in the parsed tree."""
        for element in root.iter():
            attribute = LINK_ATTRIBUTES.get(element.tag)
            if attribute is None:
                continue
            rewritten = rewrite_link(element.get(attribute), self.base_dir)
            if rewritten:
                element.set(attribute, rewritten)
        return root


def rewrite_link(target: str | None, base_dir: str) -> str | None:
    """Return the site URL for a relative ``target``, or None to keep it.

    Examples
    --------
    >>> rewrite_link("examples.md#setup", "/db")
    '/db/examples#setup'
    >>> rewrite_link("../about/index.md", "/db")
    '/about'
    >>> rewrite_link("https://upper.io", "/db") is None
    True
    """
    if not target or target.startswith(("#", "/")) or "://" in target:
        return None
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return None

    joined = posixpath.normpath(posixpath.join(base_dir, parsed.path))
    while joined.startswith("/.."):
        joined = joined[3:] or "/"

    stem, suffix = posixpath.splitext(joined)
    if suffix.lower() in DOCUMENT_SUFFIXES:
        joined = stem
        if posixpath.basename(stem).lower() in INDEX_STEMS:
            joined = posixpath.dirname(stem)
    url = normalize_url(joined)
    if parsed.query:
        url = f"{url}?{parsed.query}"
    if parsed.fragment:
        url = f"{url}#{parsed.fragment}"
    return url


__all__ = ["SiteLinkExtension", "SiteLinkTreeprocessor", "rewrite_link"]
