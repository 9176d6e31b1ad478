"""Content tree scanning for docsite.

This subpackage turns a directory of front-matter annotated Markdown into an
immutable :class:`Site`: an index-linked tuple of :class:`Page` objects in
pre-order, the settings it was built with, and the documents that had to be
skipped. The entry point is :class:`ContentTreeBuilder`.

Examples
--------
>>> from pathlib import Path
>>> from docsite.content import ContentTreeBuilder
>>> from docsite.settings import load_settings
>>> builder = ContentTreeBuilder(load_settings(None))
>>> site = builder.build(Path("content"))  # doctest: +SKIP
>>> site.page("/db/examples").level  # doctest: +SKIP
2
"""

from .builder import ContentTreeBuilder
from .front_matter import Document, parse_document, read_document
from .models import Page, Site, normalize_url

__all__ = [
    "ContentTreeBuilder",
    "Document",
    "Page",
    "Site",
    "normalize_url",
    "parse_document",
    "read_document",
]
