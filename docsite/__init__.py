"""Compose documentation sites from Markdown content and cascading settings.

docsite scans a directory of front-matter annotated Markdown into an
immutable page tree, derives breadcrumbs, side menus, and global title
indexes from it, and renders every page through Jinja templates with the
site's settings and asset URLs in reach.

Exports
-------
- ``app``: Cyclopts application with the ``build`` and ``run`` commands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from docsite import main
>>> main()  # doctest: +SKIP
>>> from docsite import app
>>> app.name[0]
'docsite'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
