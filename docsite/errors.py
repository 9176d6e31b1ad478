"""Error taxonomy shared by the docsite build pipeline.

``ConfigParseError`` is fatal and aborts startup. ``ContentParseError`` and
``RenderError`` are per-document and per-page failures that the build collects
into a :class:`~docsite.build.BuildReport` instead of raising, so one bad page
never blocks the rest of the site. ``AssetResolutionError`` signals a
programming error in a template or caller.

Examples
--------
>>> from docsite.errors import RenderError
>>> err = RenderError("/db/examples", "template 'page.jinja' not found")
>>> err.url
'/db/examples'
>>> str(err)
"/db/examples: template 'page.jinja' not found"
"""

from __future__ import annotations

from pathlib import Path


class DocsiteError(Exception):
    """Base class for every error raised by docsite."""


class ConfigParseError(DocsiteError, ValueError):
    """Raised when a settings file is missing or malformed."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")


class ContentParseError(DocsiteError):
    """A content document that could not be read or parsed."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")


class RenderError(DocsiteError):
    """A page whose markup or template evaluation failed."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"{url}: {message}")


class AssetResolutionError(DocsiteError, ValueError):
    """Raised when an asset path cannot be resolved (a caller bug)."""


__all__ = [
    "AssetResolutionError",
    "ConfigParseError",
    "ContentParseError",
    "DocsiteError",
    "RenderError",
]
