"""Markdown-to-HTML conversion with Pygments highlighting."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from docsite._constants import DEFAULT_PYGMENTS_STYLE

from .link_rewriter import SiteLinkExtension

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
MARKDOWN_EXTENSIONS = ("fenced_code", "codehilite", "tables", "sane_lists", "toc")


class HtmlContentRenderer:
    """Render page Markdown to HTML with consistent code styling.

    Instances are callables matching ``render(markdown) -> html`` so any other
    converter with that signature can stand in for them. They keep no state
    between calls and may be shared by render workers.
    """

    def __init__(self, pygments_style: str = DEFAULT_PYGMENTS_STYLE) -> None:
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def __call__(self, text: str, *, base_dir: str | None = None) -> str:
        return self.markdown(text, base_dir=base_dir)

    def markdown(self, text: str, *, base_dir: str | None = None) -> str:
        """Render ``text`` to HTML.

        Parameters
        ----------
        text : str
            Markdown source.
        base_dir : str, optional
            Site URL of the directory holding the document; relative links are
            rewritten against it when given.

        Returns
        -------
        str
            HTML fragment; empty for blank input.
        """
        normalized = _normalize_fences(text)
        if not normalized.strip():
            return ""
        extensions: list[Extension | str] = list(MARKDOWN_EXTENSIONS)
        if base_dir is not None:
            extensions.append(SiteLinkExtension(base_dir))
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
            output_format="html",
        )
        html = md.convert(normalized)
        return _label_code_blocks(html, normalized)


def _label_code_blocks(html: str, source_markdown: str) -> str:
    """Add ``data-language`` to each highlighted block, in source order."""
    languages = [
        match.group(1) or "text"
        for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
    ]
    if not languages:
        return html
    remaining = iter(languages)

    def _repl(_match: re.Match[str]) -> str:
        lang = escape(next(remaining, "text"), quote=True)
        return f'<div class="codehilite" data-language="{lang}">'

    return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))


def _normalize_fences(text: str) -> str:
    """Outdent indented fences and drop ``lang,extra`` fence attributes."""
    outdented = FENCED_INDENT_PATTERN.sub(r"\1", text)

    def _strip_extras(match: re.Match[str]) -> str:
        fence, language, _extras = match.groups()
        return f"{fence}{language or ''}"

    return FENCE_LABEL_PATTERN.sub(_strip_extras, outdented)


__all__ = ["CODE_BLOCK_PATTERN", "HtmlContentRenderer"]
