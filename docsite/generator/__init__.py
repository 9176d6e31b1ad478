"""Utilities for converting, composing, and rendering docsite pages."""

from .link_rewriter import SiteLinkExtension
from .models import PageModel
from .page_renderer import PageRenderer, is_home
from .renderer import HtmlContentRenderer

__all__ = [
    "HtmlContentRenderer",
    "PageModel",
    "PageRenderer",
    "SiteLinkExtension",
    "is_home",
]
