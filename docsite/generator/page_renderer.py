"""Compose a page's content, navigation, and settings into an HTML document.

:class:`PageRenderer` converts a page's Markdown with
:class:`~docsite.generator.renderer.HtmlContentRenderer` (or any injected
``render(markdown) -> html`` callable), builds the template context, and
evaluates a Jinja template. The homepage renders ``home.jinja``; every other
page renders ``page.jinja``, which adds the breadcrumb wrapper. A page may
pick another template through its ``template`` front-matter key.

Templates see these names:

``title``, ``content``, ``page``
    The page's title, converted HTML, and :class:`PageModel`.
``breadcrumb``, ``side_menu``
    Navigation for the page (see :mod:`docsite.navigation`).
``titles(n)``
    Global index of pages at index depth ``n``.
``setting(key)``, ``settings(key)``
    Tagged settings lookup and list lookup; absent keys are falsy.
``asset(path)``
    Logical asset path to URL.
``is_home``
    True for the configured homepage only.
``site_url``
    The configured home URL.

Example
-------
>>> from docsite.generator import PageRenderer
>>> renderer = PageRenderer()  # doctest: +SKIP
>>> html = renderer.render(site.page("/db/examples"), site)  # doctest: +SKIP
>>> html.startswith(b"<!DOCTYPE html>")  # doctest: +SKIP
True
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError
from markupsafe import Markup

from docsite._constants import (
    DEFAULT_PYGMENTS_STYLE,
    SETTING_PYGMENTS_STYLE,
    SETTING_TEMPLATES,
)
from docsite.assets import AssetResolver
from docsite.errors import AssetResolutionError, RenderError
from docsite.navigation import NavigationResolver

from .models import PageModel
from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docsite.content import Page, Site

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
HOME_TEMPLATE = "home.jinja"
PAGE_TEMPLATE = "page.jinja"
ERROR_TEMPLATE = "error.jinja"
TEMPLATE_SUFFIX = ".jinja"


def is_home(page: Page, site: Site) -> bool:
    """Return True when ``page`` is the site's configured homepage."""
    return page.level == 0 and page.url == site.home_url


class PageRenderer:
    """Render pages of a site snapshot to UTF-8 HTML documents."""

    def __init__(
        self,
        *,
        templates_dir: Path | None = None,
        markup: cabc.Callable[[str], str] | None = None,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
    ) -> None:
        """Initialize the renderer and its Jinja environment.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing the Jinja templates; defaults to the
            templates shipped with the package.
        markup : Callable[[str], str], optional
            Markdown-to-HTML converter. When omitted an
            :class:`HtmlContentRenderer` is used and relative links are
            rewritten to site URLs.
        pygments_style : str, optional
            Pygments style for the default converter.
        """
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.markup = markup
        self.content_renderer = HtmlContentRenderer(pygments_style)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @classmethod
    def for_site(cls, site: Site, **kwargs: typ.Any) -> PageRenderer:
        """Build a renderer configured from the site's settings."""
        settings = site.settings
        kwargs.setdefault("templates_dir", settings.resolve_path(SETTING_TEMPLATES))
        kwargs.setdefault(
            "pygments_style",
            str(settings.lookup(SETTING_PYGMENTS_STYLE) or DEFAULT_PYGMENTS_STYLE),
        )
        return cls(**kwargs)

    def render(
        self,
        page: Page,
        site: Site,
        *,
        navigation: NavigationResolver | None = None,
        assets: AssetResolver | None = None,
    ) -> bytes:
        """Render ``page`` into a complete HTML document.

        Parameters
        ----------
        page : Page
            Page to render.
        site : Site
            Snapshot the page belongs to.
        navigation : NavigationResolver, optional
            Shared resolver for ``site``; built on demand when omitted.
        assets : AssetResolver, optional
            Shared asset resolver; built from the site settings when omitted.

        Returns
        -------
        bytes
            UTF-8 encoded HTML ending with a newline.

        Raises
        ------
        RenderError
            If Markdown conversion or template evaluation fails. No partial
            document is produced.
        AssetResolutionError
            If a template passes an unusable path to ``asset``.
        """
        navigation = navigation or NavigationResolver(site)
        assets = assets or AssetResolver.from_settings(site.settings)
        content = self._convert(page, site)
        home = is_home(page, site)
        context = {
            "page": PageModel.from_page(page, is_home=home),
            "title": page.title,
            "content": Markup(content),
            "front_matter": page.front_matter,
            "breadcrumb": navigation.breadcrumb(page),
            "side_menu": navigation.side_menu(page),
            "titles": lambda level: navigation.titles_at_level(level, current=page),
            "setting": site.settings.get,
            "settings": site.settings.get_all,
            "asset": assets.resolve,
            "is_home": home,
            "site_url": site.home_url,
            "pygments_css": self.content_renderer.stylesheet,
        }
        template_name = self._template_name(page, home=home)
        try:
            html = self.env.get_template(template_name).render(**context)
        except AssetResolutionError:
            raise
        except Exception as exc:  # noqa: BLE001 - front matter reaches templates
            msg = f"template '{template_name}' failed: {exc}"
            raise RenderError(page.url, msg) from exc
        if not html.endswith("\n"):
            html += "\n"
        return html.encode("utf-8")

    def render_error(self, error: RenderError, site: Site) -> bytes:
        """Render the fallback document served in place of a failed page."""
        assets = AssetResolver.from_settings(site.settings)
        context = {
            "url": error.url,
            "message": error.message,
            "setting": site.settings.get,
            "settings": site.settings.get_all,
            "asset": assets.resolve,
        }
        try:
            html = self.env.get_template(ERROR_TEMPLATE).render(**context)
        except TemplateError:
            logger.exception("error template failed for %s", error.url)
            safe_url = Markup.escape(error.url)
            html = f"<!DOCTYPE html>\n<title>Error</title>\n<p>{safe_url}</p>"
        if not html.endswith("\n"):
            html += "\n"
        return html.encode("utf-8")

    def _convert(self, page: Page, site: Site) -> str:
        """Convert the page body to HTML, raising RenderError on failure."""
        try:
            if self.markup is not None:
                return self.markup(page.raw_body)
            return self.content_renderer.markdown(
                page.raw_body, base_dir=_content_dir(page, site)
            )
        except Exception as exc:  # noqa: BLE001 - converter is pluggable
            msg = f"markup conversion failed: {exc}"
            raise RenderError(page.url, msg) from exc

    @staticmethod
    def _template_name(page: Page, *, home: bool) -> str:
        override = page.template
        if override:
            if override.endswith(TEMPLATE_SUFFIX):
                return override
            return f"{override}{TEMPLATE_SUFFIX}"
        return HOME_TEMPLATE if home else PAGE_TEMPLATE


def _content_dir(page: Page, site: Site) -> str:
    """Return the site URL of the directory that holds ``page``'s document."""
    if page.is_section:
        return page.url
    parent = site.parent(page)
    return parent.url if parent is not None else page.url


__all__ = ["PageRenderer", "is_home"]
