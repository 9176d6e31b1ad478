"""Build whole sites: scan, render every page, collect failures, write output.

:func:`build_site` turns a :class:`~docsite.settings.SettingsStore` into a
:class:`BuildResult`: the immutable site snapshot, one rendered document per
URL, and a :class:`BuildReport` of the documents that were skipped and the
pages that failed to render. A failed page is replaced by the fallback error
document for its URL only; the rest of the site is unaffected.

Pages render on a thread pool bounded by ``build/workers`` (default: CPU
count). Workers share the read-only snapshot, so no locking is needed.

:class:`SnapshotStore` keeps the most recent good :class:`BuildResult` for the
development server and swaps in a new one only when a rebuild succeeds.

Example
-------
>>> from pathlib import Path
>>> from docsite.build import build_site, write_output
>>> from docsite.settings import load_settings
>>> result = build_site(load_settings(Path("settings.yaml")))  # doctest: +SKIP
>>> write_output(result, Path("public"))  # doctest: +SKIP
[PosixPath('public/index.html'), ...]
"""

from __future__ import annotations

import concurrent.futures as cf
import dataclasses as dc
import logging
import os
import shutil
import threading
import typing as typ
from pathlib import Path
from types import MappingProxyType

from docsite._constants import (
    DEFAULT_CONTENT_DIR,
    SETTING_CONTENT,
    SETTING_FINGERPRINT,
    SETTING_STATIC,
    SETTING_WORKERS,
)
from docsite.assets import AssetResolver, fingerprint_directory
from docsite.content import ContentTreeBuilder
from docsite.errors import (
    ConfigParseError,
    ContentParseError,
    DocsiteError,
    RenderError,
)
from docsite.generator import PageRenderer
from docsite.navigation import NavigationResolver

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docsite.content import Page, Site
    from docsite.settings import SettingsStore

logger = logging.getLogger(__name__)

OUTPUT_INDEX = "index.html"


@dc.dataclass(slots=True)
class BuildReport:
    """Per-document and per-page problems collected during a build.

    Attributes
    ----------
    parse_errors : list[ContentParseError]
        Documents skipped while scanning the content tree.
    render_errors : list[RenderError]
        Pages replaced by the fallback error document.
    rendered : list[str]
        URLs rendered successfully, in site order.
    """

    parse_errors: list[ContentParseError] = dc.field(default_factory=list)
    render_errors: list[RenderError] = dc.field(default_factory=list)
    rendered: list[str] = dc.field(default_factory=list)

    @property
    def errors(self) -> list[DocsiteError]:
        return [*self.parse_errors, *self.render_errors]

    @property
    def ok(self) -> bool:
        return not self.parse_errors and not self.render_errors

    def summary(self) -> str:
        return (
            f"{len(self.rendered)} pages rendered, "
            f"{len(self.parse_errors)} documents skipped, "
            f"{len(self.render_errors)} pages failed"
        )


@dc.dataclass(frozen=True, slots=True)
class BuildResult:
    """A finished build: snapshot, rendered documents, and report."""

    site: Site
    documents: cabc.Mapping[str, bytes]
    report: BuildReport
    static_dir: Path | None = None

    def document(self, url: str) -> bytes | None:
        """Return the rendered document for ``url``, if the site has one."""
        page = self.site.get(url)
        return None if page is None else self.documents.get(page.url)


def build_site(
    settings: SettingsStore,
    *,
    content_root: Path | None = None,
    renderer: PageRenderer | None = None,
    max_workers: int | None = None,
) -> BuildResult:
    """Scan the content tree and render every page.

    Parameters
    ----------
    settings : SettingsStore
        Loaded settings; ``site/content`` locates the content root.
    content_root : Path, optional
        Override for the content root.
    renderer : PageRenderer, optional
        Renderer to use; configured from the settings when omitted.
    max_workers : int, optional
        Render pool size; defaults to ``build/workers`` or the CPU count.

    Returns
    -------
    BuildResult
        Snapshot, documents keyed by URL (in site order), and report.

    Raises
    ------
    FileNotFoundError
        If the content root is not a directory.
    ConfigParseError
        If ``build/workers`` is not a positive integer.
    """
    root = content_root or settings.resolve_path(SETTING_CONTENT, DEFAULT_CONTENT_DIR)
    if root is None:  # pragma: no cover - defaults always provide a value
        source = settings.source_of(SETTING_CONTENT) or "<settings>"
        msg = "no content root configured"
        raise ConfigParseError(source, msg)
    site = ContentTreeBuilder(settings).build(root)

    static_dir = settings.resolve_path(SETTING_STATIC)
    if static_dir is not None and not static_dir.is_dir():
        logger.warning("static directory %s does not exist; ignoring", static_dir)
        static_dir = None
    fingerprints = None
    if static_dir is not None and settings.lookup(SETTING_FINGERPRINT):
        fingerprints = fingerprint_directory(static_dir)
    assets = AssetResolver.from_settings(settings, fingerprints=fingerprints)

    renderer = renderer or PageRenderer.for_site(site)
    navigation = NavigationResolver(site)
    workers = max_workers or _worker_count(settings)
    report = BuildReport(parse_errors=list(site.parse_errors))
    documents = _render_all(site, renderer, navigation, assets, workers, report)
    logger.info("build finished: %s", report.summary())
    return BuildResult(
        site=site,
        documents=MappingProxyType(documents),
        report=report,
        static_dir=static_dir,
    )


def _render_all(
    site: Site,
    renderer: PageRenderer,
    navigation: NavigationResolver,
    assets: AssetResolver,
    workers: int,
    report: BuildReport,
) -> dict[str, bytes]:
    """Render pages on the pool; keep site order whatever the completion order."""
    pages = list(site.walk())

    def _render(page: Page) -> bytes:
        return renderer.render(page, site, navigation=navigation, assets=assets)

    documents: dict[str, bytes] = {}
    with cf.ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="docsite-render"
    ) as executor:
        futures = [(page, executor.submit(_render, page)) for page in pages]
        for page, future in futures:
            try:
                documents[page.url] = future.result()
            except RenderError as exc:
                logger.warning("render failed for %s: %s", exc.url, exc.message)
                report.render_errors.append(exc)
                documents[page.url] = renderer.render_error(exc, site)
            else:
                report.rendered.append(page.url)
    return documents


def _worker_count(settings: SettingsStore) -> int:
    raw = settings.lookup(SETTING_WORKERS)
    if raw is None:
        return os.cpu_count() or 1
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        source = settings.source_of(SETTING_WORKERS) or "<settings>"
        msg = f"'{SETTING_WORKERS}' must be a positive integer, got {raw!r}"
        raise ConfigParseError(source, msg)
    return raw


def output_path(url: str, output_dir: Path) -> Path:
    """Return the file a page URL is written to (``<url>/index.html``)."""
    relative = url.strip("/")
    if not relative:
        return output_dir / OUTPUT_INDEX
    return output_dir / relative / OUTPUT_INDEX


def write_output(result: BuildResult, output_dir: Path) -> list[Path]:
    """Write every rendered document and the static files under ``output_dir``.

    Returns
    -------
    list[Path]
        Paths of the written HTML documents, in site order.
    """
    written: list[Path] = []
    for url, document in result.documents.items():
        path = output_path(url, output_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(document)
        written.append(path)
    if result.static_dir is not None:
        shutil.copytree(result.static_dir, output_dir, dirs_exist_ok=True)
    return written


class SnapshotStore:
    """Hold the current :class:`BuildResult` and rebuild it on request.

    Readers take :attr:`current` and keep using that snapshot for as long as
    they need it; a rebuild produces an entirely new result and swaps the
    reference, so in-flight requests are never affected. A rebuild that fails
    wholesale leaves the previous snapshot in place.
    """

    def __init__(
        self,
        builder: cabc.Callable[[], BuildResult],
    ) -> None:
        self._builder = builder
        self._lock = threading.Lock()
        self._current: BuildResult | None = None

    @property
    def current(self) -> BuildResult:
        current = self._current
        if current is None:
            msg = "No snapshot has been built yet."
            raise RuntimeError(msg)
        return current

    def start(self) -> BuildResult:
        """Build the first snapshot; failures propagate (fatal at startup)."""
        with self._lock:
            self._current = self._builder()
            return self._current

    def rebuild(self) -> bool:
        """Replace the snapshot; on failure keep the old one and return False."""
        with self._lock:
            try:
                result = self._builder()
            except (DocsiteError, OSError):
                logger.exception("rebuild failed; keeping the previous snapshot")
                return False
            self._current = result
            return True


__all__ = [
    "BuildReport",
    "BuildResult",
    "SnapshotStore",
    "build_site",
    "output_path",
    "write_output",
]
