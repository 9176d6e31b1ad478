"""Scan a content directory into an immutable :class:`Site` snapshot.

Every directory becomes a Section and every Markdown document a Page. A
directory's own title, ordering, and body come from its ``index.md``. Sibling
order is: names listed in the directory's ``_order.yaml`` manifest first, then
entries with an integer front-matter ``order``, then the rest in
case-insensitive name order.

Document reads are dispatched to a pool of daemon threads and awaited with a
per-file timeout, so a read that never returns cannot keep the process alive;
the tree itself is assembled by the calling thread alone. Directory links that
point back at an enclosing directory are not followed. Documents
that cannot be read or parsed are skipped, logged, and recorded on
:attr:`Site.parse_errors`.

Example
-------
>>> from pathlib import Path
>>> from docsite.content import ContentTreeBuilder
>>> from docsite.settings import load_settings
>>> settings = load_settings(Path("settings.yaml"))  # doctest: +SKIP
>>> site = ContentTreeBuilder(settings).build(Path("content"))  # doctest: +SKIP
>>> [page.url for page in site.walk()][:3]  # doctest: +SKIP
['/', '/db', '/db/getting-started']
"""

from __future__ import annotations

import concurrent.futures as cf
import dataclasses as dc
import logging
import os
import queue
import threading
import typing as typ
from pathlib import Path
from types import MappingProxyType

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from docsite._constants import (
    DEFAULT_READ_TIMEOUT,
    DOCUMENT_SUFFIXES,
    HOME_TITLE,
    HOME_URL,
    INDEX_STEMS,
    ORDER_MANIFEST,
    SETTING_READ_TIMEOUT,
)
from docsite.errors import ConfigParseError, ContentParseError

from .front_matter import Document, read_document
from .models import Page, Site, normalize_url

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docsite.settings import SettingsStore

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True, eq=False)
class _Node:
    """Mutable draft of a page used while the tree is assembled."""

    name: str
    url: str
    title: str
    body: str
    front_matter: dict[str, typ.Any]
    source: Path | None
    is_section: bool
    children: list[_Node] = dc.field(default_factory=list)

    @property
    def order(self) -> int | None:
        value = self.front_matter.get("order")
        return value if isinstance(value, int) else None


@dc.dataclass(slots=True)
class _Listing:
    """Directory scan result: index document, documents, and subdirectories."""

    path: Path
    index: Path | None
    documents: list[Path]
    directories: list[_Listing]


class ContentTreeBuilder:
    """Build a :class:`Site` from a content directory."""

    def __init__(
        self,
        settings: SettingsStore,
        *,
        read_timeout: float | None = None,
        max_workers: int | None = None,
        reader: cabc.Callable[[Path], Document] = read_document,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        settings : SettingsStore
            Settings attached to the resulting site.
        read_timeout : float, optional
            Seconds to wait for each document read. Defaults to the
            ``build/read_timeout`` setting.
        max_workers : int, optional
            Number of read threads; defaults to ``min(32, cpu_count + 4)``.
        reader : Callable[[Path], Document], optional
            Function that reads and parses one document.

        Raises
        ------
        ConfigParseError
            If ``build/read_timeout`` is not a positive number.
        """
        self.settings = settings
        if read_timeout is None:
            read_timeout = _read_timeout(settings)
        self.read_timeout = read_timeout
        self.max_workers = max_workers
        self.reader = reader
        self._errors: list[ContentParseError] = []

    def build(self, root: Path) -> Site:
        """Scan ``root`` and return the finished site snapshot.

        Raises
        ------
        FileNotFoundError
            If ``root`` is not a directory.
        """
        if not root.is_dir():
            msg = f"Content root '{root}' is not a directory."
            raise FileNotFoundError(msg)

        self._errors = []
        listing = _scan(root)
        documents = self._read_all(listing)
        tree = self._assemble(listing, documents, url=HOME_URL, name="")
        pages = _freeze(tree)
        logger.info(
            "built content tree from %s: %d pages, %d skipped",
            root,
            len(pages),
            len(self._errors),
        )
        return Site(
            pages,
            settings=self.settings,
            content_root=root,
            parse_errors=self._errors,
        )

    def _read_all(self, listing: _Listing) -> dict[Path, Document]:
        """Read every document on daemon threads, skipping failures and timeouts."""
        jobs: queue.SimpleQueue[tuple[Path, cf.Future[Document]] | None] = (
            queue.SimpleQueue()
        )
        futures: list[tuple[Path, cf.Future[Document]]] = []
        for path in _iter_documents(listing):
            future: cf.Future[Document] = cf.Future()
            futures.append((path, future))
            jobs.put((path, future))

        workers = min(self.max_workers or _default_workers(), len(futures))
        for number in range(workers):
            jobs.put(None)
            threading.Thread(
                target=self._read_worker,
                args=(jobs,),
                name=f"docsite-read-{number}",
                daemon=True,
            ).start()

        results: dict[Path, Document] = {}
        for path, future in futures:
            try:
                results[path] = future.result(timeout=self.read_timeout)
            except cf.TimeoutError:
                future.cancel()
                msg = f"read timed out after {self.read_timeout:g}s"
                self._skip(ContentParseError(path, msg))
            except ContentParseError as exc:
                self._skip(exc)
        return results

    def _read_worker(
        self, jobs: queue.SimpleQueue[tuple[Path, cf.Future[Document]] | None]
    ) -> None:
        """Run queued reads until the ``None`` sentinel is reached."""
        while True:
            job = jobs.get()
            if job is None:
                return
            path, future = job
            if not future.set_running_or_notify_cancel():
                continue
            try:
                document = self.reader(path)
            except Exception as exc:  # noqa: BLE001 - re-raised by the waiter
                future.set_exception(exc)
            else:
                future.set_result(document)

    def _assemble(
        self,
        listing: _Listing,
        documents: dict[Path, Document],
        *,
        url: str,
        name: str,
    ) -> _Node:
        """Turn a directory listing into a Section draft with ordered children."""
        index_doc = documents.get(listing.index) if listing.index else None
        front_matter = dict(index_doc.front_matter) if index_doc else {}
        fallback = HOME_TITLE if url == HOME_URL else _humanize(name)
        section = _Node(
            name=name,
            url=url,
            title=front_matter.get("title") or fallback,
            body=index_doc.body if index_doc else "",
            front_matter=front_matter,
            source=listing.index if index_doc else None,
            is_section=True,
        )

        taken: set[str] = set()
        children: list[_Node] = []
        for directory in listing.directories:
            child_url = normalize_url(f"{url}/{directory.path.name}")
            taken.add(child_url)
            children.append(
                self._assemble(
                    directory, documents, url=child_url, name=directory.path.name
                )
            )
        for path in listing.documents:
            document = documents.get(path)
            if document is None:
                continue
            child_url = normalize_url(f"{url}/{path.stem}")
            if child_url in taken:
                msg = f"URL '{child_url}' is already used by another entry"
                self._skip(ContentParseError(path, msg))
                continue
            taken.add(child_url)
            children.append(
                _Node(
                    name=path.stem,
                    url=child_url,
                    title=document.front_matter.get("title") or _humanize(path.stem),
                    body=document.body,
                    front_matter=dict(document.front_matter),
                    source=path,
                    is_section=False,
                )
            )

        manifest = self._read_manifest(listing.path)
        section.children = _order_children(children, manifest)
        return section

    def _read_manifest(self, directory: Path) -> list[str]:
        """Return the names listed in ``_order.yaml``, or an empty list."""
        path = directory / ORDER_MANIFEST
        if not path.is_file():
            return []
        loader = YAML(typ="safe")
        try:
            with path.open("r", encoding="utf-8") as handle:
                loaded = loader.load(handle)
        except (OSError, UnicodeDecodeError, YAMLError) as exc:
            self._skip(ContentParseError(path, f"invalid order manifest: {exc}"))
            return []
        if loaded is None:
            return []
        if not isinstance(loaded, list):
            self._skip(ContentParseError(path, "order manifest must be a list"))
            return []
        return [str(entry).strip() for entry in loaded if str(entry).strip()]

    def _skip(self, error: ContentParseError) -> None:
        logger.warning("skipping %s: %s", error.path, error.message)
        self._errors.append(error)


def _read_timeout(settings: SettingsStore) -> float:
    """Return the per-document read timeout, validating the setting."""
    raw = settings.lookup(SETTING_READ_TIMEOUT)
    if raw is None:
        return DEFAULT_READ_TIMEOUT
    if isinstance(raw, bool) or not isinstance(raw, int | float) or raw <= 0:
        source = settings.source_of(SETTING_READ_TIMEOUT) or "<settings>"
        msg = f"'{SETTING_READ_TIMEOUT}' must be a positive number, got {raw!r}"
        raise ConfigParseError(source, msg)
    return float(raw)


def _default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


def _scan(directory: Path, ancestors: frozenset[Path] = frozenset()) -> _Listing:
    """List ``directory`` recursively in case-insensitive name order.

    A subdirectory that resolves to ``directory`` or one of its ancestors is
    a link cycle and is skipped.
    """
    ancestors = ancestors | {directory.resolve()}
    entries = sorted(directory.iterdir(), key=lambda p: (p.name.casefold(), p.name))
    index: Path | None = None
    documents: list[Path] = []
    directories: list[_Listing] = []
    for entry in entries:
        if entry.name.startswith((".", "_")):
            continue
        if entry.is_dir():
            if entry.resolve() in ancestors:
                logger.warning("skipping %s: directory link cycle", entry)
                continue
            directories.append(_scan(entry, ancestors))
        elif entry.is_file() and entry.suffix.lower() in DOCUMENT_SUFFIXES:
            if entry.stem.lower() in INDEX_STEMS and index is None:
                index = entry
            else:
                documents.append(entry)
    return _Listing(
        path=directory, index=index, documents=documents, directories=directories
    )


def _iter_documents(listing: _Listing) -> cabc.Iterator[Path]:
    if listing.index is not None:
        yield listing.index
    yield from listing.documents
    for directory in listing.directories:
        yield from _iter_documents(directory)


def _order_children(children: list[_Node], manifest: list[str]) -> list[_Node]:
    """Apply manifest order, then front-matter ``order``, then name order."""
    by_name = sorted(children, key=lambda node: (node.name.casefold(), node.name))
    listed: list[_Node] = []
    for wanted in manifest:
        stem = wanted
        if wanted.lower().endswith(DOCUMENT_SUFFIXES):
            stem = Path(wanted).stem
        for node in by_name:
            if node.name == stem and node not in listed:
                listed.append(node)
                break
    rest = [node for node in by_name if node not in listed]
    rest.sort(key=lambda node: (node.order is None, node.order or 0))
    return listed + rest


def _humanize(name: str) -> str:
    """Return a display title for a file or directory name."""
    return name.replace("-", " ").replace("_", " ").strip() or name


def _freeze(root: _Node) -> list[Page]:
    """Convert the draft tree into pre-ordered, index-linked pages."""
    pages: list[Page | None] = []

    def _visit(node: _Node, level: int, parent: int | None) -> int:
        index = len(pages)
        pages.append(None)
        child_indexes = tuple(
            _visit(child, level + 1, index) for child in node.children
        )
        pages[index] = Page(
            index=index,
            url=node.url,
            title=node.title,
            level=level,
            parent=parent,
            raw_body=node.body,
            front_matter=MappingProxyType(node.front_matter),
            source=node.source,
            children=child_indexes,
            is_section=node.is_section,
        )
        return index

    _visit(root, 0, None)
    return [typ.cast("Page", page) for page in pages]


__all__ = ["ContentTreeBuilder"]
