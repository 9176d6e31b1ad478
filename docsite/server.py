"""Development HTTP server for a built docsite snapshot.

The server answers from the :class:`~docsite.build.SnapshotStore`'s current
snapshot: page URLs return their rendered document, other paths fall back to
files in the static directory or beside the content documents. Each request
reads the snapshot reference once, so a rebuild never changes a response
halfway through.

On platforms with ``SIGHUP`` the signal triggers a rebuild on a background
thread; a failed rebuild keeps serving the previous snapshot. There is no
file watching.

Example
-------
>>> from docsite.server import create_app
>>> app = create_app(store)  # doctest: +SKIP
>>> from starlette.testclient import TestClient  # doctest: +SKIP
>>> TestClient(app).get("/db/examples").status_code  # doctest: +SKIP
200
"""

from __future__ import annotations

import logging
import mimetypes
import signal
import threading
import typing as typ
from urllib.parse import unquote

import uvicorn
from starlette.applications import Starlette
from starlette.responses import HTMLResponse, Response
from starlette.routing import Route

from docsite._constants import DOCUMENT_SUFFIXES

if typ.TYPE_CHECKING:
    from pathlib import Path

    from starlette.requests import Request

    from docsite.build import BuildResult, SnapshotStore

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
NOT_FOUND_BODY = "<!DOCTYPE html>\n<title>Not found</title>\n<h1>Not found</h1>\n"


def resolve_request(result: BuildResult, raw_path: str) -> tuple[bytes, str] | None:
    """Return ``(body, content_type)`` for a request path, or None for 404."""
    path = unquote(raw_path.split("?", 1)[0]) or "/"
    trimmed = path.removesuffix("/index.html")
    document = result.document(trimmed or "/")
    if document is not None:
        return document, HTML_CONTENT_TYPE

    relative = path.lstrip("/")
    if not relative:
        return None
    roots: list[Path] = []
    if result.static_dir is not None:
        roots.append(result.static_dir)
    roots.append(result.site.content_root)
    for root in roots:
        candidate = _safe_file(root, relative)
        if candidate is not None:
            content_type = mimetypes.guess_type(candidate.name)[0]
            return candidate.read_bytes(), content_type or "application/octet-stream"
    return None


def _safe_file(root: Path, relative: str) -> Path | None:
    """Return ``root/relative`` if it is a servable file inside ``root``."""
    base = root.resolve()
    candidate = (base / relative).resolve()
    if not candidate.is_relative_to(base) or not candidate.is_file():
        return None
    if candidate.suffix.lower() in DOCUMENT_SUFFIXES:
        return None
    if any(part.startswith((".", "_")) for part in candidate.relative_to(base).parts):
        return None
    return candidate


def create_app(store: SnapshotStore) -> Starlette:
    """Return a Starlette application serving ``store``'s current snapshot."""

    def serve_snapshot(request: Request) -> Response:
        found = resolve_request(store.current, request.url.path)
        if found is None:
            return HTMLResponse(NOT_FOUND_BODY, status_code=404)
        body, content_type = found
        return Response(body, media_type=content_type)

    return Starlette(
        routes=[Route("/{path:path}", serve_snapshot, methods=["GET", "HEAD"])]
    )


def _install_rebuild_signal(store: SnapshotStore) -> None:
    if not hasattr(signal, "SIGHUP"):  # pragma: no cover - Windows
        return

    def _on_hangup(_signum: int, _frame: typ.Any) -> None:
        logger.info("SIGHUP received; rebuilding")
        threading.Thread(
            target=store.rebuild, name="docsite-rebuild", daemon=True
        ).start()

    signal.signal(signal.SIGHUP, _on_hangup)


def serve(store: SnapshotStore, *, bind: str, port: int) -> None:
    """Serve ``store`` with uvicorn until interrupted."""
    _install_rebuild_signal(store)
    logger.info("serving on http://%s:%d", bind, port)
    uvicorn.run(create_app(store), host=bind, port=port, log_level="info")


__all__ = ["create_app", "resolve_request", "serve"]
