"""Map logical asset paths to public URLs.

Resolution is pure string composition: no filesystem or network access
happens in :meth:`AssetResolver.resolve`. When ``site/asset_base`` is set the
URL is the base joined with the logical path; otherwise the logical path is
rooted at ``/``. Already-resolved URLs (absolute, protocol-relative, ``data:``,
or under the configured base) come back unchanged, which makes resolution
idempotent.

Fingerprints are an optional mapping from logical path to content digest,
computed ahead of time by :func:`fingerprint_directory`; a fingerprinted asset
resolves with a ``?v=<digest>`` suffix.

Examples
--------
>>> resolver = AssetResolver("https://cdn.example.com/static")
>>> resolver.resolve("css/site.css")
'https://cdn.example.com/static/css/site.css'
>>> resolver.resolve(resolver.resolve("css/site.css"))
'https://cdn.example.com/static/css/site.css'
>>> AssetResolver().resolve("js/app.js")
'/js/app.js'
"""

from __future__ import annotations

import hashlib
import typing as typ
from types import MappingProxyType

from docsite._constants import SETTING_ASSET_BASE
from docsite.errors import AssetResolutionError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from docsite.settings import SettingsStore

RESOLVED_PREFIXES = ("http://", "https://", "data:", "//")
DIGEST_LENGTH = 12


class AssetResolver:
    """Resolve logical asset paths against an optional base URL."""

    def __init__(
        self,
        base: str | None = None,
        *,
        fingerprints: cabc.Mapping[str, str] | None = None,
    ) -> None:
        self.base = base.rstrip("/") if base else None
        self.fingerprints = MappingProxyType(dict(fingerprints or {}))

    @classmethod
    def from_settings(
        cls,
        settings: SettingsStore,
        *,
        fingerprints: cabc.Mapping[str, str] | None = None,
    ) -> AssetResolver:
        """Build a resolver from the ``site/asset_base`` setting."""
        base = settings.lookup(SETTING_ASSET_BASE)
        return cls(str(base) if base else None, fingerprints=fingerprints)

    def resolve(self, logical_path: str) -> str:
        """Return the public URL for ``logical_path``.

        Raises
        ------
        AssetResolutionError
            If ``logical_path`` is not a non-empty string.
        """
        if not isinstance(logical_path, str) or not logical_path.strip():
            msg = f"Asset path must be a non-empty string, got {logical_path!r}"
            raise AssetResolutionError(msg)

        path = logical_path.strip()
        if self._is_resolved(path):
            return path

        key = path.lstrip("/")
        url = f"{self.base}/{key}" if self.base else f"/{key}"
        digest = self.fingerprints.get(key)
        if digest:
            url = f"{url}?v={digest}"
        return url

    __call__ = resolve

    def _is_resolved(self, path: str) -> bool:
        lower = path.lower()
        if lower.startswith(RESOLVED_PREFIXES):
            return True
        if self.base:
            return path == self.base or path.startswith(f"{self.base}/")
        return path.startswith("/") and "?v=" in path


def content_digest(data: bytes) -> str:
    """Return the short SHA-256 digest used to fingerprint ``data``."""
    return hashlib.sha256(data).hexdigest()[:DIGEST_LENGTH]


def fingerprint_directory(root: Path) -> dict[str, str]:
    """Return digests for every file below ``root`` keyed by POSIX path."""
    digests: dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        if path.is_file():
            relative = path.relative_to(root).as_posix()
            digests[relative] = content_digest(path.read_bytes())
    return digests


__all__ = [
    "AssetResolver",
    "content_digest",
    "fingerprint_directory",
]
