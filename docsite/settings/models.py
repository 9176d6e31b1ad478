"""Typed values and the cascading store behind docsite settings."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from docsite._constants import KEY_SEPARATOR

from .helpers import assign_nested, normalize_key

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dc.dataclass(frozen=True, slots=True)
class Absent:
    """Marker returned for keys no settings file defines; always falsy."""

    @property
    def value(self) -> None:
        return None

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return ""

    def __iter__(self) -> cabc.Iterator[typ.Any]:
        return iter(())


ABSENT = Absent()


@dc.dataclass(frozen=True, slots=True)
class Scalar:
    """A string, number, boolean, or null leaf."""

    value: str | int | float | bool | None

    def __bool__(self) -> bool:
        return bool(self.value)

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)


@dc.dataclass(frozen=True, slots=True)
class ListValue:
    """A list leaf; lists are replaced wholesale, never merged across files."""

    items: tuple[typ.Any, ...]

    @property
    def value(self) -> list[typ.Any]:
        return list(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def __iter__(self) -> cabc.Iterator[typ.Any]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dc.dataclass(frozen=True, slots=True)
class MappingValue:
    """A subtree assembled from every leaf below a key prefix."""

    entries: dict[str, typ.Any]

    @property
    def value(self) -> dict[str, typ.Any]:
        return dict(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def __getitem__(self, key: str) -> typ.Any:
        return self.entries[key]

    def __iter__(self) -> cabc.Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str, default: typ.Any = None) -> typ.Any:
        return self.entries.get(key, default)


SettingValue = Absent | Scalar | ListValue | MappingValue


@dc.dataclass(frozen=True, slots=True)
class SettingsLayer:
    """One flattened settings file.

    Attributes
    ----------
    path : Path or None
        File the layer was read from; ``None`` for in-memory layers.
    values : dict[str, Any]
        Leaf values keyed by slash-joined setting keys.
    """

    path: Path | None
    values: dict[str, typ.Any]

    def defines_prefix(self, key: str) -> bool:
        """Return True when any leaf lives below ``key``."""
        prefix = f"{key}{KEY_SEPARATOR}"
        return any(candidate.startswith(prefix) for candidate in self.values)


class SettingsStore:
    """Resolve setting keys through an ordered cascade of layers.

    Layers are consulted most-specific first (instance file, then defaults).
    The first layer that defines a key, either as a leaf or as the prefix of
    other leaves, decides its kind. Mapping lookups merge the leaves of every
    layer so a subtree agrees with the individual leaf lookups.

    Examples
    --------
    >>> store = SettingsStore(
    ...     [
    ...         SettingsLayer(None, {"page/brand": "X"}),
    ...         SettingsLayer(None, {"page/brand": "Y", "page/body/title": "T"}),
    ...     ]
    ... )
    >>> store.get("page/brand")
    Scalar(value='X')
    >>> store.lookup("page/body")
    {'title': 'T'}
    >>> bool(store.get("page/missing"))
    False
    """

    def __init__(
        self,
        layers: cabc.Sequence[SettingsLayer],
        *,
        base_dir: Path | None = None,
    ) -> None:
        self._layers = tuple(layers)
        self.base_dir = base_dir or Path.cwd()

    @property
    def layers(self) -> tuple[SettingsLayer, ...]:
        return self._layers

    def get(self, key: str) -> SettingValue:
        """Return the tagged value for ``key`` or :data:`ABSENT`."""
        normalized = normalize_key(key)
        if not normalized:
            return ABSENT
        for layer in self._layers:
            if normalized in layer.values:
                return _wrap(layer.values[normalized])
            if layer.defines_prefix(normalized):
                return MappingValue(self._assemble(normalized))
        return ABSENT

    def get_all(self, key: str) -> list[typ.Any]:
        """Return ``key`` as a list, for repeated settings such as menus."""
        match self.get(key):
            case ListValue(items=items):
                return list(items)
            case Absent():
                return []
            case found:
                return [found.value]

    def lookup(self, key: str, default: typ.Any = None) -> typ.Any:
        """Return the plain Python value for ``key`` or ``default``."""
        found = self.get(key)
        if isinstance(found, Absent):
            return default
        return found.value

    def source_of(self, key: str) -> Path | None:
        """Return the file of the layer that decides ``key``, if any."""
        normalized = normalize_key(key)
        for layer in self._layers:
            if normalized in layer.values or layer.defines_prefix(normalized):
                return layer.path
        return None

    def resolve_path(self, key: str, default: str | None = None) -> Path | None:
        """Return a filesystem setting resolved against :attr:`base_dir`."""
        raw = self.lookup(key, default)
        if raw is None or raw == "":
            return None
        path = Path(str(raw)).expanduser()
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and not isinstance(self.get(key), Absent)

    def _assemble(self, key: str) -> dict[str, typ.Any]:
        prefix = f"{key}{KEY_SEPARATOR}"
        tree: dict[str, typ.Any] = {}
        # Least specific first so more specific layers overwrite.
        for layer in reversed(self._layers):
            for candidate, value in layer.values.items():
                if candidate.startswith(prefix):
                    parts = candidate[len(prefix) :].split(KEY_SEPARATOR)
                    assign_nested(tree, parts, value)
        return tree


def _wrap(value: typ.Any) -> SettingValue:
    """Tag a raw leaf value."""
    if isinstance(value, (list, tuple)):
        return ListValue(tuple(value))
    if isinstance(value, dict):
        return MappingValue(dict(value))
    return Scalar(value)


__all__ = [
    "ABSENT",
    "Absent",
    "ListValue",
    "MappingValue",
    "Scalar",
    "SettingValue",
    "SettingsLayer",
    "SettingsStore",
]
