"""Utility helpers shared by the settings loader and store."""

from __future__ import annotations

import typing as typ

from docsite._constants import KEY_SEPARATOR

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def normalize_key(key: object) -> str:
    """Return ``key`` as a slash-joined path without empty segments."""
    segments = [segment.strip() for segment in str(key).split(KEY_SEPARATOR)]
    return KEY_SEPARATOR.join(segment for segment in segments if segment)


def flatten_settings(
    payload: cabc.Mapping[typ.Any, typ.Any],
    prefix: str = "",
    flat: dict[str, typ.Any] | None = None,
) -> dict[str, typ.Any]:
    """Flatten nested mappings into slash-joined leaf keys.

    Definitions are applied in document order, so a later definition of the
    same joined key replaces an earlier one, whether it was spelled nested
    (``page: {brand: X}``) or joined (``page/brand: X``).

    Examples
    --------
    >>> flatten_settings({"page": {"brand": "Y"}, "page/brand": "X"})
    {'page/brand': 'X'}
    >>> flatten_settings({"page": {"body": {"menu": [1, 2]}}})
    {'page/body/menu': [1, 2]}
    """
    result: dict[str, typ.Any] = {} if flat is None else flat
    for raw_key, value in payload.items():
        key = normalize_key(raw_key)
        if not key:
            continue
        joined = f"{prefix}{KEY_SEPARATOR}{key}" if prefix else key
        if isinstance(value, dict) and value:
            flatten_settings(value, joined, result)
        else:
            _set_leaf(result, joined, value)
    return result


def _set_leaf(flat: dict[str, typ.Any], key: str, value: typ.Any) -> None:
    """Store ``value`` at ``key``, dropping leaves it shadows or is shadowed by."""
    prefix = f"{key}{KEY_SEPARATOR}"
    for existing in [k for k in flat if k.startswith(prefix)]:
        del flat[existing]
    parts = key.split(KEY_SEPARATOR)
    for depth in range(1, len(parts)):
        flat.pop(KEY_SEPARATOR.join(parts[:depth]), None)
    flat[key] = value


def assign_nested(
    tree: dict[str, typ.Any], parts: cabc.Sequence[str], value: typ.Any
) -> None:
    """Assign ``value`` at the nested path ``parts``, replacing non-mappings."""
    node = tree
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


__all__ = ["assign_nested", "flatten_settings", "normalize_key"]
