"""Load cascading settings YAML into a :class:`SettingsStore`."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from docsite._constants import ASSET_LIST_SETTINGS, KEY_SEPARATOR
from docsite.errors import ConfigParseError

from .helpers import flatten_settings
from .models import SettingsLayer, SettingsStore

logger = logging.getLogger(__name__)

DEFAULTS_FILE = Path(__file__).resolve().parents[1] / "defaults.yaml"
DEFAULTS_KEY = "defaults"


def load_settings(
    path: Path | None,
    *,
    defaults_path: Path | None = None,
) -> SettingsStore:
    """Load the instance settings file layered over a defaults file.

    Parameters
    ----------
    path : Path or None
        Site-specific settings file (for example ``settings.yaml``). When
        ``None`` only the defaults layer is loaded and relative paths resolve
        against the current directory.
    defaults_path : Path, optional
        Defaults file. When omitted, the instance file's top-level
        ``defaults`` key is used (relative to the instance file), falling back
        to the ``defaults.yaml`` shipped with the package.

    Returns
    -------
    SettingsStore
        Store that consults the instance layer first, then the defaults.

    Raises
    ------
    ConfigParseError
        If either file is missing, is not valid YAML, contains duplicate keys,
        does not hold a mapping at the top level, or lists an asset path
        that is not a non-empty string.

    Examples
    --------
    >>> from pathlib import Path
    >>> from docsite.settings import load_settings
    >>> store = load_settings(Path("settings.yaml"))  # doctest: +SKIP
    >>> store.lookup("page/brand")  # doctest: +SKIP
    'upper/db'
    """
    layers: list[SettingsLayer] = []
    base_dir = Path.cwd()
    if path is not None:
        raw = _read_mapping(path)
        declared_defaults = raw.pop(DEFAULTS_KEY, None)
        if defaults_path is None and declared_defaults:
            defaults_path = path.parent / str(declared_defaults)
        layers.append(_checked(SettingsLayer(path, flatten_settings(raw))))
        base_dir = path.resolve().parent

    defaults_file = defaults_path or DEFAULTS_FILE
    defaults = flatten_settings(_read_mapping(defaults_file))
    layers.append(_checked(SettingsLayer(defaults_file, defaults)))
    logger.debug(
        "loaded settings layers: %s", ", ".join(str(layer.path) for layer in layers)
    )
    return SettingsStore(layers, base_dir=base_dir)


def _read_mapping(path: Path) -> dict[str, typ.Any]:
    """Parse ``path`` as YAML and return its top-level mapping."""
    if not path.exists():
        msg = "settings file not found"
        raise ConfigParseError(path, msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle)
    except YAMLError as exc:
        raise ConfigParseError(path, f"invalid YAML: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigParseError(path, f"unreadable: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = "top-level YAML structure must be a mapping"
        raise ConfigParseError(path, msg)
    return dict(loaded)


def _checked(layer: SettingsLayer) -> SettingsLayer:
    """Reject asset lists whose entries cannot be resolved to URLs."""
    for key in ASSET_LIST_SETTINGS:
        prefix = f"{key}{KEY_SEPARATOR}"
        if any(name.startswith(prefix) for name in layer.values):
            msg = f"'{key}' must be a list of asset paths, not a mapping"
            raise ConfigParseError(layer.path, msg)
        value = layer.values.get(key)
        if value is None:
            continue
        items = value if isinstance(value, list) else [value]
        for item in items:
            if not isinstance(item, str) or not item.strip():
                msg = f"'{key}' entries must be non-empty asset paths, got {item!r}"
                raise ConfigParseError(layer.path, msg)
    return layer


__all__ = ["DEFAULTS_FILE", "load_settings"]
