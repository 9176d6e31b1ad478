"""Cascading settings for docsite builds.

Settings live in two YAML documents: a site-specific instance file and a
defaults file. Keys are slash-joined paths (``page/body/menu``) addressing
nested mappings. :func:`load_settings` flattens both files and returns a
:class:`SettingsStore` whose lookups return tagged values (:class:`Scalar`,
:class:`ListValue`, :class:`MappingValue`, or the falsy :data:`ABSENT`), so
templates can test a missing key without raising.

Examples
--------
>>> from pathlib import Path
>>> from docsite.settings import load_settings
>>> store = load_settings(Path("settings.yaml"))  # doctest: +SKIP
>>> [item["text"] for item in store.get_all("page/body/menu")]  # doctest: +SKIP
['Documentation', 'Examples']
"""

from .loader import DEFAULTS_FILE, load_settings
from .models import (
    ABSENT,
    Absent,
    ListValue,
    MappingValue,
    Scalar,
    SettingsLayer,
    SettingsStore,
    SettingValue,
)

__all__ = [
    "ABSENT",
    "DEFAULTS_FILE",
    "Absent",
    "ListValue",
    "MappingValue",
    "Scalar",
    "SettingValue",
    "SettingsLayer",
    "SettingsStore",
    "load_settings",
]
