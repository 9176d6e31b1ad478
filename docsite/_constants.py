"""Common literal values used across docsite.

These constants keep settings keys, filenames, and defaults centralized so the
loader, builders, templates, and tests import the same values without
drifting. Intended for internal use within the docsite package.

Examples
--------
>>> from docsite import _constants
>>> _constants.KEY_SEPARATOR.join(["page", "brand"])
'page/brand'
>>> ".md" in _constants.DOCUMENT_SUFFIXES
True
"""

KEY_SEPARATOR = "/"
HOME_URL = "/"
HOME_TITLE = "Home"

DOCUMENT_SUFFIXES = (".md", ".markdown")
INDEX_STEMS = ("index",)
ORDER_MANIFEST = "_order.yaml"
FRONT_MATTER_DELIMITER = "---"

DEFAULT_READ_TIMEOUT = 5.0
DEFAULT_PORT = 9000
DEFAULT_BIND = "0.0.0.0"
DEFAULT_OUTPUT_DIR = "public"
DEFAULT_CONTENT_DIR = "content"
DEFAULT_PYGMENTS_STYLE = "monokai"

SETTING_HOME = "site/home"
SETTING_CONTENT = "site/content"
SETTING_TEMPLATES = "site/templates"
SETTING_OUTPUT = "site/output"
SETTING_STATIC = "site/static"
SETTING_ASSET_BASE = "site/asset_base"
SETTING_FINGERPRINT = "site/fingerprint"
SETTING_WORKERS = "build/workers"
SETTING_READ_TIMEOUT = "build/read_timeout"
SETTING_BIND = "server/bind"
SETTING_PORT = "server/port"
SETTING_PYGMENTS_STYLE = "markdown/pygments_style"

ASSET_LIST_SETTINGS = ("page/head/styles", "page/body/scripts/footer")
