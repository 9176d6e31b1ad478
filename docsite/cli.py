"""Cyclopts CLI entrypoint for building and serving docsite sites.

The ``docsite`` console script renders a content tree into static HTML with
``docsite build`` and serves the in-memory snapshot with ``docsite run``. Both
take the site settings file through ``-c``/``--config``; every flag can also be
set through ``DOCSITE_*`` environment variables.

Examples
--------
Build the site described by ``settings.yaml`` into ``public/``:

>>> from docsite.cli import app
>>> app(["build", "-c", "settings.yaml"])  # doctest: +SKIP

Serve it locally on the default port:

>>> app(["run", "-c", "settings-local.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import (
    DEFAULT_BIND,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PORT,
    SETTING_BIND,
    SETTING_OUTPUT,
    SETTING_PORT,
)
from .build import SnapshotStore, build_site, write_output
from .errors import ConfigParseError
from .server import serve
from .settings import load_settings

if typ.TYPE_CHECKING:
    from .settings import SettingsStore

DEFAULT_CONFIG = Path("settings.yaml")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = App(name="docsite", config=cyclopts.config.Env("DOCSITE_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path,
    Parameter(name=["--config", "-c"], help="Path to the site settings file"),
]
VerboseOption = typ.Annotated[
    bool, Parameter(name=["--verbose", "-v"], help="Log debug output")
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )


def _server_port(settings: SettingsStore) -> int:
    """Return the configured server port, validating the setting."""
    raw = settings.lookup(SETTING_PORT)
    if raw is None:
        return DEFAULT_PORT
    if isinstance(raw, bool) or not isinstance(raw, int) or not 0 < raw < 65536:
        source = settings.source_of(SETTING_PORT) or "<settings>"
        msg = f"'{SETTING_PORT}' must be a port number, got {raw!r}"
        raise ConfigParseError(source, msg)
    return raw


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Render every page of the site into static HTML files.")
def build(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None, Parameter(help="Override the output folder")
    ] = None,
    strict: typ.Annotated[
        bool, Parameter(help="Exit non-zero when any page was skipped or failed")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Build the site and write it to disk.

    Parameters
    ----------
    config : Path, optional
        Site settings file; defaults to ``settings.yaml``.
    output_dir : Path or None, optional
        Output directory; defaults to the ``site/output`` setting.
    strict : bool, optional
        Exit with status 1 when the build report holds any error.
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    None
        Writes rendered documents and prints each written path followed by
        any collected errors.

    Raises
    ------
    ConfigParseError
        If the settings files are missing or malformed.
    SystemExit
        With status 1 in ``strict`` mode when the report has errors.
    """
    _configure_logging(verbose)
    settings = load_settings(config)
    result = build_site(settings)
    target = (
        output_dir
        or settings.resolve_path(SETTING_OUTPUT, DEFAULT_OUTPUT_DIR)
        or Path(DEFAULT_OUTPUT_DIR)
    )
    for path in write_output(result, target):
        print(f"wrote {_format_path(path)}")
    for error in result.report.errors:
        print(f"error {error}")
    if strict and not result.report.ok:
        raise SystemExit(1)


@app.command(help="Build the site and serve it over HTTP.")
def run(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    bind: typ.Annotated[
        str | None, Parameter(help="Address to listen on")
    ] = None,
    port: typ.Annotated[int | None, Parameter(help="Port to listen on")] = None,
    verbose: VerboseOption = False,
) -> None:
    """Serve the built site until interrupted.

    Settings are loaded again on every rebuild, so edits to the settings
    file take effect on the next ``SIGHUP``.

    Raises
    ------
    ConfigParseError
        If the settings files are malformed or ``server/port`` is not a
        port number.
    """
    _configure_logging(verbose)
    settings = load_settings(config)
    port = port or _server_port(settings)
    store = SnapshotStore(lambda: build_site(load_settings(config)))
    result = store.start()
    for error in result.report.errors:
        print(f"error {error}")
    serve(
        store,
        bind=bind or str(settings.lookup(SETTING_BIND) or DEFAULT_BIND),
        port=port,
    )


def main() -> None:
    """Invoke the Cyclopts application that powers the ``docsite`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
