"""Cyclopts CLI entrypoint for building a quire site.

The ``quire`` console script exposes a single ``build`` command that loads
``quire.yaml`` (when present), runs the build pipeline, and prints each file
it wrote. A failed build prints every collected error and exits with status
1. Options can also be supplied through ``QUIRE_``-prefixed environment
variables.

Examples
--------
Build ``src/`` into ``public/`` with the default configuration:

>>> from quire.cli import main
>>> main()  # doctest: +SKIP

Build into a custom directory with four render threads:

>>> from quire.cli import app
>>> app.run(["build", "--output", "dist", "--workers", "4"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import SiteConfig, SiteConfigError, load_site_config
from .pipeline import build_site

DEFAULT_CONFIG = Path("quire.yaml")
DEFAULT_SOURCE = Path("src")
DEFAULT_OUTPUT = Path("public")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="quire", config=cyclopts.config.Env("QUIRE_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _load_config(config: Path | None) -> SiteConfig:
    """Return the site config from ``config``, ``quire.yaml``, or defaults."""
    if config is not None:
        return load_site_config(config)
    if DEFAULT_CONFIG.exists():
        return load_site_config(DEFAULT_CONFIG)
    return SiteConfig()


@app.command(help="Build the static site from a directory of Markdown pages.")
def build(
    *,
    source: typ.Annotated[
        Path, Parameter(help="Directory holding the content pages")
    ] = DEFAULT_SOURCE,
    output: typ.Annotated[
        Path, Parameter(help="Output directory, regenerated on every build")
    ] = DEFAULT_OUTPUT,
    config: typ.Annotated[
        Path | None,
        Parameter(help="Path to site config (defaults to ./quire.yaml if present)"),
    ] = None,
    workers: typ.Annotated[
        int | None, Parameter(help="Render threads; overrides build.workers")
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log per-file progress")
    ] = False,
) -> None:
    """Build the site and report what was written.

    Parameters
    ----------
    source : Path, optional
        Source directory; defaults to ``src``.
    output : Path, optional
        Destination directory; defaults to ``public``. Its previous contents
        are removed.
    config : Path or None, optional
        Site configuration file. When omitted, ``quire.yaml`` in the current
        directory is used if it exists, otherwise built-in defaults.
    workers : int or None, optional
        Number of render threads, overriding the configuration.
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    None
        Prints one ``wrote`` line per file on success.

    Raises
    ------
    SystemExit
        With status 1 when the build fails.
    SiteConfigError
        If ``workers`` is less than one.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )
    site_config = _load_config(config)
    if workers is not None:
        if workers < 1:
            msg = "--workers must be at least 1."
            raise SiteConfigError(msg)
        site_config.workers = workers

    result = build_site(source, output, site_config)
    if not result.ok:
        for record in result.errors:
            print(f"error[{record.stage}]: {record}", file=sys.stderr)
        raise SystemExit(1)

    for path in result.skipped:
        print(f"skipped {path} (publish = false)")
    for path in result.written:
        print(f"wrote {_format_path(path)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``quire`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
