"""Build a navigable static HTML site from a directory of Markdown pages.

The package exposes the build pipeline used by the ``quire`` console script:
pages are loaded from a source tree, split into front matter and body,
arranged into an ordered content tree, rendered with highlighted code, and
composed into Jinja templates with previous/next links and breadcrumbs.

Exports
-------
- ``build_site``: Run a full build and return a ``BuildResult``.
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from pathlib import Path
>>> from quire import build_site
>>> build_site(Path("src"), Path("public")).ok  # doctest: +SKIP
True
"""

from __future__ import annotations

from .cli import app, main
from .pipeline import BuildResult, build_site

__all__ = ["BuildResult", "app", "build_site", "main"]
