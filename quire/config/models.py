"""Typed dataclasses describing quire site configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from quire._constants import DEFAULT_CONTENT_EXTENSIONS


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class SiteConfig:
    """Read-only settings the build pipeline needs from the site config.

    Attributes
    ----------
    title : str
        Site title exposed to templates and used for the tree root.
    base_path : str
        URL prefix the site is served under; always starts and ends with ``/``.
    theme_dir : Path | None
        Optional theme directory. Its ``templates/`` entries override the
        packaged templates and its ``static/`` tree is copied verbatim.
    authors : list[str]
        Site authors exposed to templates.
    metadata_defaults : dict[str, Any]
        Scalar front-matter defaults merged under every page's own fields.
    content_extensions : tuple[str, ...]
        Lower-case file suffixes recognised as content pages.
    pygments_style : str
        Pygments style used for highlighted code and ``css/pygments.css``.
    workers : int
        Number of render threads; ``1`` renders sequentially.
    """

    title: str = "Untitled Site"
    base_path: str = "/"
    theme_dir: Path | None = None
    authors: list[str] = dc.field(default_factory=list)
    metadata_defaults: dict[str, typ.Any] = dc.field(default_factory=dict)
    content_extensions: tuple[str, ...] = DEFAULT_CONTENT_EXTENSIONS
    pygments_style: str = "default"
    workers: int = 1


__all__ = ["SiteConfig", "SiteConfigError"]
