"""Load site configuration YAML into a :class:`SiteConfig`."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _metadata_defaults,
    _normalize_authors,
    _normalize_base_path,
    _normalize_extensions,
    _optional_str,
    _positive_int,
    _section,
)
from .models import SiteConfig


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the site and its theme.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``quire.yaml``).

    Returns
    -------
    SiteConfig
        Parsed configuration with defaults applied. A relative
        ``theme.dir`` resolves against the configuration file's directory.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If a section or field has the wrong shape.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from quire.config import load_site_config
    >>> config = load_site_config(Path("quire.yaml"))  # doctest: +SKIP
    >>> config.title  # doctest: +SKIP
    'Field Notes'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    site = _section(raw, "site")
    theme = _section(raw, "theme")
    content = _section(raw, "content")
    defaults = _section(raw, "defaults")
    build = _section(raw, "build")
    base = SiteConfig()

    theme_dir = None
    theme_dir_value = _optional_str(theme.get("dir"))
    if theme_dir_value:
        theme_dir = Path(theme_dir_value)
        if not theme_dir.is_absolute():
            theme_dir = path.parent / theme_dir

    return SiteConfig(
        title=_optional_str(site.get("title")) or base.title,
        base_path=_normalize_base_path(site.get("base_path")),
        theme_dir=theme_dir,
        authors=_normalize_authors(site.get("authors")),
        metadata_defaults=_metadata_defaults(defaults.get("metadata")),
        content_extensions=(
            _normalize_extensions(content.get("extensions"))
            or base.content_extensions
        ),
        pygments_style=_optional_str(theme.get("pygments_style"))
        or base.pygments_style,
        workers=_positive_int(
            build.get("workers"), name="build.workers", default=base.workers
        ),
    )


__all__ = ["load_site_config"]
