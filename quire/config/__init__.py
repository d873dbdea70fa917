"""Load and validate the site configuration consumed by the build pipeline.

This subpackage parses the project's ``quire.yaml`` file and produces the
typed :class:`SiteConfig` the pipeline reads: the site title and base path,
the theme directory, front-matter defaults, recognised content extensions,
the Pygments style, and the number of render workers. The pipeline never
reads the file itself; callers load it here and pass the result in.

Examples
--------
>>> from pathlib import Path
>>> from quire.config import SiteConfig, load_site_config
>>> SiteConfig().base_path
'/'
>>> site = load_site_config(Path("quire.yaml"))  # doctest: +SKIP
"""

from .loader import load_site_config
from .models import SiteConfig, SiteConfigError

__all__ = ["SiteConfig", "SiteConfigError", "load_site_config"]
