"""Merge rendered bodies, metadata, and navigation into HTML documents.

The compositor builds a plain-dict context for each page and hands it to a
:class:`TemplateEngine`. :class:`JinjaTemplateEngine` is the default engine:
it looks up templates in the theme's ``templates/`` directory first and
falls back to the templates packaged with quire, and it fails loudly on any
undefined value.

Templates receive ``site`` (the :class:`~quire.config.SiteConfig`), ``page``
(``id``, ``title``, ``description``, ``date``, ``kind``, ``extra``, ``path``,
``source_path``), ``content`` (the rendered body, inserted with ``|safe``),
``previous`` and ``next`` (``title`` and ``href``, or ``None``),
``breadcrumbs`` (``title`` and ``href``; ``href`` is ``None`` for grouping
directories below the root), ``path_to_root``, and ``stylesheets``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path, PurePosixPath

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from jinja2 import TemplateError as JinjaTemplateError
from jinja2 import TemplateSyntaxError

from quire._constants import (
    INDEX_TEMPLATE,
    PAGE_TEMPLATE,
    SITE_INDEX_OUTPUT,
    STYLESHEETS,
)
from quire.errors import TemplateError
from quire.navigation import path_to_root, relative_href
from quire.tree import ROOT_KEY

from .models import RenderedDocument

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from quire.config import SiteConfig
    from quire.navigation import Breadcrumb, NavigationContext, NavLink
    from quire.tree import Page


class TemplateEngine(typ.Protocol):
    """Render a named template against a context mapping."""

    def render(self, template_name: str, context: cabc.Mapping[str, typ.Any]) -> str:
        """Return the rendered document.

        Implementations raise :class:`~quire.errors.TemplateError` for
        invalid templates and undefined values.
        """
        ...


class JinjaTemplateEngine:
    """Jinja2 engine with theme overrides and strict undefined handling."""

    def __init__(
        self, theme_dir: Path | None = None, *, templates_dir: Path | None = None
    ) -> None:
        """Initialize the Jinja environment.

        Parameters
        ----------
        theme_dir : Path, optional
            Theme directory; templates in its ``templates/`` folder override
            the packaged ones of the same name.
        templates_dir : Path, optional
            Directory containing the fallback templates; defaults to the
            templates packaged with quire.
        """
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        search_path = [templates_dir or default_templates]
        if theme_dir is not None:
            search_path.insert(0, theme_dir / "templates")
        self.search_path = search_path
        self.env = Environment(
            loader=FileSystemLoader([str(path) for path in search_path]),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, context: cabc.Mapping[str, typ.Any]) -> str:
        """Render ``template_name`` with ``context``.

        Raises
        ------
        TemplateError
            If the template is missing, has invalid syntax, or references an
            undefined value.
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except TemplateSyntaxError as exc:
            name = exc.name or template_name
            msg = f"line {exc.lineno}: {exc.message}"
            raise TemplateError(msg, template_name=name) from exc
        except JinjaTemplateError as exc:
            raise TemplateError(str(exc), template_name=template_name) from exc


class TemplateCompositor:
    """Compose complete HTML documents for pages and the site index."""

    def __init__(
        self,
        site: SiteConfig,
        engine: TemplateEngine | None = None,
        *,
        stylesheets: cabc.Sequence[str] = STYLESHEETS,
    ) -> None:
        self.site = site
        self.engine = engine or JinjaTemplateEngine(site.theme_dir)
        self.stylesheets = tuple(stylesheets)

    def compose(self, page: Page, navigation: NavigationContext) -> RenderedDocument:
        """Render ``page`` into a full HTML document.

        Raises
        ------
        TemplateError
            If the page template fails; the error names the page.
        ValueError
            If the page body has not been rendered yet.
        """
        if page.rendered is None:
            msg = f"page '{page.identifier}' has no rendered body"
            raise ValueError(msg)
        context = self.page_context(page, navigation)
        html = self._render(PAGE_TEMPLATE, context, path=page.source_path)
        return RenderedDocument(
            output_path=page.output_path, html=html, identifier=page.identifier
        )

    def compose_index(self, pages: cabc.Sequence[Page]) -> RenderedDocument:
        """Render the generated site index listing ``pages`` in order."""
        output_path = PurePosixPath(SITE_INDEX_OUTPUT)
        entries = [
            {
                "id": page.identifier,
                "title": page.title,
                "href": page.output_path.as_posix(),
                "description": page.metadata.description,
                "date": page.metadata.date,
                "kind": page.metadata.kind,
                "depth": len(page.output_path.parts) - 1,
            }
            for page in pages
        ]
        context = {
            "site": self.site,
            "pages": entries,
            "path_to_root": "",
            "stylesheets": list(self.stylesheets),
        }
        html = self._render(INDEX_TEMPLATE, context, path=output_path)
        return RenderedDocument(output_path=output_path, html=html)

    def page_context(
        self, page: Page, navigation: NavigationContext
    ) -> dict[str, typ.Any]:
        """Return the template context for ``page``."""
        to_root = path_to_root(page.output_path)
        metadata = page.metadata
        return {
            "site": self.site,
            "page": {
                "id": page.identifier,
                "title": metadata.title,
                "description": metadata.description,
                "date": metadata.date,
                "kind": metadata.kind,
                "extra": dict(metadata.extra),
                "path": page.output_path.as_posix(),
                "source_path": page.source_path.as_posix(),
            },
            "content": page.rendered,
            "previous": self._nav_link(navigation.previous, page),
            "next": self._nav_link(navigation.next, page),
            "breadcrumbs": [
                self._breadcrumb(crumb, page) for crumb in navigation.ancestors
            ],
            "path_to_root": to_root,
            "stylesheets": [f"{to_root}{sheet}" for sheet in self.stylesheets],
        }

    def _render(
        self,
        template_name: str,
        context: cabc.Mapping[str, typ.Any],
        *,
        path: PurePosixPath,
    ) -> str:
        try:
            html = self.engine.render(template_name, context)
        except TemplateError as exc:
            if exc.path is None:
                exc.path = path
            raise
        if not html.endswith("\n"):
            html += "\n"
        return html

    @staticmethod
    def _nav_link(link: NavLink | None, page: Page) -> dict[str, str] | None:
        if link is None:
            return None
        return {
            "title": link.title,
            "href": relative_href(link.output_path, page.output_path),
        }

    @staticmethod
    def _breadcrumb(crumb: Breadcrumb, page: Page) -> dict[str, str | None]:
        target = crumb.output_path
        if target is None and crumb.identifier == ROOT_KEY:
            # A root without its own page is served by the site index.
            target = PurePosixPath(SITE_INDEX_OUTPUT)
        href = None
        if target is not None:
            href = relative_href(target, page.output_path)
        return {"title": crumb.title, "href": href}


__all__ = ["JinjaTemplateEngine", "TemplateCompositor", "TemplateEngine"]
