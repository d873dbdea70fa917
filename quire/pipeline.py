"""Run the full build: load, extract, arrange, render, compose, write.

:class:`SiteBuilder` drives one forward pass over the stages and raises on
failure. :func:`build_site` is the entry point collaborators call: it runs a
builder and turns any :class:`~quire.errors.BuildError` into a
:class:`BuildResult` carrying structured error records instead of a
traceback.

Metadata errors are gathered across every page before the build aborts, and
so are render and template errors, so one run reports every broken page.
Load, tree and output errors abort immediately.

Examples
--------
>>> from pathlib import Path
>>> from quire.config import SiteConfig
>>> result = build_site(Path("src"), Path("public"), SiteConfig())  # doctest: +SKIP
>>> result.ok  # doctest: +SKIP
True
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath

from quire._constants import PYGMENTS_STYLESHEET, SITE_INDEX_OUTPUT
from quire.config import SiteConfig
from quire.errors import BuildError, DuplicateIdentifierError, SiteIOError
from quire.generator import (
    HtmlContentRenderer,
    PygmentsHighlighter,
    TemplateCompositor,
    expand_directives,
)
from quire.metadata import extract_metadata
from quire.navigation import resolve_navigation
from quire.output import OutputWriter
from quire.source import discover_assets, load_sources
from quire.tree import build_tree

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from quire.errors import ErrorRecord
    from quire.generator import Highlighter, RenderedDocument, TemplateEngine
    from quire.metadata import ExtractedPage
    from quire.navigation import NavigationContext
    from quire.source import SourceFile
    from quire.tree import Page

logger = logging.getLogger(__name__)

PACKAGE_STATIC_DIR = Path(__file__).resolve().parent / "static"


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of a build invocation.

    Attributes
    ----------
    ok : bool
        True when every page was written.
    documents : list[RenderedDocument]
        Composed documents in traversal order, the site index last.
    written : list[Path]
        Every file written to the destination, in write order.
    errors : list[ErrorRecord]
        Structured errors; empty when ``ok`` is True.
    skipped : list[PurePosixPath]
        Source paths of pages excluded with ``publish = false``.
    """

    ok: bool
    documents: list[RenderedDocument] = dc.field(default_factory=list)
    written: list[Path] = dc.field(default_factory=list)
    errors: list[ErrorRecord] = dc.field(default_factory=list)
    skipped: list[PurePosixPath] = dc.field(default_factory=list)


class SiteBuilder:
    """Build a site from a source tree using one :class:`SiteConfig`."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        highlighter: Highlighter | None = None,
        template_engine: TemplateEngine | None = None,
    ) -> None:
        """Wire the renderer and compositor for ``config``.

        Parameters
        ----------
        config : SiteConfig
            Site settings, threaded through every stage.
        highlighter : Highlighter, optional
            Code highlighter; defaults to Pygments with the configured style.
        template_engine : TemplateEngine, optional
            Template engine; defaults to Jinja with theme overrides.
        """
        self.config = config
        self.highlighter = highlighter or PygmentsHighlighter(config.pygments_style)
        self.renderer = HtmlContentRenderer(
            self.highlighter, content_extensions=config.content_extensions
        )
        self.compositor = TemplateCompositor(config, template_engine)

    def build(self, source_root: Path, destination_root: Path) -> BuildResult:
        """Build the site from ``source_root`` into ``destination_root``.

        Returns
        -------
        BuildResult
            A successful result listing the documents and written files.

        Raises
        ------
        BuildError
            For load, tree and output failures.
        ExceptionGroup
            Grouping every metadata failure, or every render and template
            failure, found in a single stage.
        """
        source_root = source_root.resolve()
        destination = destination_root.resolve()
        _check_destination(source_root, destination)
        exclude = [destination] if destination.is_relative_to(source_root) else []
        extensions = self.config.content_extensions

        sources = load_sources(source_root, extensions=extensions, exclude=exclude)
        extracted = self.extract(sources)
        published = [entry for entry in extracted if entry.metadata.publish]
        skipped = [
            entry.source.relative_path
            for entry in extracted
            if not entry.metadata.publish
        ]
        for path in skipped:
            logger.warning("skipping unpublished page %s", path)

        tree = build_tree(published, root_title=self.config.title)
        assets = discover_assets(source_root, extensions=extensions, exclude=exclude)
        _check_asset_collisions(tree.pages(), assets)
        navigation = resolve_navigation(tree)
        documents = self.render_pages(tree.pages(), navigation)

        index_path = PurePosixPath(SITE_INDEX_OUTPUT)
        taken = {document.output_path for document in documents} | set(assets)
        if index_path not in taken:
            documents.append(self.compositor.compose_index(tree.pages()))

        written = self.write(source_root, destination, documents, assets)
        logger.info(
            "built %d document(s) into %s", len(documents), destination_root
        )
        return BuildResult(
            ok=True, documents=documents, written=written, skipped=skipped
        )

    def extract(self, sources: cabc.Sequence[SourceFile]) -> list[ExtractedPage]:
        """Extract metadata from every source, collecting every failure."""
        defaults = self.config.metadata_defaults
        extracted: list[ExtractedPage] = []
        failures: list[BuildError] = []
        for source in sources:
            try:
                extracted.append(extract_metadata(source, defaults=defaults))
            except BuildError as exc:
                failures.append(exc)
        if failures:
            msg = f"{len(failures)} page(s) have invalid metadata"
            raise ExceptionGroup(msg, failures)
        return extracted

    def render_page(
        self, page: Page, navigation: NavigationContext
    ) -> RenderedDocument:
        """Expand directives, render the body, and compose one document."""
        line_offset = page.body_line - 1
        body = expand_directives(
            page.body,
            base_dir=page.source.path.parent,
            path=page.source_path,
            line_offset=line_offset,
        )
        html = self.renderer.markdown(
            body, path=page.source_path, line_offset=line_offset
        )
        return self.compositor.compose(page.with_rendered(html), navigation)

    def render_pages(
        self,
        pages: cabc.Sequence[Page],
        navigation: cabc.Mapping[str, NavigationContext],
    ) -> list[RenderedDocument]:
        """Render ``pages`` in order, on worker threads when configured.

        Raises
        ------
        ExceptionGroup
            Holding every render, preprocess, and template error.
        """
        jobs = [(page, navigation[page.identifier]) for page in pages]
        workers = self.config.workers
        if workers > 1 and len(jobs) > 1:
            logger.debug("rendering %d page(s) on %d threads", len(jobs), workers)
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(lambda job: self._attempt(*job), jobs))
        else:
            outcomes = [self._attempt(page, nav) for page, nav in jobs]

        failures = [outcome for outcome in outcomes if isinstance(outcome, BuildError)]
        if failures:
            msg = f"{len(failures)} page(s) failed to render"
            raise ExceptionGroup(msg, failures)
        return [outcome for outcome in outcomes if not isinstance(outcome, BuildError)]

    def write(
        self,
        source_root: Path,
        destination: Path,
        documents: cabc.Sequence[RenderedDocument],
        assets: cabc.Sequence[PurePosixPath],
    ) -> list[Path]:
        """Regenerate ``destination`` with stylesheets, assets, and documents.

        Theme static files override packaged ones, source assets override
        both, and documents are written last.
        """
        writer = OutputWriter(destination)
        writer.prepare()
        written = writer.copy_tree(PACKAGE_STATIC_DIR)
        written.append(
            writer.write_text(
                PurePosixPath(PYGMENTS_STYLESHEET), self.renderer.stylesheet
            )
        )
        if self.config.theme_dir is not None:
            written.extend(writer.copy_tree(self.config.theme_dir / "static"))
        for relative in assets:
            source = source_root.joinpath(*relative.parts)
            written.append(writer.copy_file(source, relative))
        written.extend(writer.write_documents(documents))
        return written

    def _attempt(
        self, page: Page, navigation: NavigationContext
    ) -> RenderedDocument | BuildError:
        try:
            return self.render_page(page, navigation)
        except BuildError as exc:
            return exc


def build_site(
    source_root: Path,
    destination_root: Path,
    config: SiteConfig | None = None,
    *,
    highlighter: Highlighter | None = None,
    template_engine: TemplateEngine | None = None,
) -> BuildResult:
    """Run a full build and report the outcome instead of raising.

    Parameters
    ----------
    source_root : Path
        Directory holding the content pages and static assets.
    destination_root : Path
        Output directory; regenerated from scratch.
    config : SiteConfig, optional
        Site settings; defaults to :class:`SiteConfig` defaults.
    highlighter : Highlighter, optional
        Replacement code highlighter.
    template_engine : TemplateEngine, optional
        Replacement template engine.

    Returns
    -------
    BuildResult
        ``ok`` is False and ``errors`` lists every collected failure when the
        build does not complete.
    """
    builder = SiteBuilder(
        config or SiteConfig(),
        highlighter=highlighter,
        template_engine=template_engine,
    )
    try:
        return builder.build(source_root, destination_root)
    except BuildError as exc:
        errors = [exc.to_record()]
    except ExceptionGroup as group:
        errors = [
            exc.to_record() for exc in group.exceptions if isinstance(exc, BuildError)
        ]
    for record in errors:
        logger.error("%s", record)
    return BuildResult(ok=False, errors=errors)


def _check_destination(source_root: Path, destination: Path) -> None:
    """Refuse destinations whose regeneration would delete the sources."""
    if source_root.is_relative_to(destination):
        msg = "output directory must not be or contain the source directory"
        raise SiteIOError(msg, path=destination, stage="output")


def _check_asset_collisions(
    pages: cabc.Sequence[Page], assets: cabc.Sequence[PurePosixPath]
) -> None:
    """Reject source assets that share an output path with a page."""
    asset_paths = set(assets)
    for page in pages:
        if page.output_path in asset_paths:
            raise DuplicateIdentifierError(
                page.output_path.as_posix(), page.source_path, page.output_path
            )


__all__ = ["BuildResult", "SiteBuilder", "build_site"]
