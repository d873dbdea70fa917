"""Render page bodies from Markdown into HTML with highlighted code."""

from __future__ import annotations

import typing as typ

from markdown import Markdown

from quire._constants import DEFAULT_CONTENT_EXTENSIONS
from quire.errors import RenderError

from .fences import HighlightedFenceExtension, PygmentsHighlighter
from .link_rewriter import EscapeHtmlExtension, RelativeLinkExtension

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import PurePosixPath

    from markdown.extensions import Extension

    from .fences import Highlighter


class HtmlContentRenderer:
    """Render markdown bodies with consistent escaping and highlighting."""

    def __init__(
        self,
        highlighter: Highlighter | None = None,
        *,
        content_extensions: cabc.Iterable[str] = DEFAULT_CONTENT_EXTENSIONS,
    ) -> None:
        """Initialize a renderer with an optional highlighter.

        Parameters
        ----------
        highlighter : Highlighter, optional
            Engine used for fenced code blocks. Defaults to a
            :class:`PygmentsHighlighter` with the ``"default"`` style.
        content_extensions : Iterable[str], optional
            Suffixes of content sources whose links are rewritten to
            ``.html``.
        """
        self.highlighter = highlighter or PygmentsHighlighter()
        self.content_extensions = tuple(content_extensions)

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self.highlighter.stylesheet

    def markdown(
        self,
        text: str,
        *,
        path: PurePosixPath | None = None,
        line_offset: int = 0,
    ) -> str:
        """Render markdown into HTML using the configured extensions.

        Parameters
        ----------
        text : str
            Markdown body.
        path : PurePosixPath, optional
            Source path attached to any :class:`RenderError`.
        line_offset : int, optional
            Number of source lines preceding ``text``, so reported line
            numbers refer to the source file.

        Raises
        ------
        RenderError
            If a fenced code block is never closed.
        """
        if not text.strip():
            return ""
        extensions: list[Extension | str] = [
            EscapeHtmlExtension(),
            HighlightedFenceExtension(self.highlighter, line_offset=line_offset),
            RelativeLinkExtension(self.content_extensions),
            "tables",
            "sane_lists",
            "toc",
        ]
        md = Markdown(extensions=extensions, output_format="html")
        try:
            return md.convert(text)
        except RenderError as exc:
            if exc.path is None:
                exc.path = path
            raise


__all__ = ["HtmlContentRenderer"]
