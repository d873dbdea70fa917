"""Markdown extensions that keep rendered page bodies safe and linked.

:class:`RelativeLinkExtension` rewrites intra-site links to Markdown sources
(``./setup.md#install``) so they point at the generated HTML
(``./setup.html#install``), and neutralises links whose scheme could run
script. :class:`EscapeHtmlExtension` turns off Python-Markdown's raw HTML
pass-through so any markup typed into a page body is escaped instead of
injected into the document.
"""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import urlsplit, urlunsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from quire._constants import DEFAULT_CONTENT_EXTENSIONS, OUTPUT_SUFFIX

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

UNSAFE_SCHEMES = ("javascript", "vbscript", "data")
LINK_ATTRIBUTES = {"a": "href", "img": "src"}


class RelativeLinkExtension(Extension):
    """Rewrite relative links to content sources into links to HTML output.

    Insert this extension into a ``markdown.Markdown`` instance so that links
    such as ``../guide/setup.md`` become ``../guide/setup.html`` while
    absolute URLs, in-page anchors, and non-content files are left alone.
    """

    def __init__(
        self, extensions: cabc.Iterable[str] = DEFAULT_CONTENT_EXTENSIONS
    ) -> None:
        super().__init__()
        self.extensions = tuple(ext.lower() for ext in extensions)

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the relative-link treeprocessor on the Markdown instance."""
        processor = RelativeLinkTreeprocessor(md, self.extensions)
        md.treeprocessors.register(processor, "quire_relative_links", 15)


class RelativeLinkTreeprocessor(Treeprocessor):
    """Point links at generated HTML and drop script-capable URLs."""

    def __init__(self, md: Markdown, extensions: tuple[str, ...]) -> None:
        super().__init__(md)
        self.extensions = extensions

    def run(self, root: Element) -> Element:
        """Rewrite link targets in the parsed markdown tree."""
        for element in root.iter():
            attribute = LINK_ATTRIBUTES.get(element.tag)
            if attribute is None:
                continue
            target = element.get(attribute)
            if target is None:
                continue
            if _is_unsafe(target):
                element.set(attribute, "#")
                continue
            rewritten = self._rewrite(target)
            if rewritten:
                element.set(attribute, rewritten)
        return root

    def _rewrite(self, target: str) -> str | None:
        """Return ``target`` with a content extension swapped for ``.html``."""
        if target.startswith(("#", "//")) or "://" in target:
            return None
        parsed = urlsplit(target)
        if parsed.scheme or parsed.netloc or not parsed.path:
            return None
        stem, ext = posixpath.splitext(parsed.path)
        if ext.lower() not in self.extensions:
            return None
        return urlunsplit(("", "", stem + OUTPUT_SUFFIX, parsed.query, parsed.fragment))


class EscapeHtmlExtension(Extension):
    """Escape raw HTML in page bodies instead of passing it through."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Remove the raw HTML block preprocessor and inline pattern."""
        md.preprocessors.deregister("html_block", strict=False)
        md.inlinePatterns.deregister("html", strict=False)


def _is_unsafe(target: str) -> bool:
    """Return True when ``target`` uses a scheme that can execute script."""
    compact = "".join(target.split()).lower()
    scheme, sep, _ = compact.partition(":")
    return bool(sep) and scheme in UNSAFE_SCHEMES


__all__ = [
    "EscapeHtmlExtension",
    "RelativeLinkExtension",
    "RelativeLinkTreeprocessor",
]
