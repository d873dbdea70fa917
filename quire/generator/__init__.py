"""Render page bodies and compose them into finished HTML documents."""

from .compositor import JinjaTemplateEngine, TemplateCompositor, TemplateEngine
from .fences import HighlightedFenceExtension, Highlighter, PygmentsHighlighter
from .link_rewriter import EscapeHtmlExtension, RelativeLinkExtension
from .models import RenderedDocument
from .preprocess import expand_directives
from .renderer import HtmlContentRenderer

__all__ = [
    "EscapeHtmlExtension",
    "HighlightedFenceExtension",
    "Highlighter",
    "HtmlContentRenderer",
    "JinjaTemplateEngine",
    "PygmentsHighlighter",
    "RelativeLinkExtension",
    "RenderedDocument",
    "TemplateCompositor",
    "TemplateEngine",
    "expand_directives",
]
