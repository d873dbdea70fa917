"""Fenced code blocks with a pluggable syntax highlighter.

:class:`HighlightedFenceExtension` replaces Python-Markdown's ``fenced_code``
so the highlighting engine sits behind the small :class:`Highlighter`
interface. Fences may be indented up to three spaces, and an indented fence
under a list item stays inside that item. A fence may carry a label such
as ``rust,no_run``; only the leading language name is used. A fence left
open at the end of the body raises
:class:`~quire.errors.RenderError`.
"""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

from quire.errors import RenderError

if typ.TYPE_CHECKING:
    from markdown import Markdown
    from pygments.lexer import Lexer

FENCE_OPEN_PATTERN = re.compile(
    r"^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})[ \t]*"
    r"(?P<lang>[A-Za-z0-9_+#.-]+)?[^`\n]*$"
)
FENCE_CLOSE_PATTERN = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")
LIST_ITEM_PATTERN = re.compile(r"^[ ]{0,3}(?:[*+-]|\d+[.)])[ \t]+\S")
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


class Highlighter(typ.Protocol):
    """Turn a code snippet into escaped, optionally highlighted HTML."""

    def highlight(self, code: str, language: str | None = None) -> str:
        """Return HTML for ``code``; unknown languages must still be escaped."""
        ...

    @property
    def stylesheet(self) -> str:
        """Return CSS supporting the generated markup."""
        ...


class PygmentsHighlighter:
    """Highlight code with Pygments, wrapping tokens in classed spans."""

    def __init__(self, style: str = "default") -> None:
        self.style = style
        self._formatter = HtmlFormatter(
            style=style, cssclass="codehilite", wrapcode=True
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def highlight(self, code: str, language: str | None = None) -> str:
        """Render ``code`` into highlighted HTML with an optional language tag.

        Parameters
        ----------
        code : str
            Source snippet to highlight.
        language : str, optional
            Pygments lexer name. Absent or unknown names render the snippet
            as escaped plain text.

        Returns
        -------
        str
            HTML containing the highlighted block with ``data-language``
            metadata applied.
        """
        lexer, label = self._lexer(language)
        html = highlight(code, lexer, self._formatter)
        if not code.endswith("\n"):
            # HtmlFormatter terminates the last line even when the code did not.
            html = html.replace("\n</code></pre>", "</code></pre>", 1)
        return self._attach_language_attribute(html, label)

    @staticmethod
    def _lexer(language: str | None) -> tuple[Lexer, str]:
        options = {"stripnl": False, "ensurenl": False}
        if language:
            try:
                return get_lexer_by_name(language, **options), language
            except ClassNotFound:
                pass
        return TextLexer(**options), "text"

    @staticmethod
    def _attach_language_attribute(html: str, language: str) -> str:
        """Add a single language attribute to an already highlighted block."""
        safe_lang = escape(language, quote=True)

        def _repl(match: re.Match[str]) -> str:
            return f'<div class="codehilite" data-language="{safe_lang}">'

        return CODEHILITE_OPEN_TAG.sub(_repl, html, 1)


class FencedCodePreprocessor(Preprocessor):
    """Replace fenced blocks with stashed, highlighted HTML."""

    def __init__(
        self, md: Markdown, highlighter: Highlighter, line_offset: int = 0
    ) -> None:
        super().__init__(md)
        self.highlighter = highlighter
        self.line_offset = line_offset

    def run(self, lines: list[str]) -> list[str]:
        """Return ``lines`` with each fenced block swapped for a placeholder."""
        output: list[str] = []
        in_list = False
        index = 0
        while index < len(lines):
            line = lines[index]
            opening = FENCE_OPEN_PATTERN.match(line)
            if opening is None:
                if LIST_ITEM_PATTERN.match(line):
                    in_list = True
                elif line.strip() and not line[0].isspace():
                    in_list = False
                output.append(line)
                index += 1
                continue
            close = self._find_close(lines, index + 1, opening.group("fence"))
            if close is None:
                msg = f"code fence '{opening.group('fence')}' is never closed"
                raise RenderError(msg, line=self.line_offset + index + 1)
            width = len(opening.group("indent"))
            code = "\n".join(
                _dedent(raw, width) for raw in lines[index + 1 : close]
            )
            html = self.highlighter.highlight(code, opening.group("lang"))
            # An indented fence under a list item continues that item.
            indent = " " * self.md.tab_length if in_list and width else ""
            output.extend(["", indent + self.md.htmlStash.store(html), ""])
            index = close + 1
        return output

    @staticmethod
    def _find_close(lines: list[str], start: int, fence: str) -> int | None:
        for idx in range(start, len(lines)):
            match = FENCE_CLOSE_PATTERN.match(lines[idx])
            if match is None:
                continue
            candidate = match.group("fence")
            if candidate[0] == fence[0] and len(candidate) >= len(fence):
                return idx
        return None


class HighlightedFenceExtension(Extension):
    """Register :class:`FencedCodePreprocessor` on a Markdown instance."""

    def __init__(self, highlighter: Highlighter, *, line_offset: int = 0) -> None:
        super().__init__()
        self.highlighter = highlighter
        self.line_offset = line_offset

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the fenced-code preprocessor ahead of block parsing."""
        md.registerExtension(self)
        processor = FencedCodePreprocessor(md, self.highlighter, self.line_offset)
        md.preprocessors.register(processor, "quire_fenced_code", 25)


def _dedent(line: str, width: int) -> str:
    """Strip up to ``width`` leading spaces from ``line``."""
    stripped = len(line) - len(line.lstrip(" "))
    return line[min(stripped, width) :]


__all__ = [
    "FencedCodePreprocessor",
    "HighlightedFenceExtension",
    "Highlighter",
    "PygmentsHighlighter",
]
