r"""Expand ``{{#include ...}}`` directives in page bodies before rendering.

The directive pulls lines from another file, resolved relative to the page's
source directory::

    ```rust
    {{#include ../listings/main.rs:3:5}}
    ```

``path`` includes the whole file; ``path:5`` line 5 only; ``path:5:`` line 5
onwards; ``path::10`` up to line 10; ``path:5:10`` lines 5 to 10. Line
numbers are 1-based and inclusive. Unknown directives and unparsable
arguments are left untouched and logged.

Example
-------
>>> LineRange.parse("5:10")
LineRange(start=4, end=10)
>>> LineRange.parse("2").extract("a\nb\nc")
'b'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
from pathlib import Path, PurePosixPath

from quire.errors import PreprocessError

logger = logging.getLogger(__name__)

DIRECTIVE_PATTERN = re.compile(
    r"\{\{\s*#(?P<name>[A-Za-z0-9_]+)\s+(?P<args>[^}]*?)\s*\}\}"
)


@dc.dataclass(frozen=True, slots=True)
class LineRange:
    """Zero-based half-open slice of lines; ``end=None`` runs to the end."""

    start: int = 0
    end: int | None = None

    @classmethod
    def parse(cls, text: str | None) -> LineRange:
        """Parse ``START``, ``START:``, ``:END``, ``START:END`` or nothing.

        Raises
        ------
        ValueError
            If a line number is not an integer.
        """
        if not text:
            return cls()
        start_text, sep, end_text = text.partition(":")
        start = max(int(start_text) - 1, 0) if start_text else None
        if not sep:
            return cls() if start is None else cls(start, start + 1)
        end = int(end_text) if end_text else None
        return cls(start or 0, end)

    def extract(self, text: str) -> str:
        """Return the selected lines of ``text`` joined with newlines."""
        lines = text.splitlines()
        if self.end is None:
            return "\n".join(lines[self.start :])
        return "\n".join(lines[self.start : max(self.end, self.start)])


@dc.dataclass(frozen=True, slots=True)
class IncludeDirective:
    """An include request: a relative path and the lines to take from it."""

    path: PurePosixPath
    lines: LineRange

    @classmethod
    def parse(cls, args: str) -> IncludeDirective:
        """Parse ``path[:range]`` arguments.

        Raises
        ------
        ValueError
            If the path is empty or the line range is malformed.
        """
        path_text, _, range_text = args.strip().partition(":")
        if not path_text:
            msg = "include directive needs a path"
            raise ValueError(msg)
        return cls(PurePosixPath(path_text), LineRange.parse(range_text))

    def read(self, base_dir: Path) -> str:
        """Read the included lines relative to ``base_dir``."""
        target = base_dir.joinpath(*self.path.parts)
        text = target.read_text(encoding="utf-8")
        return self.lines.extract(text)


def expand_directives(
    body: str,
    *,
    base_dir: Path,
    path: PurePosixPath | None = None,
    line_offset: int = 0,
) -> str:
    """Return ``body`` with every include directive replaced by file contents.

    Parameters
    ----------
    body : str
        Page body text.
    base_dir : Path
        Directory included paths are resolved against (the page's directory).
    path : PurePosixPath, optional
        Page path used in error messages and logs.
    line_offset : int, optional
        Number of source lines preceding ``body`` (the metadata block).

    Raises
    ------
    PreprocessError
        If an included file cannot be read.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group("name")
        if name != "include":
            logger.warning("%s: unrecognized directive '%s'", path or "<page>", name)
            return match.group(0)
        try:
            directive = IncludeDirective.parse(match.group("args"))
        except ValueError as exc:
            logger.warning(
                "%s: cannot parse include directive '%s': %s",
                path or "<page>",
                match.group(0),
                exc,
            )
            return match.group(0)
        try:
            return directive.read(base_dir)
        except (OSError, UnicodeDecodeError) as exc:
            line = line_offset + body.count("\n", 0, match.start()) + 1
            msg = f"cannot include '{directive.path.as_posix()}': {exc}"
            raise PreprocessError(msg, path=path, line=line) from exc

    return DIRECTIVE_PATTERN.sub(_replace, body)


__all__ = ["DIRECTIVE_PATTERN", "IncludeDirective", "LineRange", "expand_directives"]
