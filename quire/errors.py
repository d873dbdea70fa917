"""Error taxonomy shared by every stage of the site build.

Each failure the author can act on derives from :class:`BuildError`, which
records the offending source path, the pipeline stage that raised it, and an
optional line number. :func:`quire.pipeline.build_site` converts these
exceptions into :class:`ErrorRecord` values so callers get a flat list of
structured errors instead of a traceback.

Examples
--------
>>> from pathlib import Path
>>> err = MalformedMetadataError("missing '+++'", path=Path("a.md"), line=3)
>>> err.to_record().stage
'metadata'
>>> str(err)
"a.md:3: missing '+++'"
"""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path, PurePath


@dc.dataclass(frozen=True, slots=True)
class ErrorRecord:
    """Structured description of a single build failure.

    Attributes
    ----------
    path : str | None
        Source (or destination) path the error refers to, if any.
    stage : str
        Pipeline stage tag such as ``"metadata"`` or ``"template"``.
    message : str
        Human-readable explanation.
    line : int | None
        1-based line number within ``path`` when known.
    """

    path: str | None
    stage: str
    message: str
    line: int | None = None

    def __str__(self) -> str:
        return _format_location(self.path, self.line, self.message)


class BuildError(Exception):
    """Base class for build failures reported back to the author."""

    stage = "build"

    def __init__(
        self,
        message: str,
        *,
        path: PurePath | str | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if isinstance(path, str) else path
        self.line = line

    def __str__(self) -> str:
        path = str(self.path) if self.path is not None else None
        return _format_location(path, self.line, self.message)

    def to_record(self) -> ErrorRecord:
        """Return the error as an :class:`ErrorRecord`."""
        path = str(self.path) if self.path is not None else None
        return ErrorRecord(
            path=path, stage=self.stage, message=self.message, line=self.line
        )


class SiteIOError(BuildError):
    """Raised when the source cannot be read or the destination written."""

    stage = "load"

    def __init__(
        self,
        message: str,
        *,
        path: PurePath | str | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message, path=path)
        if stage is not None:
            self.stage = stage


class EmptyProjectError(BuildError):
    """Raised when the source root holds no content pages."""

    stage = "load"


class MalformedMetadataError(BuildError):
    """Raised when a page's metadata block is unterminated or invalid."""

    stage = "metadata"


class DuplicateIdentifierError(BuildError):
    """Raised when two source paths map to the same page identifier."""

    stage = "tree"

    def __init__(
        self, identifier: str, first: PurePath, second: PurePath
    ) -> None:
        message = (
            f"identifier '{identifier}' is produced by both "
            f"'{first.as_posix()}' and '{second.as_posix()}'"
        )
        super().__init__(message, path=second)
        self.identifier = identifier
        self.first = first
        self.second = second


class RenderError(BuildError):
    """Raised when a page body cannot be converted to HTML."""

    stage = "render"


class PreprocessError(RenderError):
    """Raised when a body directive such as ``{{#include}}`` cannot be expanded."""

    stage = "preprocess"


class TemplateError(BuildError):
    """Raised when a template is invalid or references an undefined value."""

    stage = "template"

    def __init__(
        self,
        message: str,
        *,
        template_name: str,
        path: PurePath | str | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(f"{template_name}: {message}", path=path, line=line)
        self.template_name = template_name


class TreeInvariantError(RuntimeError):
    """Raised when the content tree is internally inconsistent.

    This signals a bug in the tree builder rather than a problem with the
    author's content, so it is never converted into an :class:`ErrorRecord`.
    """


def _format_location(path: str | None, line: int | None, message: str) -> str:
    if path is None:
        return message
    if line is None:
        return f"{path}: {message}"
    return f"{path}:{line}: {message}"


__all__ = [
    "BuildError",
    "DuplicateIdentifierError",
    "EmptyProjectError",
    "ErrorRecord",
    "MalformedMetadataError",
    "PreprocessError",
    "RenderError",
    "SiteIOError",
    "TemplateError",
    "TreeInvariantError",
]
