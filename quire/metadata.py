r"""Split page sources into front matter and body, and validate the fields.

A page may open with a metadata block delimited by a sentinel line. ``+++``
introduces TOML fields and ``---`` introduces YAML fields; the same sentinel
must close the block. Blank lines before the opening sentinel are allowed.
Pages without a block get a title derived from their filename and keep the
whole file as body.

Example
-------
>>> from quire.metadata import split_front_matter
>>> block, body, body_line = split_front_matter('+++\ntitle = "Hi"\n+++\nBody\n')
>>> block.fields["title"], body, body_line
('Hi', 'Body\n', 4)
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import tomllib
import typing as typ
from pathlib import PurePosixPath

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from quire.errors import MalformedMetadataError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from quire.source import SourceFile

TOML_SENTINEL = "+++"
YAML_SENTINEL = "---"
SENTINELS = (TOML_SENTINEL, YAML_SENTINEL)
TITLE_SEPARATORS = re.compile(r"[\s_-]+")
TOML_LINE_PATTERN = re.compile(r"at line (\d+)")
_SCALAR_TYPES = (str, int, float, bool, dt.date, dt.time)


@dc.dataclass(slots=True)
class PageMetadata:
    """Validated metadata for a single page.

    Attributes
    ----------
    title : str
        Page title; explicit or derived from the filename.
    order : int | None
        Explicit sort key among siblings.
    publish : bool
        False excludes the page from the build.
    description : str | None
        Short summary for templates and the site index.
    date : datetime.date | None
        Date the page was written.
    kind : str | None
        Free-form page type such as ``"post"``.
    extra : dict[str, str]
        Every other field, kept as strings for template use.
    """

    title: str
    order: int | None = None
    publish: bool = True
    description: str | None = None
    date: dt.date | None = None
    kind: str | None = None
    extra: dict[str, str] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class FrontMatterBlock:
    """Raw fields parsed from a metadata block and where the block started."""

    sentinel: str
    fields: dict[str, typ.Any]
    line: int


@dc.dataclass(slots=True)
class ExtractedPage:
    """A source file paired with its metadata and body.

    Attributes
    ----------
    source : SourceFile
        The file the page was read from.
    metadata : PageMetadata
        Validated metadata.
    body : str
        Page text following the metadata block.
    body_line : int
        1-based line number in the source where ``body`` starts.
    """

    source: SourceFile
    metadata: PageMetadata
    body: str
    body_line: int = 1


def derive_title(path: PurePosixPath | str) -> str:
    """Return a display title derived from a file or directory name.

    Examples
    --------
    >>> derive_title("guide/hello-world.md")
    'Hello World'
    """
    stem = PurePosixPath(path).stem
    words = TITLE_SEPARATORS.sub(" ", stem).split()
    return " ".join(word.capitalize() for word in words)


def split_front_matter(
    text: str, *, path: PurePosixPath | None = None
) -> tuple[FrontMatterBlock | None, str, int]:
    """Split ``text`` into its metadata block, body, and body start line.

    Raises
    ------
    MalformedMetadataError
        If a block is opened but never closed, or its fields do not parse.
    """
    lines = text.splitlines(keepends=True)
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start == len(lines) or lines[start].strip() not in SENTINELS:
        return None, text, 1

    sentinel = lines[start].strip()
    open_line = start + 1
    close = next(
        (idx for idx in range(start + 1, len(lines)) if lines[idx].strip() == sentinel),
        None,
    )
    if close is None:
        msg = f"metadata block opened with '{sentinel}' is never closed"
        raise MalformedMetadataError(msg, path=path, line=open_line)

    raw = "".join(lines[start + 1 : close])
    fields = _parse_fields(raw, sentinel, path=path, open_line=open_line)

    body_start = close + 1
    while body_start < len(lines) and not lines[body_start].strip():
        body_start += 1
    body = "".join(lines[body_start:])
    block = FrontMatterBlock(sentinel=sentinel, fields=fields, line=open_line)
    return block, body, body_start + 1


def build_metadata(
    fields: cabc.Mapping[str, typ.Any],
    *,
    path: PurePosixPath,
    defaults: cabc.Mapping[str, typ.Any] | None = None,
    line: int | None = None,
) -> PageMetadata:
    """Validate raw ``fields`` (layered over ``defaults``) into PageMetadata."""
    merged: dict[str, typ.Any] = dict(defaults or {})
    merged.update(fields)

    def _fail(message: str) -> typ.NoReturn:
        raise MalformedMetadataError(message, path=path, line=line)

    title = derive_title(path)
    if "title" in merged:
        value = merged.pop("title")
        if not isinstance(value, str) or not value.strip():
            _fail("'title' must be a non-empty string")
        title = value.strip()
    if not title:
        _fail("no 'title' given and none can be derived from the filename")

    order = merged.pop("order", None)
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        _fail("'order' must be an integer")

    publish = merged.pop("publish", True)
    if not isinstance(publish, bool):
        _fail("'publish' must be true or false")

    description = merged.pop("description", None)
    if description is not None and not isinstance(description, str):
        _fail("'description' must be a string")

    kind = merged.pop("kind", None)
    if kind is not None and not isinstance(kind, str):
        _fail("'kind' must be a string")

    date = _coerce_date(merged.pop("date", None))
    if date is False:
        _fail("'date' must be an ISO date such as 2020-03-21")

    extra: dict[str, str] = {}
    for key, value in merged.items():
        if not isinstance(value, _SCALAR_TYPES):
            _fail(f"field '{key}' must be a scalar value")
        extra[str(key)] = _stringify(value)

    return PageMetadata(
        title=title,
        order=order,
        publish=publish,
        description=description,
        date=date or None,
        kind=kind,
        extra=extra,
    )


def extract_metadata(
    source: SourceFile, *, defaults: cabc.Mapping[str, typ.Any] | None = None
) -> ExtractedPage:
    """Decode ``source`` and split it into validated metadata and body.

    Raises
    ------
    MalformedMetadataError
        If the file is not UTF-8, the block is unterminated, or a field is
        invalid.
    """
    path = source.relative_path
    try:
        text = source.content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        msg = f"page is not valid UTF-8 ({exc.reason} at byte {exc.start})"
        raise MalformedMetadataError(msg, path=path) from exc

    block, body, body_line = split_front_matter(text, path=path)
    fields = block.fields if block else {}
    metadata = build_metadata(
        fields, path=path, defaults=defaults, line=block.line if block else None
    )
    return ExtractedPage(
        source=source, metadata=metadata, body=body, body_line=body_line
    )


def _parse_fields(
    raw: str, sentinel: str, *, path: PurePosixPath | None, open_line: int
) -> dict[str, typ.Any]:
    """Parse the text between sentinels as TOML or YAML."""
    if sentinel == TOML_SENTINEL:
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            match = TOML_LINE_PATTERN.search(str(exc))
            line = open_line + int(match.group(1)) if match else open_line
            msg = f"invalid TOML metadata: {exc}"
            raise MalformedMetadataError(msg, path=path, line=line) from exc

    loader = YAML(typ="safe")
    try:
        loaded = loader.load(raw)
    except YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        line = open_line + mark.line + 1 if mark is not None else open_line
        problem = getattr(exc, "problem", None) or str(exc)
        msg = f"invalid YAML metadata: {problem}"
        raise MalformedMetadataError(msg, path=path, line=line) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = "metadata block must contain key/value fields"
        raise MalformedMetadataError(msg, path=path, line=open_line)
    return {str(key): value for key, value in loaded.items()}


def _coerce_date(value: object) -> dt.date | typ.Literal[False] | None:
    """Return a date, None when absent, or False when ``value`` is invalid."""
    match value:
        case None:
            return None
        case dt.datetime():
            return value.date()
        case dt.date():
            return value
        case str() as text:
            try:
                return dt.date.fromisoformat(text.strip())
            except ValueError:
                return False
        case _:
            return False


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    return str(value)


__all__ = [
    "ExtractedPage",
    "FrontMatterBlock",
    "PageMetadata",
    "build_metadata",
    "derive_title",
    "extract_metadata",
    "split_front_matter",
]
