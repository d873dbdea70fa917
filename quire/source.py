"""Discover content pages and static assets beneath a source root.

The walk is made deterministic by sorting every relative POSIX path by code
point (equivalent to UTF-8 byte order), so the same tree yields the same
sequence on every platform regardless of how the filesystem lists entries.
Dot-files and dot-directories are ignored.

Example
-------
>>> from pathlib import Path
>>> from quire.source import load_sources
>>> sources = load_sources(Path("site/src"))  # doctest: +SKIP
>>> [str(source.relative_path) for source in sources]  # doctest: +SKIP
['hello-world.md', 'guide/index.md', 'guide/setup.md']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as typ
from pathlib import Path, PurePosixPath

from quire._constants import DEFAULT_CONTENT_EXTENSIONS
from quire.errors import EmptyProjectError, SiteIOError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class SourceFile:
    """A content page read from disk.

    Attributes
    ----------
    path : Path
        Absolute filesystem path of the page.
    relative_path : PurePosixPath
        Path relative to the source root, using ``/`` separators.
    content : bytes
        Raw file contents.
    index : int
        Position of the page in canonical discovery order.
    """

    path: Path
    relative_path: PurePosixPath
    content: bytes
    index: int


def is_content_file(name: str, extensions: cabc.Iterable[str]) -> bool:
    """Return True when ``name`` ends with one of the content ``extensions``."""
    lower = name.lower()
    return any(lower.endswith(ext) for ext in extensions)


def walk_source_tree(
    root: Path, *, exclude: cabc.Iterable[Path] = ()
) -> list[PurePosixPath]:
    """Return every visible file under ``root`` as sorted relative paths.

    Raises
    ------
    SiteIOError
        If ``root`` is not a readable directory or any subdirectory cannot
        be listed.
    """
    if not root.is_dir():
        msg = f"source directory '{root}' does not exist or is not a directory"
        raise SiteIOError(msg, path=root)

    excluded = {path.resolve() for path in exclude}

    def _raise(exc: OSError) -> None:
        raise exc

    found: list[PurePosixPath] = []
    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            current = Path(dirpath)
            dirnames[:] = [
                name
                for name in dirnames
                if not name.startswith(".")
                and (current / name).resolve() not in excluded
            ]
            relative_dir = PurePosixPath(current.relative_to(root).as_posix())
            found.extend(
                relative_dir / name for name in filenames if not name.startswith(".")
            )
    except OSError as exc:
        msg = f"cannot read source directory: {exc.strerror or exc}"
        raise SiteIOError(msg, path=exc.filename or root) from exc
    return sorted(found, key=PurePosixPath.as_posix)


def load_sources(
    root: Path,
    *,
    extensions: cabc.Iterable[str] = DEFAULT_CONTENT_EXTENSIONS,
    exclude: cabc.Iterable[Path] = (),
) -> list[SourceFile]:
    """Read every content page under ``root`` in canonical order.

    Parameters
    ----------
    root : Path
        Source directory to scan.
    extensions : Iterable[str], optional
        Lower-case suffixes recognised as content pages.
    exclude : Iterable[Path], optional
        Directories to skip entirely (for example an output directory that
        lives inside the source tree).

    Returns
    -------
    list[SourceFile]
        Pages sorted by relative path, each tagged with its discovery index.

    Raises
    ------
    SiteIOError
        If the root or any page cannot be read.
    EmptyProjectError
        If no content pages are found.
    """
    suffixes = tuple(extensions)
    root = root.resolve()
    sources: list[SourceFile] = []
    for relative in walk_source_tree(root, exclude=exclude):
        if not is_content_file(relative.name, suffixes):
            continue
        path = root.joinpath(*relative.parts)
        try:
            content = path.read_bytes()
        except OSError as exc:
            msg = f"cannot read page: {exc.strerror or exc}"
            raise SiteIOError(msg, path=relative) from exc
        sources.append(
            SourceFile(
                path=path,
                relative_path=relative,
                content=content,
                index=len(sources),
            )
        )
        logger.debug("discovered page %s", relative)

    if not sources:
        joined = ", ".join(suffixes)
        msg = f"no content files ({joined}) found"
        raise EmptyProjectError(msg, path=root)
    logger.info("discovered %d page(s) under %s", len(sources), root)
    return sources


def discover_assets(
    root: Path,
    *,
    extensions: cabc.Iterable[str] = DEFAULT_CONTENT_EXTENSIONS,
    exclude: cabc.Iterable[Path] = (),
) -> list[PurePosixPath]:
    """Return the non-content files under ``root`` that are copied verbatim."""
    suffixes = tuple(extensions)
    return [
        relative
        for relative in walk_source_tree(root.resolve(), exclude=exclude)
        if not is_content_file(relative.name, suffixes)
    ]


__all__ = [
    "SourceFile",
    "discover_assets",
    "is_content_file",
    "load_sources",
    "walk_source_tree",
]
