"""Assemble extracted pages into an ordered content tree.

The tree mirrors the source directory. Nodes live in an arena keyed by
identifier: each node lists its children by key and names its parent by key,
so the tree owns children and parents are lookups only. A directory's
``index`` page becomes that directory's node; a directory without one is a
transparent grouping node that contributes structure but no document.

Siblings are ordered by explicit ``order`` key first, then by entry name,
then by source path, which is unique and makes the order total.

Example
-------
>>> from quire.tree import page_identifier
>>> page_identifier("Guide/Getting Started.md")
'guide/getting-started'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from pathlib import PurePosixPath

from quire._constants import INDEX_STEM, OUTPUT_SUFFIX
from quire.errors import (
    DuplicateIdentifierError,
    EmptyProjectError,
    TreeInvariantError,
)
from quire.metadata import derive_title

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from quire.metadata import ExtractedPage, PageMetadata
    from quire.source import SourceFile

logger = logging.getLogger(__name__)

ROOT_KEY = ""
ROOT_PATH = PurePosixPath(".")


@dc.dataclass(frozen=True, slots=True)
class Page:
    """A content page placed in the tree.

    Attributes
    ----------
    identifier : str
        Stable identifier derived from the source path.
    source : SourceFile
        The file the page was read from.
    metadata : PageMetadata
        Validated metadata.
    body : str
        Raw body text.
    body_line : int
        Line in the source file where ``body`` starts.
    output_path : PurePosixPath
        Destination path relative to the output root.
    rendered : str | None
        Rendered body HTML; ``None`` until the body renderer has run.
    """

    identifier: str
    source: SourceFile
    metadata: PageMetadata
    body: str
    body_line: int
    output_path: PurePosixPath
    rendered: str | None = None

    @property
    def source_path(self) -> PurePosixPath:
        """Return the page's path relative to the source root."""
        return self.source.relative_path

    @property
    def title(self) -> str:
        """Return the page title."""
        return self.metadata.title

    def with_rendered(self, html: str) -> Page:
        """Return a copy of the page carrying ``html`` as its rendered body."""
        return dc.replace(self, rendered=html)


@dc.dataclass(slots=True)
class ContentNode:
    """A node in the content tree arena.

    Attributes
    ----------
    key : str
        Arena key: the page identifier, ``"dir/"`` for transparent
        directories, or ``""`` for a transparent root.
    name : str
        File or directory name used for ordering.
    source_path : PurePosixPath
        Source file, or directory for transparent nodes.
    page : Page | None
        The page this node renders, or ``None`` for grouping nodes.
    title : str
        Page title, or a title derived from the directory name.
    children : list[str]
        Ordered child keys.
    parent : str | None
        Parent key; ``None`` only for the root.
    """

    key: str
    name: str
    source_path: PurePosixPath
    page: Page | None
    title: str
    children: list[str] = dc.field(default_factory=list)
    parent: str | None = None

    @property
    def is_transparent(self) -> bool:
        """Return True when the node groups children without its own page."""
        return self.page is None

    @property
    def order(self) -> int | None:
        """Return the explicit order key of the node's page, if any."""
        return self.page.metadata.order if self.page else None


@dc.dataclass(slots=True)
class ContentTree:
    """The content hierarchy plus a flat identifier index.

    Attributes
    ----------
    root : str
        Key of the root node.
    nodes : dict[str, ContentNode]
        Arena of every node, grouping nodes included.
    index : dict[str, ContentNode]
        Page identifier to node, for page-bearing nodes only.
    """

    root: str
    nodes: dict[str, ContentNode]
    index: dict[str, ContentNode]

    def node(self, key: str) -> ContentNode:
        """Return the node stored under ``key``."""
        return self.nodes[key]

    def children(self, key: str) -> list[ContentNode]:
        """Return the ordered child nodes of ``key``."""
        return [self.nodes[child] for child in self.nodes[key].children]

    def parent(self, key: str) -> ContentNode | None:
        """Return the parent of ``key``, or None for the root."""
        parent = self.nodes[key].parent
        return None if parent is None else self.nodes[parent]

    def walk(self) -> cabc.Iterator[ContentNode]:
        """Yield every node in pre-order: a node, then its children in order.

        Raises
        ------
        TreeInvariantError
            If a node is reached twice or a child key is missing.
        """
        seen: set[str] = set()
        stack = [self.root]
        while stack:
            key = stack.pop()
            if key in seen:
                msg = f"content tree revisits node '{key}'"
                raise TreeInvariantError(msg)
            seen.add(key)
            node = self.nodes.get(key)
            if node is None:
                msg = f"content tree references missing node '{key}'"
                raise TreeInvariantError(msg)
            yield node
            stack.extend(reversed(node.children))

    def pages(self) -> list[Page]:
        """Return every page in the tree in traversal order."""
        return [node.page for node in self.walk() if node.page is not None]

    def __len__(self) -> int:
        return len(self.index)


@dc.dataclass(slots=True)
class _DirectoryGroup:
    """Pages and subdirectories gathered for one source directory."""

    path: PurePosixPath
    index_page: Page | None = None
    pages: list[Page] = dc.field(default_factory=list)
    subdirs: list[PurePosixPath] = dc.field(default_factory=list)


def slugify(value: str) -> str:
    """Convert a path segment into a lowercase hyphen-separated slug."""
    slug = re.sub(r"[\W_]+", "-", value.lower()).strip("-")
    return slug or value


def page_identifier(relative_path: PurePosixPath | str) -> str:
    """Return the stable identifier for a page at ``relative_path``."""
    path = PurePosixPath(relative_path)
    segments = [slugify(part) for part in path.parent.parts]
    segments.append(slugify(path.stem))
    return "/".join(segments)


def directory_key(directory: PurePosixPath) -> str:
    """Return the arena key for a directory without an index page."""
    return "/".join(slugify(part) for part in directory.parts) + "/"


def output_path_for(relative_path: PurePosixPath) -> PurePosixPath:
    """Return the output path for a page: its source path ending in ``.html``."""
    return relative_path.with_suffix(OUTPUT_SUFFIX)


def is_index_page(relative_path: PurePosixPath) -> bool:
    """Return True when ``relative_path`` names a directory's index page."""
    return relative_path.stem.lower() == INDEX_STEM


def sort_key(node: ContentNode) -> tuple[bool, int, str, str]:
    """Return the sibling ordering key for ``node``."""
    order = node.order
    return (
        order is None,
        order if order is not None else 0,
        node.name,
        node.source_path.as_posix(),
    )


def build_tree(
    entries: cabc.Iterable[ExtractedPage], *, root_title: str = "Home"
) -> ContentTree:
    """Build the ordered content tree from extracted pages.

    Parameters
    ----------
    entries : Iterable[ExtractedPage]
        Pages with validated metadata. Unpublished pages must already be
        filtered out.
    root_title : str, optional
        Title for the root node when no root index page exists.

    Returns
    -------
    ContentTree
        Root node key, node arena, and identifier index.

    Raises
    ------
    DuplicateIdentifierError
        If two source paths map to the same identifier.
    EmptyProjectError
        If ``entries`` is empty.
    """
    pages = _make_pages(entries)
    if not pages:
        msg = "no publishable pages to build"
        raise EmptyProjectError(msg)

    groups: dict[PurePosixPath, _DirectoryGroup] = {
        ROOT_PATH: _DirectoryGroup(path=ROOT_PATH)
    }
    for page in pages:
        directory = page.source_path.parent
        group = _ensure_group(groups, directory)
        if is_index_page(page.source_path):
            group.index_page = page
        else:
            group.pages.append(page)

    nodes: dict[str, ContentNode] = {}
    root_key = _build_directory(groups, ROOT_PATH, nodes, root_title=root_title)
    index = {
        node.page.identifier: node for node in nodes.values() if node.page is not None
    }
    logger.debug("built content tree with %d node(s)", len(nodes))
    return ContentTree(root=root_key, nodes=nodes, index=index)


def _make_pages(entries: cabc.Iterable[ExtractedPage]) -> list[Page]:
    """Create Page objects, rejecting duplicate identifiers."""
    seen: dict[str, PurePosixPath] = {}
    pages: list[Page] = []
    for entry in entries:
        relative = entry.source.relative_path
        identifier = page_identifier(relative)
        if identifier in seen:
            raise DuplicateIdentifierError(identifier, seen[identifier], relative)
        seen[identifier] = relative
        pages.append(
            Page(
                identifier=identifier,
                source=entry.source,
                metadata=entry.metadata,
                body=entry.body,
                body_line=entry.body_line,
                output_path=output_path_for(relative),
            )
        )
    return pages


def _ensure_group(
    groups: dict[PurePosixPath, _DirectoryGroup], directory: PurePosixPath
) -> _DirectoryGroup:
    """Return the group for ``directory``, registering it with its ancestors."""
    group = groups.get(directory)
    if group is not None:
        return group
    group = _DirectoryGroup(path=directory)
    groups[directory] = group
    parent = _ensure_group(groups, directory.parent)
    parent.subdirs.append(directory)
    return group


def _build_directory(
    groups: dict[PurePosixPath, _DirectoryGroup],
    directory: PurePosixPath,
    nodes: dict[str, ContentNode],
    *,
    root_title: str,
) -> str:
    """Create the node for ``directory`` and, recursively, its children."""
    group = groups[directory]
    is_root = directory == ROOT_PATH
    if group.index_page is not None:
        page = group.index_page
        node = ContentNode(
            key=page.identifier,
            name="" if is_root else directory.name,
            source_path=page.source_path,
            page=page,
            title=page.title,
        )
    else:
        key = ROOT_KEY if is_root else directory_key(directory)
        node = ContentNode(
            key=key,
            name="" if is_root else directory.name,
            source_path=directory,
            page=None,
            title=root_title if is_root else derive_title(directory.name),
        )
    _register(nodes, node)

    children: list[ContentNode] = []
    for subdir in group.subdirs:
        child_key = _build_directory(groups, subdir, nodes, root_title=root_title)
        children.append(nodes[child_key])
    for page in group.pages:
        leaf = ContentNode(
            key=page.identifier,
            name=page.source_path.name,
            source_path=page.source_path,
            page=page,
            title=page.title,
        )
        _register(nodes, leaf)
        children.append(leaf)

    children.sort(key=sort_key)
    node.children = [child.key for child in children]
    for child in children:
        child.parent = node.key
    return node.key


def _register(nodes: dict[str, ContentNode], node: ContentNode) -> None:
    """Add ``node`` to the arena, rejecting key collisions."""
    existing = nodes.get(node.key)
    if existing is not None:
        raise DuplicateIdentifierError(
            node.key, existing.source_path, node.source_path
        )
    nodes[node.key] = node


__all__ = [
    "ContentNode",
    "ContentTree",
    "Page",
    "build_tree",
    "directory_key",
    "is_index_page",
    "output_path_for",
    "page_identifier",
    "slugify",
    "sort_key",
]
