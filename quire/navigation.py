"""Compute previous/next links and breadcrumbs from the content tree.

Traversal order is the pre-order walk of the whole tree (a node, then its
children in sibling order), restricted to nodes that carry a page. Previous
and next are neighbours in that flattening; breadcrumbs follow parent keys
from the page up to the root. Everything here is a pure function of the
tree.
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import typing as typ

from quire.errors import TreeInvariantError

if typ.TYPE_CHECKING:
    from pathlib import PurePosixPath

    from quire.tree import ContentNode, ContentTree


@dc.dataclass(frozen=True, slots=True)
class NavLink:
    """A link to another page in the site."""

    identifier: str
    title: str
    output_path: PurePosixPath


@dc.dataclass(frozen=True, slots=True)
class Breadcrumb:
    """An ancestor of a page; ``output_path`` is None for grouping nodes."""

    identifier: str
    title: str
    output_path: PurePosixPath | None


@dc.dataclass(frozen=True, slots=True)
class NavigationContext:
    """Navigation data computed for a single page.

    Attributes
    ----------
    position : int
        Index of the page in traversal order.
    previous : NavLink | None
        Page before this one, absent for the first page.
    next : NavLink | None
        Page after this one, absent for the last page.
    ancestors : tuple[Breadcrumb, ...]
        Ancestors ordered from the root down to the page's parent.
    """

    position: int
    previous: NavLink | None
    next: NavLink | None
    ancestors: tuple[Breadcrumb, ...]


def flatten(tree: ContentTree) -> list[ContentNode]:
    """Return the page-bearing nodes of ``tree`` in traversal order."""
    return [node for node in tree.walk() if node.page is not None]


def ancestors_of(tree: ContentTree, key: str) -> tuple[Breadcrumb, ...]:
    """Return the breadcrumb chain from the root to the parent of ``key``.

    Raises
    ------
    TreeInvariantError
        If a parent key is missing from the arena or the chain loops.
    """
    chain: list[Breadcrumb] = []
    seen = {key}
    current = tree.nodes[key].parent
    while current is not None:
        if current in seen:
            msg = f"parent chain of '{key}' loops through '{current}'"
            raise TreeInvariantError(msg)
        seen.add(current)
        node = tree.nodes.get(current)
        if node is None:
            msg = f"node '{key}' has missing ancestor '{current}'"
            raise TreeInvariantError(msg)
        chain.append(
            Breadcrumb(
                identifier=node.key,
                title=node.title,
                output_path=node.page.output_path if node.page else None,
            )
        )
        current = node.parent
    if chain and chain[-1].identifier != tree.root:
        msg = f"parent chain of '{key}' does not reach the root"
        raise TreeInvariantError(msg)
    chain.reverse()
    return tuple(chain)


def resolve_navigation(tree: ContentTree) -> dict[str, NavigationContext]:
    """Return a NavigationContext for every page, keyed by page identifier."""
    ordered = flatten(tree)
    links = [_link(node) for node in ordered]
    contexts: dict[str, NavigationContext] = {}
    for position, node in enumerate(ordered):
        contexts[node.key] = NavigationContext(
            position=position,
            previous=links[position - 1] if position > 0 else None,
            next=links[position + 1] if position + 1 < len(links) else None,
            ancestors=ancestors_of(tree, node.key),
        )
    return contexts


def path_to_root(output_path: PurePosixPath) -> str:
    """Return the relative prefix leading from ``output_path`` to the site root.

    Examples
    --------
    >>> from pathlib import PurePosixPath
    >>> path_to_root(PurePosixPath("guide/setup/index.html"))
    '../../'
    >>> path_to_root(PurePosixPath("index.html"))
    ''
    """
    return "../" * (len(output_path.parts) - 1)


def relative_href(target: PurePosixPath, current: PurePosixPath) -> str:
    """Return the link from the page at ``current`` to the page at ``target``."""
    start = posixpath.dirname(current.as_posix()) or "."
    return posixpath.relpath(target.as_posix(), start)


def _link(node: ContentNode) -> NavLink:
    page = node.page
    if page is None:
        msg = f"node '{node.key}' has no page to link to"
        raise TreeInvariantError(msg)
    return NavLink(
        identifier=page.identifier, title=page.title, output_path=page.output_path
    )


__all__ = [
    "Breadcrumb",
    "NavLink",
    "NavigationContext",
    "ancestors_of",
    "flatten",
    "path_to_root",
    "relative_href",
    "resolve_navigation",
]
