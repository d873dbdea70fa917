"""Unit tests for source discovery.

These tests cover ``quire.source``: canonical ordering of discovered pages,
extension filtering, hidden and excluded directories, asset discovery, and
the errors raised for missing or empty source roots.
"""

from __future__ import annotations

import typing as typ
from pathlib import PurePosixPath

import pytest

from quire.errors import EmptyProjectError, SiteIOError
from quire.source import discover_assets, is_content_file, load_sources

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_load_sources_sorts_by_code_point(
    source_root: Path, write_tree: typ.Callable[..., Path]
) -> None:
    write_tree(
        source_root,
        {
            "b.md": "b",
            "a/z.md": "z",
            "a/index.md": "index",
            "C.md": "c",
            "notes.txt": "not a page",
        },
    )

    sources = load_sources(source_root)

    assert [source.relative_path.as_posix() for source in sources] == [
        "C.md",
        "a/index.md",
        "a/z.md",
        "b.md",
    ]
    assert [source.index for source in sources] == [0, 1, 2, 3]
    assert sources[2].content == b"z"
    assert sources[2].path == source_root.resolve() / "a" / "z.md"


def test_load_sources_skips_hidden_and_excluded_entries(
    source_root: Path, write_tree: typ.Callable[..., Path]
) -> None:
    write_tree(
        source_root,
        {
            "page.md": "visible",
            ".draft.md": "hidden file",
            ".git/HEAD.md": "hidden dir",
            "public/old.md": "previous output",
        },
    )

    sources = load_sources(source_root, exclude=[source_root / "public"])

    assert [source.relative_path for source in sources] == [PurePosixPath("page.md")]


def test_load_sources_honours_custom_extensions(
    source_root: Path, write_tree: typ.Callable[..., Path]
) -> None:
    write_tree(source_root, {"a.md": "a", "b.TXT": "b"})

    sources = load_sources(source_root, extensions=(".txt",))

    assert [source.relative_path.name for source in sources] == ["b.TXT"]


def test_load_sources_missing_root_raises_io_error(tmp_path: Path) -> None:
    with pytest.raises(SiteIOError) as excinfo:
        load_sources(tmp_path / "absent")

    assert excinfo.value.stage == "load"
    assert excinfo.value.to_record().path is not None


def test_load_sources_without_pages_raises_empty_project(
    source_root: Path, write_tree: typ.Callable[..., Path]
) -> None:
    write_tree(source_root, {"style.css": "body {}"})

    with pytest.raises(EmptyProjectError, match="no content files"):
        load_sources(source_root)


def test_discover_assets_lists_non_content_files(
    source_root: Path, write_tree: typ.Callable[..., Path]
) -> None:
    write_tree(
        source_root,
        {
            "index.md": "home",
            "notes.txt": "notes",
            "img/logo.png": b"\x89PNG",
            ".cache/blob": "hidden",
        },
    )

    assets = discover_assets(source_root)

    assert assets == [PurePosixPath("img/logo.png"), PurePosixPath("notes.txt")]


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("page.md", True),
        ("PAGE.MD", True),
        ("notes.markdown", True),
        ("image.png", False),
        ("md", False),
    ],
)
def test_is_content_file(name: str, *, expected: bool) -> None:
    assert is_content_file(name, (".md", ".markdown")) is expected
