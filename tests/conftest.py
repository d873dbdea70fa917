"""Shared fixtures for the quire test suite."""

from __future__ import annotations

import typing as typ

import pytest

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path


def _write_tree(root: Path, files: cabc.Mapping[str, str | bytes]) -> Path:
    """Create ``files`` (relative path to content) beneath ``root``."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def write_tree() -> typ.Callable[..., Path]:
    """Return a helper that materializes a mapping of files on disk."""
    return _write_tree


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """Return an empty source directory inside ``tmp_path``."""
    root = tmp_path / "src"
    root.mkdir()
    return root
