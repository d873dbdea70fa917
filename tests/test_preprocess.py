"""Unit tests for ``{{#include}}`` directive expansion."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

import pytest

from quire.errors import PreprocessError, RenderError
from quire.generator.preprocess import IncludeDirective, LineRange, expand_directives

LISTING = "line 1\nline 2\nline 3\nline 4\n"


@pytest.fixture
def listing_dir(tmp_path: Path) -> Path:
    """Return a directory holding ``listings/main.rs``."""
    listing = tmp_path / "listings" / "main.rs"
    listing.parent.mkdir()
    listing.write_text(LISTING, encoding="utf-8")
    return tmp_path


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, LineRange(0, None)),
        ("", LineRange(0, None)),
        ("2", LineRange(1, 2)),
        ("2:", LineRange(1, None)),
        (":3", LineRange(0, 3)),
        ("2:3", LineRange(1, 3)),
    ],
)
def test_line_range_parse(value: str | None, expected: LineRange) -> None:
    assert LineRange.parse(value) == expected


def test_line_range_rejects_non_numbers() -> None:
    with pytest.raises(ValueError, match="invalid literal"):
        LineRange.parse("two")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", "line 1\nline 2\nline 3\nline 4"),
        ("3", "line 3"),
        ("3:", "line 3\nline 4"),
        (":2", "line 1\nline 2"),
        ("2:3", "line 2\nline 3"),
        ("4:2", ""),
    ],
)
def test_line_range_extract(value: str, expected: str) -> None:
    assert LineRange.parse(value).extract(LISTING) == expected


def test_include_directive_parse() -> None:
    directive = IncludeDirective.parse(" listings/main.rs:2:3 ")

    assert directive.path == PurePosixPath("listings/main.rs")
    assert directive.lines == LineRange(1, 3)


def test_expand_replaces_include_with_lines(listing_dir: Path) -> None:
    body = "```rust\n{{#include listings/main.rs:2:3}}\n```\n"

    expanded = expand_directives(body, base_dir=listing_dir)

    assert expanded == "```rust\nline 2\nline 3\n```\n"


def test_expand_includes_whole_file(listing_dir: Path) -> None:
    expanded = expand_directives(
        "{{ #include listings/main.rs }}", base_dir=listing_dir
    )

    assert expanded == LISTING.rstrip("\n")


def test_unknown_directive_is_left_in_place(
    listing_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    body = "Try {{#playground listings/main.rs}} here."

    with caplog.at_level(logging.WARNING, logger="quire.generator.preprocess"):
        expanded = expand_directives(
            body, base_dir=listing_dir, path=PurePosixPath("page.md")
        )

    assert expanded == body
    assert "unrecognized directive 'playground'" in caplog.text


def test_unparsable_include_is_left_in_place(listing_dir: Path) -> None:
    body = "{{#include listings/main.rs:x:y}}"

    assert expand_directives(body, base_dir=listing_dir) == body


def test_missing_include_raises_with_line(listing_dir: Path) -> None:
    body = "Intro\n\n{{#include listings/absent.rs}}\n"

    with pytest.raises(PreprocessError) as excinfo:
        expand_directives(
            body,
            base_dir=listing_dir,
            path=PurePosixPath("guide/page.md"),
            line_offset=5,
        )

    err = excinfo.value
    assert isinstance(err, RenderError)
    assert err.stage == "preprocess"
    assert err.line == 8
    assert err.path == PurePosixPath("guide/page.md")
    assert "listings/absent.rs" in err.message
