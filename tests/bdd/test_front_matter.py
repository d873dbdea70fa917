"""Behaviour tests for page metadata blocks.

The scenarios in ``front_matter.feature`` cover the two ways metadata can
keep a page out of the built site: a block that is opened but never closed
fails the whole build, while ``publish = false`` skips the page and reports
it so nothing is dropped silently.

Usage
-----
Run ``pytest tests/bdd/test_front_matter.py -v``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path, PurePosixPath

import pytest
from pytest_bdd import given, scenarios, then, when

from quire.pipeline import BuildResult, build_site

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "front_matter.feature"
)
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _write_pages(
    tmp_path: Path, scenario_state: dict[str, object], pages: dict[str, str]
) -> None:
    source = tmp_path / "src"
    source.mkdir()
    for name, text in pages.items():
        (source / name).write_text(text, encoding="utf-8")
    scenario_state["source"] = source
    scenario_state["output"] = tmp_path / "public"


@given("a page whose metadata block is never closed")
def given_unclosed_block(tmp_path: Path, scenario_state: dict[str, object]) -> None:
    """Write a page that opens a TOML block and never closes it."""
    _write_pages(
        tmp_path,
        scenario_state,
        {"broken.md": '+++\ntitle = "Broken"\n\nThe body never starts.\n'},
    )


@given("an unpublished page beside a published page")
def given_unpublished(tmp_path: Path, scenario_state: dict[str, object]) -> None:
    """Write one published page and one marked ``publish = false``."""
    _write_pages(
        tmp_path,
        scenario_state,
        {
            "index.md": '+++\ntitle = "Home"\n+++\nHello.\n',
            "draft.md": "---\ntitle: Draft\npublish: false\n---\nNot yet.\n",
        },
    )


@when("I build the site")
def when_build(scenario_state: dict[str, object]) -> None:
    """Run a full build and keep the result for the assertions."""
    scenario_state["result"] = build_site(
        typ.cast("Path", scenario_state["source"]),
        typ.cast("Path", scenario_state["output"]),
    )


@then("the build fails with a metadata error on line 1")
def then_metadata_error(scenario_state: dict[str, object]) -> None:
    """Verify the unterminated block is reported rather than swallowed."""
    result = typ.cast("BuildResult", scenario_state["result"])
    assert not result.ok
    assert [(r.path, r.stage, r.line) for r in result.errors] == [
        ("broken.md", "metadata", 1)
    ]


@then("only the published page is written")
def then_only_published(scenario_state: dict[str, object]) -> None:
    """Verify the draft produced no document."""
    output = typ.cast("Path", scenario_state["output"])
    result = typ.cast("BuildResult", scenario_state["result"])
    assert result.ok, result.errors
    assert [doc.output_path for doc in result.documents] == [
        PurePosixPath("index.html")
    ]
    assert (output / "index.html").is_file()
    assert not (output / "draft.html").exists()


@then("the unpublished page is reported as skipped")
def then_reported(scenario_state: dict[str, object]) -> None:
    """Verify the draft appears in the build result's skipped list."""
    result = typ.cast("BuildResult", scenario_state["result"])
    assert result.skipped == [PurePosixPath("draft.md")]
