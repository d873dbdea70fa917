"""Behaviour tests for previous/next links, breadcrumbs and regeneration.

The scenarios in ``site_navigation.feature`` build a small nested site with
``build_site`` and inspect the written HTML with BeautifulSoup, proving that
navigation follows the pre-order traversal of the content tree and that a
rebuild never leaves output for a page that has been deleted.

Usage
-----
Run ``pytest tests/bdd/test_site_navigation.py -v``. The scenarios write
into pytest's ``tmp_path`` and need no network access.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, scenarios, then, when

from quire.config import SiteConfig
from quire.pipeline import BuildResult, build_site

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "site_navigation.feature"
)
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("a source tree with a guide section and a standalone page")
def given_source_tree(tmp_path: Path, scenario_state: dict[str, object]) -> None:
    """Write a home page, a guide section with two pages, and a standalone page."""
    source = tmp_path / "src"
    pages = {
        "index.md": '+++\ntitle = "Home"\n+++\nWelcome.\n',
        "guide/index.md": '+++\ntitle = "Guide"\n+++\nOverview.\n',
        "guide/setup.md": '+++\ntitle = "Setup"\norder = 1\n+++\nInstall it.\n',
        "standalone.md": "A page on its own.\n",
    }
    for relative, text in pages.items():
        path = source / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    scenario_state["source"] = source
    scenario_state["output"] = tmp_path / "public"


def _build(scenario_state: dict[str, object]) -> None:
    result = build_site(
        typ.cast("Path", scenario_state["source"]),
        typ.cast("Path", scenario_state["output"]),
        SiteConfig(title="Handbook"),
    )
    assert result.ok, result.errors
    scenario_state["result"] = result


@when("I build the site")
def when_build(scenario_state: dict[str, object]) -> None:
    """Run a full build of the scenario's source tree."""
    _build(scenario_state)


@when("I delete the standalone page and rebuild")
def when_delete_and_rebuild(scenario_state: dict[str, object]) -> None:
    """Remove ``standalone.md`` from the source tree and build again."""
    source = typ.cast("Path", scenario_state["source"])
    (source / "standalone.md").unlink()
    _build(scenario_state)


def _setup_page(scenario_state: dict[str, object]) -> BeautifulSoup:
    output = typ.cast("Path", scenario_state["output"])
    html = (output / "guide" / "setup.html").read_text(encoding="utf-8")
    return BeautifulSoup(html, "html.parser")


@then(
    "the setup page links back to the guide index and forward to the standalone page"
)
def then_previous_next(scenario_state: dict[str, object]) -> None:
    """Verify the setup page's neighbours in traversal order."""
    soup = _setup_page(scenario_state)
    previous = soup.select_one("a[rel=prev]")
    following = soup.select_one("a[rel=next]")
    assert previous is not None
    assert following is not None
    assert (previous.get_text(strip=True), previous["href"]) == (
        "← Guide",
        "index.html",
    )
    assert (following.get_text(strip=True), following["href"]) == (
        "Standalone →",
        "../standalone.html",
    )


@then("the setup page shows breadcrumbs from the home page")
def then_breadcrumbs(scenario_state: dict[str, object]) -> None:
    """Verify the breadcrumb trail runs from the home page to the guide."""
    soup = _setup_page(scenario_state)
    crumbs = [(a.get_text(), a["href"]) for a in soup.select("nav.breadcrumbs a")]
    assert crumbs == [("Home", "../index.html"), ("Guide", "index.html")]


@then("the standalone page output no longer exists")
def then_no_stale_output(scenario_state: dict[str, object]) -> None:
    """Verify the rebuilt site holds no output for the deleted page."""
    output = typ.cast("Path", scenario_state["output"])
    result = typ.cast("BuildResult", scenario_state["result"])
    assert not (output / "standalone.html").exists()
    assert all(doc.identifier != "standalone" for doc in result.documents)
