"""Unit tests for the output writer."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath

import pytest

from quire.errors import SiteIOError
from quire.generator import RenderedDocument
from quire.output import OutputWriter


@pytest.fixture
def writer(tmp_path: Path) -> OutputWriter:
    """Return a writer whose destination has already been prepared."""
    output = OutputWriter(tmp_path / "public")
    output.prepare()
    return output


def test_prepare_removes_previous_output(tmp_path: Path) -> None:
    destination = tmp_path / "public"
    (destination / "old").mkdir(parents=True)
    (destination / "old" / "stale.html").write_text("stale", encoding="utf-8")

    OutputWriter(destination).prepare()

    assert destination.is_dir()
    assert list(destination.iterdir()) == []


def test_prepare_replaces_a_file_at_the_destination(tmp_path: Path) -> None:
    destination = tmp_path / "public"
    destination.write_text("not a directory", encoding="utf-8")

    OutputWriter(destination).prepare()

    assert destination.is_dir()


def test_write_document_creates_parent_directories(writer: OutputWriter) -> None:
    document = RenderedDocument(
        output_path=PurePosixPath("guide/deep/page.html"), html="<p>hi</p>\n"
    )

    path = writer.write_document(document)

    assert path == writer.destination / "guide" / "deep" / "page.html"
    assert path.read_text(encoding="utf-8") == "<p>hi</p>\n"


def test_copy_file_is_verbatim(writer: OutputWriter, tmp_path: Path) -> None:
    source = tmp_path / "logo.png"
    payload = bytes(range(256))
    source.write_bytes(payload)

    path = writer.copy_file(source, PurePosixPath("img/logo.png"))

    assert path.read_bytes() == payload


def test_copy_tree_skips_hidden_files(writer: OutputWriter, tmp_path: Path) -> None:
    static = tmp_path / "static"
    (static / "css").mkdir(parents=True)
    (static / "css" / "site.css").write_text("body {}", encoding="utf-8")
    (static / ".DS_Store").write_text("junk", encoding="utf-8")

    copied = writer.copy_tree(static)

    assert copied == [writer.destination / "css" / "site.css"]
    assert not (writer.destination / ".DS_Store").exists()


def test_copy_tree_ignores_missing_directory(
    writer: OutputWriter, tmp_path: Path
) -> None:
    assert writer.copy_tree(tmp_path / "absent") == []


def test_write_failure_raises_io_error(writer: OutputWriter) -> None:
    (writer.destination / "blocked").write_text("file", encoding="utf-8")

    with pytest.raises(SiteIOError) as excinfo:
        writer.write_text(PurePosixPath("blocked/page.html"), "<p></p>")

    assert excinfo.value.stage == "output"
    assert isinstance(excinfo.value.__cause__, OSError)


def test_paths_outside_destination_are_rejected(writer: OutputWriter) -> None:
    with pytest.raises(SiteIOError, match="escapes the destination"):
        writer.write_text(PurePosixPath("../outside.html"), "x")


def test_concurrent_writes_share_directories(writer: OutputWriter) -> None:
    documents = [
        RenderedDocument(
            output_path=PurePosixPath(f"a/b/c/page-{index}.html"),
            html=f"<p>{index}</p>",
        )
        for index in range(32)
    ]

    with ThreadPoolExecutor(max_workers=8) as pool:
        written = list(pool.map(writer.write_document, documents))

    assert len(written) == 32
    assert all(path.is_file() for path in written)
