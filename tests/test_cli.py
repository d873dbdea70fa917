"""Tests for the ``quire build`` command.

The command function is called directly, with ``build_site`` stubbed by
``pytest-mock`` where only the reporting behaviour is under test.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path, PurePosixPath

import pytest

from quire import cli
from quire.config import SiteConfig, SiteConfigError
from quire.errors import ErrorRecord
from quire.pipeline import BuildResult

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


def test_build_prints_written_files(
    tmp_path: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    written = tmp_path / "public" / "index.html"
    build = mocker.patch.object(
        cli,
        "build_site",
        return_value=BuildResult(
            ok=True, written=[written], skipped=[PurePosixPath("draft.md")]
        ),
    )

    cli.build(source=Path("src"), output=Path("public"))

    build.assert_called_once()
    source, output, config = build.call_args.args
    assert (source, output) == (Path("src"), Path("public"))
    assert config == SiteConfig()
    out = capsys.readouterr().out
    assert "skipped draft.md (publish = false)" in out
    assert f"wrote {Path('public') / 'index.html'}" in out


def test_build_failure_reports_errors_and_exits(
    tmp_path: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    record = ErrorRecord(path="a.md", stage="metadata", message="bad", line=3)
    mocker.patch.object(
        cli, "build_site", return_value=BuildResult(ok=False, errors=[record])
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.build()

    assert excinfo.value.code == 1
    assert "error[metadata]: a.md:3: bad" in capsys.readouterr().err


def test_build_loads_default_config_file(
    tmp_path: Path, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "quire.yaml").write_text(
        "site:\n  title: From File\nbuild:\n  workers: 2\n", encoding="utf-8"
    )
    build = mocker.patch.object(
        cli, "build_site", return_value=BuildResult(ok=True)
    )

    cli.build(workers=3)

    config = build.call_args.args[2]
    assert config.title == "From File"
    assert config.workers == 3


def test_build_rejects_non_positive_workers(
    tmp_path: Path, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    mocker.patch.object(cli, "build_site")

    with pytest.raises(SiteConfigError, match="--workers"):
        cli.build(workers=0)


def test_build_runs_real_pipeline(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    source = tmp_path / "src"
    source.mkdir()
    (source / "hello-world.md").write_text("# Hello\n", encoding="utf-8")
    output = tmp_path / "public"

    cli.build(source=source, output=output, config=None)

    assert (output / "hello-world.html").is_file()
    assert "hello-world.html" in capsys.readouterr().out
