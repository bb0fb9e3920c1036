"""Tests for the command line entrypoint and action dispatch."""

from __future__ import annotations

from pathlib import Path

import pytest

from git_ship.cli import dispatch, main, normalize_action
from git_ship.errors import UnknownActionError
from git_ship.handlers.base import Handler
from git_ship.handlers.python import PythonHandler

BASE_CONF = "class = git_ship.handlers.base.Handler\n"


def test_normalize_action() -> None:
    assert normalize_action("test-coverage") == "test_coverage"


class TestDispatch:
    def test_configured_class(self, workdir: Path, runner) -> None:
        (workdir / ".ship.conf").write_text("class = git_ship.handlers.python.PythonHandler\n")
        (workdir / "CHANGELOG.md").write_text("## 1.0.0\n")
        (workdir / "demo").mkdir()
        (workdir / "demo" / "__init__.py").write_text("")
        handler = dispatch("test-coverage", silent=True)
        assert isinstance(handler, PythonHandler)
        assert runner.calls[0][-2:] == ("--cov=demo", "--cov-report=term-missing")

    def test_detected_class_keeps_loaded_config(self, workdir: Path, runner) -> None:
        (workdir / ".ship.conf").write_text("build_test_options = -x\n")
        (workdir / "pyproject.toml").write_text("")
        handler = dispatch("clean", silent=True)
        assert type(handler) is PythonHandler
        assert handler.config == {"build_test_options": "-x"}

    @pytest.mark.parametrize("action", ["not-valid!", "_private", "frobnicate"])
    def test_unknown_action(self, workdir: Path, action: str) -> None:
        (workdir / ".ship.conf").write_text(BASE_CONF)
        with pytest.raises(UnknownActionError, match="Unknown action"):
            dispatch(action)

    def test_start_without_config(self, workdir: Path, runner) -> None:
        handler = dispatch("start", silent=True)
        assert type(handler) is Handler
        assert (workdir / ".ship.conf").exists()

    def test_start_detects_from_file(self, workdir: Path, runner) -> None:
        handler = dispatch("start", "app/__init__.py", silent=True)
        assert type(handler) is PythonHandler
        assert (workdir / "app" / "__init__.py").exists()


class TestMain:
    def test_default_action_is_ship(self, workdir: Path, runner, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / ".ship.conf").write_text(BASE_CONF)
        assert main([]) == 1
        assert capsys.readouterr().err == "!! Cannot ship without a current branch\n"

    def test_missing_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["build"]) == 1
        assert capsys.readouterr().err.startswith("!! Read .ship.conf")

    def test_unknown_action(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / ".ship.conf").write_text(BASE_CONF)
        assert main(["frobnicate"]) == 1
        assert capsys.readouterr().err == "!! Unknown action: frobnicate\n"

    def test_not_available(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / ".ship.conf").write_text(BASE_CONF)
        assert main(["test-coverage"]) == 1
        assert "!! test_coverage() is not available" in capsys.readouterr().err

    def test_bad_class(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / ".ship.conf").write_text("class = nope.Nope\n")
        assert main(["build"]) == 1
        assert capsys.readouterr().err.startswith("!! Could not load nope.Nope")

    def test_start(self, workdir: Path, runner) -> None:
        assert main(["--silent", "start"]) == 0
        assert (workdir / ".ship.conf").exists()
        assert (workdir / ".gitignore").exists()

    def test_hooks(self, workdir: Path, runner) -> None:
        (workdir / ".ship.conf").write_text(
            "class = git_ship.handlers.python.PythonHandler\n"
            "before_build = echo before # comment\n"
            "after_build = echo after\n"
        )
        (workdir / "CHANGELOG.md").write_text("## 1.0.0\n")
        (workdir / "demo").mkdir()
        (workdir / "demo" / "__init__.py").write_text('__version__ = "0.0.1"\n')
        assert main(["-s", "build"]) == 0
        assert runner.calls[0] == ("sh", "echo before")
        assert runner.calls[-1] == ("sh", "echo after")

    def test_any_public_handler_method(self, workdir: Path, runner) -> None:
        (workdir / ".ship.conf").write_text("class = git_ship.handlers.python.PythonHandler\n")
        (workdir / "CHANGELOG.md").write_text("## 1.0.0 (Not released)\n")
        (workdir / "demo").mkdir()
        (workdir / "demo" / "__init__.py").write_text('__version__ = "0.9"\n')
        assert main(["-s", "update-changelog"]) == 0
        assert "(Not released)" not in (workdir / "CHANGELOG.md").read_text()
        assert (workdir / "CHANGELOG.md").read_text().startswith("## 1.0.0 (")

    def test_write_error(self, workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        def refuse(path, *args, **kwargs):
            raise PermissionError(13, "Permission denied")

        (workdir / ".ship.conf").write_text("class = git_ship.handlers.python.PythonHandler\n")
        (workdir / "dist").mkdir()
        monkeypatch.setattr("shutil.rmtree", refuse)
        assert main(["clean"]) == 1
        assert capsys.readouterr().err == "!! Could not remove dist: Permission denied\n"

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "git-ship" in capsys.readouterr().out
