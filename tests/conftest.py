from __future__ import annotations

from pathlib import Path

import pytest

from git_ship import command
from git_ship.errors import CommandFailedError


class FakeRunner:
    """Records commands instead of running them."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.outputs: dict[tuple[str, ...], str] = {}
        self.fail_on: tuple[str, ...] | None = None

    def run(self, program: str, *args: str, silent: bool = False) -> None:
        cmd = (program, *args)
        self.calls.append(cmd)
        if self.fail_on is not None and cmd[: len(self.fail_on)] == self.fail_on:
            raise CommandFailedError(" ".join(cmd), 1)

    def run_shell(self, cmd: str, *, silent: bool = False) -> None:
        self.calls.append(("sh", cmd))

    def capture(self, program: str, *args: str) -> str:
        return self.outputs.get((program, *args), "")


@pytest.fixture(autouse=True)
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in ("GIT_SHIP_CONFIG", "GIT_SHIP_DEBUG", "GIT_SHIP_SILENT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("getpass.getuser", lambda: "tester")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(command, "run", fake.run)
    monkeypatch.setattr(command, "run_shell", fake.run_shell)
    monkeypatch.setattr(command, "capture", fake.capture)
    return fake
