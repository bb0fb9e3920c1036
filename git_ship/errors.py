"""
errors.py

Responsibility: The exception types raised by git-ship.

Every error is fatal for the current run. `cli.main` is the only place that
catches `ShipError`; it prints the message prefixed with `!!` and exits with a
non-zero status.
"""

from __future__ import annotations


class ShipError(RuntimeError):
    pass


class ReadError(ShipError):
    pass


class WriteError(ShipError):
    pass


class TemplateNotFoundError(ShipError):
    pass


class EvalError(ShipError):
    pass


class DirectoryCreateError(ShipError):
    pass


class CommandFailedError(ShipError):
    def __init__(self, command: str, exit_code: int) -> None:
        super().__init__(f"'{command}' failed: {exit_code}")
        self.command = command
        self.exit_code = exit_code


class DetectionError(ShipError):
    pass


class LoadError(ShipError):
    pass


class UnknownActionError(ShipError):
    pass
