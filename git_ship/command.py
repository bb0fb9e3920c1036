"""
command.py

Responsibility: Run external programs for the handlers.

- Every command is synchronous; there is no retry and no timeout.
- Outside silent mode the command line is echoed as `$ program args`.
- In silent mode the child's stdout/stderr go to the null device. The parent's
  own streams are never swapped, so they are intact after every call.
- A non-zero exit raises `CommandFailedError`.
"""

from __future__ import annotations

import logging
import subprocess

from git_ship.errors import CommandFailedError

logger = logging.getLogger(__name__)

# Exit status reported when the program itself cannot be started.
NOT_FOUND_EXIT = 127


def _log_line(command: str) -> str:
    return command.replace("\r\n", "\\n").replace("\n", "\\n")


def _call(cmd: list[str] | str, *, display: str, silent: bool, shell: bool) -> None:
    if not silent:
        print(f"$ {_log_line(display)}", flush=True)
    logger.debug("run %s (silent=%s)", display, silent)

    sink = subprocess.DEVNULL if silent else None
    try:
        completed = subprocess.run(cmd, shell=shell, stdout=sink, stderr=sink, check=False)
    except OSError as e:
        logger.debug("could not start %s: %s", display, e)
        raise CommandFailedError(display, NOT_FOUND_EXIT) from e

    if completed.returncode != 0:
        raise CommandFailedError(display, completed.returncode)


def run(program: str, *args: str, silent: bool = False) -> None:
    """
    Run `program` with `args`, raising CommandFailedError on a non-zero exit.
    """
    cmd = [program, *args]
    _call(cmd, display=" ".join(cmd), silent=silent, shell=False)


def run_shell(command: str, *, silent: bool = False) -> None:
    """
    Run a command string through the shell. Used for config hooks.
    """
    _call(command, display=command, silent=silent, shell=True)


def capture(program: str, *args: str) -> str:
    """
    Return the stdout of a command, or "" if it fails or cannot be started.
    """
    try:
        completed = subprocess.run(
            [program, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug("could not start %s: %s", program, e)
        return ""
    if completed.returncode != 0:
        logger.debug("%s exited with %s", program, completed.returncode)
        return ""
    return completed.stdout
