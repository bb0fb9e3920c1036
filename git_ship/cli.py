"""
cli.py

Responsibility: CLI entrypoint for git-ship.

High-level flow (`git-ship [action] [args...]`, default action `ship`):
1) `start`: detect the handler from the optional project file and start it
2) any other action: load `.ship.conf` -> detect handler -> run the action,
   wrapped in its `before_<action>` / `after_<action>` hooks

This module should orchestrate behavior but keep concerns isolated:
- Config parsing: `config.py`
- Handler selection: `detect.py`
- Actions: `handlers/`

Every `ShipError` ends up in `main`, which prints it prefixed with `!!` and
returns a non-zero exit code.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from git_ship import __version__
from git_ship.detect import detect
from git_ship.errors import ShipError, UnknownActionError
from git_ship.handlers.base import Handler

logger = logging.getLogger(__name__)

DEBUG_ENV = "GIT_SHIP_DEBUG"
DEFAULT_ACTION = "ship"


def normalize_action(action: str) -> str:
    return action.replace("-", "_")


def dispatch(action: str, *args: str, silent: bool | None = None) -> Handler:
    """
    Run `action` on the handler for the project in the working directory.
    """
    action = normalize_action(action)

    if action == "start":
        # No config exists yet, so the project file (if any) decides.
        handler_cls = detect({}, args[0] if args else None)
        handler = handler_cls(silent=silent, config={})
        logger.debug("start with %s", handler_cls.class_path())
        handler.run_action("start", *args)
        return handler

    if not action.isidentifier() or action.startswith("_"):
        raise UnknownActionError(f"Unknown action: {action}")

    handler = Handler(silent=silent)
    handler_cls = handler.detect()
    if handler_cls is not Handler:
        handler = handler_cls(silent=silent, config=handler.config)
    logger.debug("%s with %s", action, handler_cls.class_path())
    handler.run_action(action, *args)
    return handler


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="git-ship",
        description="Git command for building and shipping your project",
        epilog=(
            "actions: start [file], build, ship, clean, test-coverage. "
            f"Environment: GIT_SHIP_CONFIG, {DEBUG_ENV}, GIT_SHIP_SILENT."
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-s", "--silent", action="store_true", default=None, help="Less logging; hide command output")
    p.add_argument("action", nargs="?", default=DEFAULT_ACTION, help=f"Action to run (default: {DEFAULT_ACTION})")
    p.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the action")
    return p


def _configure_logging() -> bool:
    debug = os.environ.get(DEBUG_ENV, "").strip() not in ("", "0")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[%(name)s] %(message)s",
    )
    return debug


def main(argv: list[str] | None = None) -> int:
    debug = _configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        dispatch(args.action, *args.args, silent=args.silent)
    except ShipError as e:
        if debug:
            logger.exception("aborted")
        print(f"!! {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
