"""
git_ship package

git-ship is a git command for building and shipping a project without
inventing new conventions: it works on the changelog, build descriptor and
ignore files the project already has.

Key responsibilities are split across modules:
- `config.py`: parse the flat `.ship.conf` key/value file
- `renderer.py`: render bundled templates into the working tree
- `command.py`: run external programs with logging and silent mode
- `detect.py`: pick the handler class for the current project
- `handlers/`: the base handler and the per-ecosystem handlers
- `cli.py`: CLI entrypoint and action dispatch
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
