"""
Project-type handlers.

Importing this package registers every bundled handler as a subclass of
`Handler`, which is how `git_ship.detect` finds them.
"""

from __future__ import annotations

from git_ship.handlers.base import Handler
from git_ship.handlers.python import PythonHandler

__all__ = ["Handler", "PythonHandler"]
