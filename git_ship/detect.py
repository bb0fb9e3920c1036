"""
detect.py

Responsibility: Decide which handler class runs the actions for a project.

- A `class` key in the config wins and is loaded without any probing.
- Otherwise every known handler is asked `can_handle_project(file_hint)`,
  longest dotted name first, so a specific handler is tried before the
  generic one it derives from.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping

from git_ship.errors import DetectionError, LoadError
from git_ship.handlers.base import Handler

logger = logging.getLogger(__name__)


def _all_subclasses(cls: type[Handler]) -> list[type[Handler]]:
    found: list[type[Handler]] = []
    for sub in cls.__subclasses__():
        found.append(sub)
        found.extend(_all_subclasses(sub))
    return found


def known_handlers() -> list[type[Handler]]:
    """
    Return the base handler and all of its subclasses, longest name first.
    """
    importlib.import_module("git_ship.handlers")
    unique = {klass.class_path(): klass for klass in [Handler, *_all_subclasses(Handler)]}
    return [unique[name] for name in sorted(unique, key=lambda name: (-len(name), name))]


def load_handler(path: str) -> type[Handler]:
    """
    Import `package.module.ClassName` and check that it is a handler class.
    """
    module_name, _, class_name = path.strip().rpartition(".")
    if not module_name:
        raise LoadError(f"Could not load {path}: not a dotted class path")
    try:
        module = importlib.import_module(module_name)
        klass = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise LoadError(f"Could not load {path}: {e}") from e
    if not (isinstance(klass, type) and issubclass(klass, Handler)):
        raise LoadError(f"Could not load {path}: not a handler class")
    return klass


def detect(config: Mapping[str, str], file_hint: str | None = None) -> type[Handler]:
    if file_hint is None and config.get("class"):
        return load_handler(config["class"])

    for klass in known_handlers():
        logger.debug("%s.can_handle_project(%s)", klass.class_path(), file_hint or "auto-detect")
        if klass.can_handle_project(file_hint):
            return klass

    raise DetectionError(f"Could not figure out what kind of project this is from '{file_hint or 'auto-detect'}'")
