"""
renderer.py

Responsibility: Render a handler's bundled templates into the working tree.

Rules:
- A template name doubles as the target path, with `/` as separator.
- An existing target is never overwritten unless `force` is given.
- Templates are looked up along the handler's class ancestry: every handler
  class that declares `template_dir` contributes one directory, searched in
  MRO order, so a subclass can override any template of its parents.
- Expressions are `<%= name %>` markers, evaluated by a sandboxed Jinja2
  environment against an explicit context: `handler.template_vars()` plus
  the caller's args. Mappings and sequences are written as key-sorted YAML.

This module intentionally does NOT know about git or CLI parsing.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from jinja2 import FileSystemLoader, StrictUndefined, TemplateNotFound, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment

from git_ship.errors import DirectoryCreateError, EvalError, TemplateNotFoundError, WriteError

if TYPE_CHECKING:
    from git_ship.handlers.base import Handler

logger = logging.getLogger(__name__)

TEMPLATES_ROOT = Path(__file__).resolve().parent / "templates"


def _finalize(value: Any) -> Any:
    # Structured values become a deterministic YAML dump; scalars pass through.
    if isinstance(value, (dict, list, tuple)):
        return yaml.safe_dump(
            value if not isinstance(value, tuple) else list(value),
            sort_keys=True,
            default_flow_style=False,
        ).rstrip("\n")
    return value


def template_search_path(handler_cls: type) -> list[Path]:
    """
    Return the template directories for `handler_cls`, most specific first.
    """
    dirs: list[Path] = []
    for klass in handler_cls.__mro__:
        name = klass.__dict__.get("template_dir")
        if name:
            path = TEMPLATES_ROOT / name
            if path not in dirs:
                dirs.append(path)
    return dirs


@functools.lru_cache(maxsize=None)
def template_environment(handler_cls: type) -> SandboxedEnvironment:
    """
    Build (once per handler class) the Jinja2 environment for its templates.
    """
    search_path = template_search_path(handler_cls)
    logger.debug("template search path for %s: %s", handler_cls.__qualname__, search_path)
    return SandboxedEnvironment(
        loader=FileSystemLoader([str(p) for p in search_path]),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        variable_start_string="<%=",
        variable_end_string="%>",
        finalize=_finalize,
    )


def render_template(
    handler: Handler,
    name: str,
    args: dict[str, Any] | None = None,
    *,
    force: bool = False,
    to_string: bool = False,
    target: str | Path | None = None,
) -> Path | str | None:
    """
    Render template `name` for `handler`.

    Returns the rendered text when `to_string` is set, the written path after
    writing, or None when the target already exists and `force` is not set.
    `to_string` renders even when the target exists, since nothing is written.
    """
    args = dict(args or {})
    file = Path(target) if target is not None else Path(*name.split("/"))

    if not to_string and file.exists() and not force:
        if not handler.silent:
            print(f"# {file} exists")
        return None

    env = template_environment(type(handler))
    try:
        template = env.get_template(name)
    except TemplateNotFound as e:
        raise TemplateNotFoundError(f"Could not find template for {name}") from e
    except TemplateSyntaxError as e:
        raise EvalError(f"Could not parse {name} line {e.lineno}: {e.message or e}") from e

    context = {**handler.template_vars(), **args, "args": args}
    try:
        text = template.render(**context)
    except Exception as e:  # noqa: BLE001 - surface as EvalError
        raise EvalError(f"Could not render {name}: {e}") from e

    if to_string:
        return text

    parent = file.parent
    if not parent.is_dir():
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(f"Could not make directory for {file}: {e.strerror or e}") from e

    try:
        file.write_text(text, encoding="utf-8", newline="\n")
    except OSError as e:
        raise WriteError(f"Could not write {name} to {file}: {e.strerror or e}") from e

    if not handler.silent:
        print(f"# Generated {file}")
    return file
