"""
base.py

Responsibility: The generic handler every project-type handler derives from.

A handler ties the config, the template renderer and the command runner
together and exposes the user-facing actions (`start`, `build`, `ship`, ...).
The base class knows how to start a repository and how to tag and push a
release; it deliberately has no notion of building, cleaning or measuring
coverage, so those actions abort until a subclass provides them.
"""

from __future__ import annotations

import getpass
import inspect
import logging
import os
import re
from functools import cached_property
from pathlib import Path
from typing import Any, NoReturn

from git_ship import command
from git_ship.config import load_config
from git_ship.errors import ShipError, UnknownActionError

logger = logging.getLogger(__name__)

SILENT_ENV = "GIT_SHIP_SILENT"

_BRANCH_RE = re.compile(r"^\* (.+)$", re.M)
_ORIGIN_PUSH_RE = re.compile(r"^origin\s+(\S+)\s+\(push\)", re.M)
_SCP_URL_RE = re.compile(r"^(?:[^@/]+@)?([^:/]+):(.+)$")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip() not in ("", "0")


def normalize_remote(url: str) -> str:
    """
    Turn a git remote URL into an https URL.

    `git@github.com:user/repo.git` -> `https://github.com/user/repo.git`
    """
    if "://" in url:
        scheme, rest = url.split("://", 1)
        if scheme in ("http", "https"):
            return url
        host_path = rest.split("@", 1)[-1]
        return f"https://{host_path}"
    m = _SCP_URL_RE.match(url)
    if m:
        return f"https://{m.group(1)}/{m.group(2)}"
    return url


class Handler:
    """
    Generic handler. Used directly for projects no specific handler claims.
    """

    template_dir = "base"
    default_license = "artistic_2"

    def __init__(
        self,
        *,
        silent: bool | None = None,
        config: dict[str, str] | None = None,
        next_version: str | None = None,
        project_name: str | None = None,
    ) -> None:
        # Explicit values seed the lazy attributes below.
        if silent is not None:
            self.silent = silent
        if config is not None:
            self.config = config
        if next_version is not None:
            self.next_version = next_version
        if project_name is not None:
            self.project_name = project_name

    def __repr__(self) -> str:
        return f"<{self.class_path()}>"

    # ---- attributes -------------------------------------------------------

    @cached_property
    def config(self) -> dict[str, str]:
        return load_config()

    @cached_property
    def silent(self) -> bool:
        return _env_flag(SILENT_ENV)

    @cached_property
    def next_version(self) -> str:
        return ""

    @cached_property
    def project_name(self) -> str:
        return self.config.get("project_name") or "unknown"

    @cached_property
    def repository(self) -> str:
        """
        The https URL of the "origin" push remote, or a GitHub URL guessed
        from the current user and the project name.
        """
        m = _ORIGIN_PUSH_RE.search(command.capture("git", "remote", "-v"))
        if m:
            repository = normalize_remote(m.group(1))
        else:
            slug = re.sub(r"::|\.", "-", self.project_name)
            repository = f"https://github.com/{getpass.getuser()}/{slug}".lower()
        logger.debug("repository %s", repository)
        return repository

    def reset_config(self) -> None:
        """Forget the cached config so the next access reloads the file."""
        self.__dict__.pop("config", None)

    @classmethod
    def class_path(cls) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"

    def template_vars(self) -> dict[str, Any]:
        """
        The named values templates may reference, besides the caller's args.
        """
        return {
            "class_path": self.class_path(),
            "project_name": self.project_name,
            "license": self.config.get("license") or self.default_license,
        }

    # ---- helpers ----------------------------------------------------------

    def abort(self, message: str, *args: Any) -> NoReturn:
        raise ShipError(message % args if args else message)

    @classmethod
    def can_handle_project(cls, file_hint: str | None = None) -> bool:
        """
        Return True if this handler can deal with the project in the working
        directory, or with the project file `file_hint` when given.
        """
        return not file_hint

    def detect(self, file_hint: str | None = None) -> type[Handler]:
        from git_ship.detect import detect

        # a file hint always means probing, so no config file is needed
        return detect(self.config if file_hint is None else {}, file_hint)

    def render(self, name: str, args: dict[str, Any] | None = None, **options: Any) -> Path | str | None:
        from git_ship.renderer import render_template

        return render_template(self, name, args, **options)

    def system(self, program: str, *args: str) -> Handler:
        command.run(program, *args, silent=self.silent)
        return self

    def run_hook(self, name: str) -> None:
        """
        Run the shell command stored under `name` in the config, if any.
        """
        cmd = self.config.get(name)
        if not cmd:
            return
        logger.debug("hook %s: %s", name, cmd)
        command.run_shell(cmd, silent=self.silent)

    def run_action(self, name: str, *args: str) -> Any:
        """
        Run action `name` wrapped in its `before_<name>` and `after_<name>` hooks.
        Any public method of the handler is an action.
        """
        method = None if name.startswith("_") else getattr(self, name, None)
        if not callable(method):
            raise UnknownActionError(f"Unknown action: {name}")
        try:
            inspect.signature(method).bind(*args)
        except TypeError as e:
            raise UnknownActionError(f"Bad arguments for {name}: {e}") from e
        self.run_hook(f"before_{name}")
        result = method(*args)
        self.run_hook(f"after_{name}")
        return result

    # ---- actions ----------------------------------------------------------

    def build(self) -> None:
        self.abort("build() is not available for %s", self.class_path())

    def clean(self) -> None:
        self.abort("clean() is not available for %s", self.class_path())

    def test_coverage(self) -> None:
        self.abort("test_coverage() is not available for %s", self.class_path())

    def current_branch(self) -> str | None:
        m = _BRANCH_RE.search(command.capture("git", "branch"))
        return m.group(1).strip() if m else None

    def ship(self) -> Handler:
        """
        Push the current branch, tag the next version and push the tags.
        A failure half way is not rolled back.
        """
        branch = self.current_branch()
        if not branch:
            self.abort("Cannot ship without a current branch")
        if not self.next_version:
            self.abort("Cannot ship without a version number")
        self.system("git", "push", "origin", branch)
        self.system("git", "tag", self.next_version)
        self.system("git", "push", "--tags", "origin")
        return self

    def start(self, *args: str) -> Handler:
        """
        Create the config and ignore files, and commit them when a project
        file was given.
        """
        if args and type(self) is Handler:
            handler_cls = self.detect(args[0])
            if handler_cls is not Handler:
                return handler_cls(silent=self.silent).start(*args)

        # repository lookup must not read a config file that does not exist yet
        self.config = {}
        if not Path(".git").is_dir():
            self.system("git", "init")

        homepage = re.sub(r"\.git$", "", self.repository)
        self.render(".ship.conf", {"homepage": homepage, "bugtracker": f"{homepage.rstrip('/')}/issues"})
        self.render(".gitignore")
        self.system("git", "add", ".")
        if args:
            self.system("git", "commit", "-m", "Initialized")
        self.reset_config()
        return self
