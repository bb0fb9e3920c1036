"""
python.py

Responsibility: Build and ship Python projects described by `pyproject.toml`.

Files used:
- `CHANGELOG.md` (or `Changes`): source of the next version; its header is
  stamped with the release date on `build`
- the main module (`src/<pkg>/__init__.py` or `<pkg>/__init__.py`): its
  `__version__` is set to the next version on `build`
- `dist/`: artifacts built by `python -m build` and uploaded with twine
"""

from __future__ import annotations

import logging
import re
import shlex
import shutil
import sys
import tomllib
from functools import cached_property
from pathlib import Path
from typing import Any

from git_ship import changelog
from git_ship.errors import ReadError, WriteError
from git_ship.handlers.base import Handler

logger = logging.getLogger(__name__)

CHANGELOG_FILES = ("CHANGELOG.md", "Changes")
PROJECT_FILES = ("pyproject.toml", "setup.py")
CLEAN_DIRS = ("build", "dist", ".pytest_cache")
CLEAN_FILES = (".coverage",)

_VERSION_ASSIGN_RE = re.compile(r"^(__version__\s*=\s*)(['\"])[^'\"]*\2", re.M)


class PythonHandler(Handler):
    template_dir = "python"
    default_license = "MIT"

    @classmethod
    def can_handle_project(cls, file_hint: str | None = None) -> bool:
        if file_hint:
            return file_hint.endswith(".py")
        return any(Path(name).exists() for name in PROJECT_FILES)

    @cached_property
    def project_name(self) -> str:
        if self.config.get("project_name"):
            return self.config["project_name"]
        pyproject = Path("pyproject.toml")
        if pyproject.exists():
            try:
                data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.debug("could not read %s: %s", pyproject, e)
            else:
                name = data.get("project", {}).get("name")
                if name:
                    return str(name)
        return "unknown"

    @cached_property
    def main_module_path(self) -> Path:
        if self.config.get("main_module_path"):
            return Path(self.config["main_module_path"])
        candidates = sorted(Path("src").glob("*/__init__.py")) + sorted(
            p for p in Path(".").glob("*/__init__.py") if p.parent.name not in ("tests", "src")
        )
        if not candidates:
            self.abort("Could not find the main module. Set main_module_path in .ship.conf")
        return candidates[0]

    @property
    def package_name(self) -> str:
        path = self.main_module_path
        return path.parent.name if path.name == "__init__.py" else path.stem

    @cached_property
    def changelog_path(self) -> Path:
        for name in CHANGELOG_FILES:
            if Path(name).exists():
                return Path(name)
        self.abort("Could not find any of %s", ", ".join(CHANGELOG_FILES))

    @cached_property
    def next_version(self) -> str:
        path = self.changelog_path
        version = changelog.find_version(self._read(path), markdown=changelog.is_markdown(path.name))
        if not version:
            self.abort("Could not find any version in %s", path)
        logger.debug("next version %s", version)
        return version

    def template_vars(self) -> dict[str, Any]:
        # start() assigns main_module_path before any config file exists
        module = self.__dict__.get("main_module_path") or self.config.get("main_module_path", "")
        return {**super().template_vars(), "main_module_path": str(module)}

    # ---- build steps ------------------------------------------------------

    def update_changelog(self) -> None:
        path = self.changelog_path
        fmt = self.config.get("new_version_format") or changelog.default_format(path.name)
        header = changelog.format_header(fmt, self.next_version)
        text = self._read(path)
        updated = changelog.update_header(text, self.next_version, header)
        if updated != text:
            self._write(path, updated)

    def update_version_info(self) -> None:
        path = self.main_module_path
        text = self._read(path)
        version = self.next_version
        updated, count = _VERSION_ASSIGN_RE.subn(lambda m: f"{m.group(1)}{m.group(2)}{version}{m.group(2)}", text, count=1)
        if not count:
            self.abort("Could not update __version__ in %s", path)
        if updated != text:
            self._write(path, updated)

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise ReadError(f"Read {path}: {e.strerror or e}") from e

    def _write(self, path: Path, text: str) -> None:
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise WriteError(f"Could not write {path}: {e.strerror or e}") from e
        if not self.silent:
            print(f"# Updated {path}")

    def _remove(self, path: Path) -> None:
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            raise WriteError(f"Could not remove {path}: {e.strerror or e}") from e
        if not self.silent:
            print(f"# Removed {path}")

    def dist_files(self) -> list[Path]:
        version = self.next_version
        return sorted(p for p in Path("dist").glob(f"*{version}*") if p.is_file())

    # ---- actions ----------------------------------------------------------

    def build(self) -> PythonHandler:
        self.clean()
        self.update_changelog()
        self.update_version_info()
        self.render(".gitignore")
        self.render("tests/test_basic.py", {"package": self.package_name})
        options = self.config.get("build_test_options")
        if options:
            self.system(sys.executable, "-m", "pytest", *shlex.split(options))
        self.system(sys.executable, "-m", "build")
        return self

    def clean(self) -> PythonHandler:
        paths = [Path(name) for name in CLEAN_DIRS + CLEAN_FILES]
        paths += sorted(Path(".").glob("*.egg-info")) + sorted(Path("src").glob("*.egg-info"))
        paths += sorted(
            p for p in Path(".").rglob("__pycache__") if not any(part.startswith(".") or part == "venv" for part in p.parts)
        )
        for path in paths:
            if path.exists():
                self._remove(path)
        return self

    def test_coverage(self) -> PythonHandler:
        self.system(sys.executable, "-m", "pytest", f"--cov={self.package_name}", "--cov-report=term-missing")
        return self

    def ship(self) -> PythonHandler:
        files = self.dist_files()
        if not files:
            self.abort("No dist files for %s. Run 'git ship build' first", self.next_version)
        self.system("git", "add", str(self.changelog_path), str(self.main_module_path))
        self.system("git", "commit", "-m", f"Released version {self.next_version}")
        super().ship()
        self.system(sys.executable, "-m", "twine", "upload", *(str(p) for p in files))
        return self

    def start(self, *args: str) -> Handler:
        self.config = {}
        self.render("CHANGELOG.md")
        if args and args[0].endswith(".py"):
            module = Path(args[0])
            package = module.parent.name if module.name == "__init__.py" else module.stem
            self.render("main_module.py", {"package": package}, target=module)
            self.main_module_path = module
        return super().start(*args)
