"""
config.py

Responsibility: Load and parse the `.ship.conf` file into a flat mapping.

The format is deliberately tiny:
- `key = value` lines; whitespace around key and value is trimmed
- `#` starts a comment, either on a whole line or after whitespace
- `\\#` is a literal hash in a value
- blank lines and lines without `=` are ignored

No key is validated here. Handlers read the keys they know about and ignore
the rest.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from git_ship.errors import ReadError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".ship.conf"
CONFIG_ENV = "GIT_SHIP_CONFIG"

_SKIP_RE = re.compile(r"\A\s*(?:#|$)")
_INLINE_COMMENT_RE = re.compile(r"\s+(?<!\\)#\s.*$")
_KEY_VALUE_RE = re.compile(r"^\s*([^=\s][^=]*?)\s*=\s*(.*?)\s*$")


def config_path() -> Path:
    return Path(os.environ.get(CONFIG_ENV) or DEFAULT_CONFIG_FILE)


def _raw_debug() -> bool:
    return os.environ.get("GIT_SHIP_DEBUG", "") == "2"


def parse_config(text: str) -> dict[str, str]:
    """
    Parse config text into a dict. The last occurrence of a key wins.
    """
    config: dict[str, str] = {}
    for raw in text.splitlines():
        if _raw_debug():
            logger.debug("%s", raw)
        if _SKIP_RE.match(raw):
            continue
        line = _INLINE_COMMENT_RE.sub("", raw)
        m = _KEY_VALUE_RE.match(line)
        if not m:
            continue
        key, value = m.group(1), m.group(2).replace("\\#", "#")
        config[key] = value
        logger.debug("%s = %s", key, value)
    return config


def load_config(path: str | Path | None = None) -> dict[str, str]:
    """
    Read and parse the config file at `path` (default: `config_path()`).
    """
    file = Path(path) if path is not None else config_path()
    try:
        text = file.read_text(encoding="utf-8")
    except OSError as e:
        raise ReadError(f"Read {file}: {e.strerror or e}") from e
    return parse_config(text)
