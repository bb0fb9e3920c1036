"""
changelog.py

Responsibility: Read the next version from a changelog and stamp its header.

Two changelog styles are understood:
- Markdown (`CHANGELOG.md`): versions appear in headings, e.g. `## 1.2.0`
- Plain (`Changes`): versions start a line, e.g. `1.2.0  Not Released`

The first version found is the one about to be released.
"""

from __future__ import annotations

import re
import time

MARKDOWN_DEFAULT_FORMAT = "## %v (%F)"
PLAIN_DEFAULT_FORMAT = "%-7v  %a %b %e %H:%M:%S %Y"

_MARKDOWN_VERSION_RE = re.compile(r"^[ \t]*#+[ \t]*(\d+\.[\d_.]*\d)", re.M)
_PLAIN_VERSION_RE = re.compile(r"^[ \t]*(\d+\.[\d_.]*\d)", re.M)
_VERSION_FIELD_RE = re.compile(r"%(-?)(\d*)v")


def is_markdown(filename: str) -> bool:
    return filename.lower().endswith(".md")


def default_format(filename: str) -> str:
    return MARKDOWN_DEFAULT_FORMAT if is_markdown(filename) else PLAIN_DEFAULT_FORMAT


def find_version(text: str, *, markdown: bool) -> str | None:
    m = (_MARKDOWN_VERSION_RE if markdown else _PLAIN_VERSION_RE).search(text)
    return m.group(1) if m else None


def format_header(fmt: str, version: str, when: time.struct_time | None = None) -> str:
    """
    Expand `%v` (or a padded `%-7v` / `%7v`) to the version, then pass the rest
    of the format to strftime.
    """

    def _version(m: re.Match[str]) -> str:
        width = int(m.group(2) or 0)
        padded = version.ljust(width) if m.group(1) else version.rjust(width)
        return padded.replace("%", "%%")

    return time.strftime(_VERSION_FIELD_RE.sub(_version, fmt), when or time.localtime())


def update_header(text: str, version: str, header: str) -> str:
    """
    Replace the first line whose version token is `version` with `header`.
    Text without such a line is returned unchanged.
    """
    pattern = re.compile(r"^[ \t]*(?:#+[ \t]*)?" + re.escape(version) + r"(?![\d_.]*\d).*$", re.M)
    return pattern.sub(lambda _m: header, text, count=1)
