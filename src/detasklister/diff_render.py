"""Unified diff rendering with optional ANSI color."""

from __future__ import annotations

import difflib
import os
from typing import TextIO


_RESET = "\033[0m"
_BOLD = "\033[1m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_CYAN = "\033[36m"

NO_NEWLINE_MARKER = "\\ No newline at end of file\n"


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping terminators (``\\r`` stays in the line)."""
    if not text:
        return []
    lines = text.split("\n")
    out = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        out.append(lines[-1])
    return out


def color_enabled(stream: TextIO) -> bool:
    """Decide whether to colorize output written to ``stream``.

    ``NO_COLOR`` (https://no-color.org/) disables color, ``FORCE_COLOR``
    enables it, otherwise color follows whether ``stream`` is a terminal.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _colorize(line: str) -> str:
    body = line[:-1] if line.endswith("\n") else line
    if line.startswith(("---", "+++")):
        return f"{_BOLD}{body}{_RESET}\n"
    if line.startswith("@@"):
        return f"{_CYAN}{body}{_RESET}\n"
    if line.startswith("-"):
        return f"{_RED}{body}{_RESET}\n"
    if line.startswith("+"):
        return f"{_GREEN}{body}{_RESET}\n"
    return body + "\n"


def render_unified_diff(
    old: str,
    new: str,
    *,
    fromfile: str = "old",
    tofile: str = "new",
    context: int = 3,
    color: bool = False,
) -> str:
    """Render ``old`` -> ``new`` as a unified diff; empty when identical."""
    out: list[str] = []
    for line in difflib.unified_diff(
        split_lines(old),
        split_lines(new),
        fromfile=fromfile,
        tofile=tofile,
        n=context,
    ):
        if line.endswith("\n"):
            out.append(_colorize(line) if color else line)
            continue
        out.append(_colorize(line) if color else line + "\n")
        out.append(NO_NEWLINE_MARKER)
    return "".join(out)
