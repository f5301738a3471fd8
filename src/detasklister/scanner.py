"""Line scanner for fenced ``[tasklist]`` blocks.

A block opens on a line holding only the fence marker ```` ```[tasklist] ````
(optionally indented or followed by spaces/tabs) and closes on the first
later line holding only a bare ```` ``` ```` fence. Both ``\\n`` and
``\\r\\n`` line endings are accepted. Blocks are reported with absolute
offsets into the scanned text so identical blocks at different positions
stay distinguishable.
"""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterator

from detasklister.types import SourceSpan, TasklistBlock


_OPEN_FENCE_RE = re.compile(r"[ \t]*```\[tasklist\][ \t]*")
_CLOSE_FENCE_RE = re.compile(r"[ \t]*```[ \t]*")


def compute_line_starts(text: str) -> list[int]:
    """Pre-compute char offsets of every line start (after each ``\\n``).

    Position 0 is always a line start. A trailing ``\\n`` does not open an
    extra (empty) line.
    """
    starts = [0]
    for i, ch in enumerate(text):
        if ch == "\n" and i + 1 < len(text):
            starts.append(i + 1)
    return starts


def _line_content(text: str, start: int, end: int) -> tuple[str, bool]:
    """Return the line between ``start`` and ``end`` without its terminator.

    The second element tells whether the line was terminated by ``\\n``.
    """
    line = text[start:end]
    terminated = line.endswith("\n")
    if terminated:
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line, terminated


def _line_bounds(line_starts: list[int], idx: int, text_len: int) -> tuple[int, int]:
    start = line_starts[idx]
    end = line_starts[idx + 1] if idx + 1 < len(line_starts) else text_len
    return start, end


def iter_tasklist_blocks(text: str, start: int = 0) -> Iterator[TasklistBlock]:
    """Yield tasklist blocks left to right, never overlapping.

    Only opening fences whose line begins at or after ``start`` are
    considered. An opening fence without a matching closing fence yields
    nothing.
    """
    if not text:
        return
    line_starts = compute_line_starts(text)
    text_len = len(text)
    idx = bisect.bisect_left(line_starts, start)
    while idx < len(line_starts):
        open_start, open_end = _line_bounds(line_starts, idx, text_len)
        content, terminated = _line_content(text, open_start, open_end)
        if not terminated or not _OPEN_FENCE_RE.fullmatch(content):
            idx += 1
            continue

        close_idx = idx + 1
        while close_idx < len(line_starts):
            close_start, close_end = _line_bounds(line_starts, close_idx, text_len)
            close_content, _ = _line_content(text, close_start, close_end)
            if _CLOSE_FENCE_RE.fullmatch(close_content):
                break
            close_idx += 1
        else:
            # Unclosed fence; nothing later can close either.
            return

        yield TasklistBlock(
            outer=text[open_start:close_end],
            inner=text[open_end:close_start],
            span=SourceSpan(char_start=open_start, char_end=close_end),
            inner_span=SourceSpan(char_start=open_end, char_end=close_start),
        )
        idx = close_idx + 1


def find_next_block(text: str, start: int = 0) -> TasklistBlock | None:
    """First block whose opening line starts at or after ``start``."""
    return next(iter_tasklist_blocks(text, start), None)


def scan_tasklist_blocks(text: str) -> list[TasklistBlock]:
    return list(iter_tasklist_blocks(text))


def strip_tasklist_fences(text: str) -> str:
    """Remove every tasklist fence pair, keeping inner content verbatim."""
    parts: list[str] = []
    cursor = 0
    for block in iter_tasklist_blocks(text):
        parts.append(text[cursor:block.span.char_start])
        parts.append(block.inner)
        cursor = block.span.char_end
    parts.append(text[cursor:])
    return "".join(parts)
