"""Surrounding-line windows shown next to a tasklist block under review."""

from __future__ import annotations

from detasklister.types import ContextWindow, TasklistBlock


DEFAULT_CONTEXT_LINES = 5


def _tail_lines(text: str, count: int) -> str:
    """Last ``count`` whole lines of ``text`` (which ends at a line start)."""
    if count <= 0 or not text:
        return ""
    cut = len(text)
    for _ in range(count):
        # Skip the terminator of the line we are about to include.
        prev = text.rfind("\n", 0, cut - 1)
        if prev < 0:
            return text
        cut = prev + 1
    return text[cut:]


def _head_lines(text: str, count: int) -> str:
    if count <= 0 or not text:
        return ""
    cut = 0
    for _ in range(count):
        nxt = text.find("\n", cut)
        if nxt < 0:
            return text
        cut = nxt + 1
    return text[:cut]


def build_context_window(
    text: str,
    block: TasklistBlock,
    lines: int = DEFAULT_CONTEXT_LINES,
) -> ContextWindow:
    """Collect up to ``lines`` whole lines on each side of ``block``.

    Offsets come from ``block.span`` so the window always surrounds this
    occurrence, even when identical blocks appear elsewhere in ``text``.

    Raises:
        ValueError: If ``lines`` is negative.
    """
    if lines < 0:
        raise ValueError(f"context lines must be >= 0, got {lines}")
    before = _tail_lines(text[:block.span.char_start], lines)
    after = _head_lines(text[block.span.char_end:], lines)
    return ContextWindow(before=before, block=block, after=after)
