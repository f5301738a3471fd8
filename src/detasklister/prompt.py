"""Operator prompts for interactive tasklist review."""

from __future__ import annotations

import re
import sys
from typing import Literal, Protocol, TextIO, TypeAlias

from detasklister.diff_render import color_enabled, render_unified_diff
from detasklister.types import BlockReview, Decision


HelpRequest: TypeAlias = Literal["help"]

DECISION_TOKENS: dict[str, Decision] = {
    "y": "accept",
    "n": "reject",
    "a": "accept_rest",
    "d": "abort_rest",
    "q": "quit",
}

DECISION_LEGEND = (
    "y - remove this tasklist block\n"
    "n - keep this tasklist block\n"
    "a - remove this and all remaining tasklist blocks in this issue\n"
    "d - keep this and all remaining tasklist blocks in this issue\n"
    "q - quit; do not update this or any later issue\n"
    "? - print help\n"
)

PROMPT_TEXT = "Remove this tasklist block [y/n/a/d/q/?]? "

_TOKEN_RE = re.compile(r" *([ynadq?h]) *", re.IGNORECASE)


def parse_decision(raw: str) -> Decision | HelpRequest | None:
    """Map one line of operator input to a decision.

    Returns ``"help"`` for ``?``/``h`` and ``None`` for anything else that
    is not a recognised single-character choice.
    """
    match = _TOKEN_RE.fullmatch(raw.rstrip("\r\n"))
    if match is None:
        return None
    token = match.group(1).lower()
    if token in ("?", "h"):
        return "help"
    return DECISION_TOKENS[token]


class DecisionPrompt(Protocol):
    """Source of raw decision input for an interactive session."""

    def ask(self, review: BlockReview) -> str: ...

    def show_help(self, legend: str) -> None: ...


class TerminalPrompt:
    """Show a block's context diff on a terminal and read one line."""

    def __init__(
        self,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        color: bool | None = None,
    ) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._color = color_enabled(self._stdout) if color is None else color
        self._shown: tuple[str, int] | None = None

    def ask(self, review: BlockReview) -> str:
        # Re-prompts for the same block do not repeat the diff.
        key = (review.item_label, review.index)
        if self._shown != key:
            self._shown = key
            diff = render_unified_diff(
                review.old_text,
                review.new_text,
                fromfile=f"{review.item_label} (current)",
                tofile=f"{review.item_label} (block {review.index} removed)",
                context=max(review.old_text.count("\n"), 3),
                color=self._color,
            )
            self._stdout.write(diff)
        self._stdout.write("\n" + PROMPT_TEXT)
        self._stdout.flush()
        line = self._stdin.readline()
        if not line:
            # EOF reads as quit.
            self._stdout.write("\n")
            return "q"
        return line

    def show_help(self, legend: str) -> None:
        self._stdout.write(legend)
        self._stdout.flush()
