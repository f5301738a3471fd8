"""Core types for tasklist scanning and edit sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from detasklister.diff_render import render_unified_diff


Decision: TypeAlias = Literal["accept", "reject", "accept_rest", "abort_rest", "quit"]
SessionMode: TypeAlias = Literal["interactive", "auto_accept"]


class UserAbort(Exception):
    """Raised when the operator quits the whole run from a prompt."""


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Absolute half-open span in the original document."""

    char_start: int
    char_end: int

    def __post_init__(self) -> None:
        if self.char_start < 0:
            raise ValueError(f"char_start must be >= 0, got {self.char_start}")
        if self.char_end < self.char_start:
            raise ValueError(
                f"char_end must be >= char_start, got {self.char_end} < {self.char_start}",
            )

    @property
    def length(self) -> int:
        return self.char_end - self.char_start


@dataclass(frozen=True, slots=True)
class TasklistBlock:
    """One fenced ``[tasklist]`` occurrence, identified by its position.

    ``outer`` runs from the start of the opening fence line through the
    closing fence line and its terminator. ``inner`` is everything between
    the two fence lines, verbatim.
    """

    outer: str
    inner: str
    span: SourceSpan
    inner_span: SourceSpan

    def __post_init__(self) -> None:
        if len(self.outer) != self.span.length:
            raise ValueError("outer text length must equal span length")
        if len(self.inner) != self.inner_span.length:
            raise ValueError("inner text length must equal inner_span length")
        if not (
            self.span.char_start <= self.inner_span.char_start
            and self.inner_span.char_end <= self.span.char_end
        ):
            raise ValueError("inner_span must lie within span")


@dataclass(frozen=True, slots=True)
class ContextWindow:
    """Lines surrounding a block in the original document, for display."""

    before: str
    block: TasklistBlock
    after: str

    def render(self, *, replaced: bool = False) -> str:
        middle = self.block.inner if replaced else self.block.outer
        return f"{self.before}{middle}{self.after}"


@dataclass(frozen=True, slots=True)
class BlockReview:
    """What the operator is shown before deciding on one block."""

    item_label: str
    index: int
    old_text: str
    new_text: str
    window: ContextWindow


@dataclass(frozen=True, slots=True)
class Resolution:
    block: TasklistBlock
    decision: Decision
    applied: bool


@dataclass(frozen=True, slots=True)
class EditOutcome:
    """Final result of one edit session over one document."""

    original: str
    new_body: str
    resolutions: tuple[Resolution, ...] = ()

    @property
    def changed(self) -> bool:
        return self.new_body != self.original

    @property
    def accepted_count(self) -> int:
        return sum(1 for r in self.resolutions if r.applied)

    @property
    def rejected_count(self) -> int:
        return sum(1 for r in self.resolutions if not r.applied)

    def summary(self, label: str = "document") -> str:
        """Human-readable change report."""
        if not self.resolutions:
            return f"No tasklist blocks found in {label}"
        if not self.changed:
            return (
                f"No changes to make for {label} "
                f"({self.rejected_count} tasklist block(s) kept)"
            )
        return (
            f"Removed {self.accepted_count} tasklist block(s) from {label}, "
            f"kept {self.rejected_count}"
        )

    def unified_diff(
        self,
        fromfile: str = "old",
        tofile: str = "new",
        *,
        color: bool = False,
    ) -> str:
        return render_unified_diff(
            self.original,
            self.new_body,
            fromfile=fromfile,
            tofile=tofile,
            color=color,
        )
