"""Edit session: decide on each tasklist block and build the edited body.

The session walks the *original* document with a scan cursor that only
moves forward, while accepted substitutions accumulate in a separate
*working* copy. Each block is addressed by its span in the original, shifted
by the net length change of the substitutions made before it, so identical
blocks at different positions are resolved independently.

State transitions are pure functions over :class:`SessionState`; the
:class:`EditSession` driver adds the decision policy (auto-accept or an
injected :class:`~detasklister.prompt.DecisionPrompt`).
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from detasklister.context_window import DEFAULT_CONTEXT_LINES, build_context_window
from detasklister.prompt import DECISION_LEGEND, DecisionPrompt, parse_decision
from detasklister.scanner import find_next_block, iter_tasklist_blocks
from detasklister.types import (
    BlockReview,
    Decision,
    EditOutcome,
    Resolution,
    SessionMode,
    TasklistBlock,
    UserAbort,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionState:
    """Snapshot of one edit session between decisions."""

    original: str
    working: str
    mode: SessionMode
    cursor: int = 0
    offset_delta: int = 0
    resolutions: tuple[Resolution, ...] = ()
    done: bool = False


def start_session(original: str, mode: SessionMode = "auto_accept") -> SessionState:
    return SessionState(original=original, working=original, mode=mode)


def next_pending_block(state: SessionState) -> TasklistBlock | None:
    """Next block in the original document that has not been resolved."""
    if state.done:
        return None
    return find_next_block(state.original, state.cursor)


def _substitute(state: SessionState, block: TasklistBlock) -> tuple[str, int]:
    start = block.span.char_start + state.offset_delta
    end = block.span.char_end + state.offset_delta
    if state.working[start:end] != block.outer:
        raise ValueError(
            f"working text does not hold the block at {block.span.char_start}"
            f"..{block.span.char_end}",
        )
    working = state.working[:start] + block.inner + state.working[end:]
    return working, state.offset_delta + len(block.inner) - len(block.outer)


def apply_decision(
    state: SessionState,
    block: TasklistBlock,
    decision: Decision,
) -> SessionState:
    """Resolve ``block`` with ``decision`` and return the next state.

    Raises:
        UserAbort: On ``quit``; pending edits in ``state`` are discarded.
        ValueError: If ``block`` lies before the scan cursor or the session
            is already done.
    """
    if state.done:
        raise ValueError("session is already done")
    if block.span.char_start < state.cursor:
        raise ValueError(
            f"block at {block.span.char_start} was already passed "
            f"(cursor at {state.cursor})",
        )

    if decision == "quit":
        raise UserAbort("Quit")

    if decision in ("accept", "accept_rest"):
        working, delta = _substitute(state, block)
        return dataclasses.replace(
            state,
            working=working,
            offset_delta=delta,
            cursor=block.span.char_end,
            mode="auto_accept" if decision == "accept_rest" else state.mode,
            resolutions=state.resolutions + (Resolution(block, decision, True),),
        )

    if decision == "reject":
        return dataclasses.replace(
            state,
            cursor=block.span.char_end,
            resolutions=state.resolutions + (Resolution(block, decision, False),),
        )

    if decision == "abort_rest":
        skipped = [block, *iter_tasklist_blocks(state.original, block.span.char_end)]
        return dataclasses.replace(
            state,
            cursor=len(state.original),
            resolutions=state.resolutions
            + tuple(Resolution(b, decision, False) for b in skipped),
            done=True,
        )

    raise ValueError(f"unknown decision: {decision!r}")


def finish_session(state: SessionState) -> EditOutcome:
    return EditOutcome(
        original=state.original,
        new_body=state.working,
        resolutions=state.resolutions,
    )


class EditSession:
    """Drive one document from SCANNING to DONE.

    In ``auto_accept`` mode every block is accepted without prompting. In
    ``interactive`` mode each block's context window is handed to
    ``prompt`` until a recognised decision comes back; help requests print
    the legend and unrecognised input simply re-prompts.
    """

    def __init__(
        self,
        original: str,
        *,
        mode: SessionMode = "auto_accept",
        prompt: DecisionPrompt | None = None,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        item_label: str = "document",
    ) -> None:
        if mode == "interactive" and prompt is None:
            raise ValueError("interactive mode requires a prompt")
        if context_lines < 0:
            raise ValueError(f"context_lines must be >= 0, got {context_lines}")
        self.original = original
        self.mode: SessionMode = mode
        self.context_lines = context_lines
        self.item_label = item_label
        self._prompt = prompt

    def run(self) -> EditOutcome:
        state = start_session(self.original, self.mode)
        index = 0
        while (block := next_pending_block(state)) is not None:
            index += 1
            if state.mode == "auto_accept":
                decision: Decision = "accept"
            else:
                decision = self._ask(block, index)
            log.debug(
                "%s: block %d at %d..%d -> %s",
                self.item_label,
                index,
                block.span.char_start,
                block.span.char_end,
                decision,
            )
            state = apply_decision(state, block, decision)
        return finish_session(state)

    def _ask(self, block: TasklistBlock, index: int) -> Decision:
        assert self._prompt is not None
        window = build_context_window(self.original, block, self.context_lines)
        review = BlockReview(
            item_label=self.item_label,
            index=index,
            old_text=window.render(),
            new_text=window.render(replaced=True),
            window=window,
        )
        while True:
            raw = self._prompt.ask(review)
            parsed = parse_decision(raw)
            if parsed == "help":
                self._prompt.show_help(DECISION_LEGEND)
                continue
            if parsed is None:
                log.debug("Unrecognised decision input %r", raw)
                continue
            return parsed


def run_edit_session(
    original: str,
    *,
    interactive: bool = False,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    prompt: DecisionPrompt | None = None,
    item_label: str = "document",
) -> EditOutcome:
    """Run one edit session over ``original`` and return its outcome."""
    session = EditSession(
        original,
        mode="interactive" if interactive else "auto_accept",
        prompt=prompt,
        context_lines=context_lines,
        item_label=item_label,
    )
    return session.run()
