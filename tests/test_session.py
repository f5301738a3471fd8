"""Tests for detasklister.session: decision state machine and driver."""
from __future__ import annotations

from typing import Any

import pytest

from detasklister.prompt import DECISION_LEGEND
from detasklister.scanner import scan_tasklist_blocks
from detasklister.session import (
    EditSession,
    apply_decision,
    finish_session,
    next_pending_block,
    run_edit_session,
    start_session,
)
from detasklister.types import BlockReview, EditOutcome, UserAbort


BLOCK = "```[tasklist]\n- [ ] a\n- [ ] b\n```\n"


def _block(inner: str) -> str:
    return f"```[tasklist]\n{inner}```\n"


class ScriptedPrompt:
    """Replays canned answers and records what was asked."""

    def __init__(self, answers: list[str]) -> None:
        self.answers = list(answers)
        self.reviews: list[BlockReview] = []
        self.help_shown: list[str] = []

    def ask(self, review: BlockReview) -> str:
        self.reviews.append(review)
        return self.answers.pop(0)

    def show_help(self, legend: str) -> None:
        self.help_shown.append(legend)


def _interactive(
    text: str, answers: list[str], **kwargs: Any,
) -> tuple[EditOutcome, ScriptedPrompt]:
    prompt = ScriptedPrompt(answers)
    outcome = run_edit_session(text, interactive=True, prompt=prompt, **kwargs)
    return outcome, prompt


class TestAutoAccept:
    def test_no_blocks_unchanged(self) -> None:
        text = "Nothing to see\n```python\nprint(1)\n```\n"
        outcome = run_edit_session(text)
        assert outcome.changed is False
        assert outcome.new_body == text
        assert outcome.resolutions == ()

    def test_empty_document(self) -> None:
        outcome = run_edit_session("")
        assert outcome.changed is False
        assert outcome.new_body == ""

    def test_example(self) -> None:
        outcome = run_edit_session(BLOCK)
        assert outcome.changed is True
        assert outcome.new_body == "- [ ] a\n- [ ] b\n"

    def test_inner_preserved_verbatim(self) -> None:
        inner = "- [ ] a\n\n  - [x] nested\t\n\n- [ ] b\n"
        text = "Intro\n" + _block(inner) + "Outro\n"
        outcome = run_edit_session(text)
        assert outcome.new_body == "Intro\n" + inner + "Outro\n"

    def test_idempotent(self) -> None:
        text = "a\n" + BLOCK + "b\n" + _block("- [ ] c\n")
        first = run_edit_session(text)
        second = run_edit_session(first.new_body)
        assert first.changed is True
        assert second.changed is False
        assert second.new_body == first.new_body

    def test_all_blocks_removed(self) -> None:
        text = _block("1\n") + "mid\n" + _block("2\n") + _block("3\n")
        outcome = run_edit_session(text)
        assert outcome.new_body == "1\nmid\n2\n3\n"
        assert outcome.accepted_count == 3
        assert outcome.rejected_count == 0

    def test_never_prompts(self) -> None:
        prompt = ScriptedPrompt([])
        outcome = run_edit_session(BLOCK, interactive=False, prompt=prompt)
        assert outcome.changed is True
        assert prompt.reviews == []


class TestInteractive:
    def test_accept(self) -> None:
        outcome, prompt = _interactive(BLOCK, ["y\n"])
        assert outcome.new_body == "- [ ] a\n- [ ] b\n"
        assert len(prompt.reviews) == 1

    def test_reject(self) -> None:
        outcome, _ = _interactive(BLOCK, ["n\n"])
        assert outcome.changed is False
        assert outcome.new_body == BLOCK

    def test_reject_first_accept_second_duplicate(self) -> None:
        text = "top\n" + BLOCK + "between\n" + BLOCK + "bottom\n"
        outcome, _ = _interactive(text, ["n", "y"])
        assert outcome.new_body == "top\n" + BLOCK + "between\n- [ ] a\n- [ ] b\nbottom\n"

    def test_accept_first_reject_second_duplicate(self) -> None:
        text = BLOCK + BLOCK
        outcome, _ = _interactive(text, ["y", "n"])
        assert outcome.new_body == "- [ ] a\n- [ ] b\n" + BLOCK

    def test_accept_rest_stops_prompting(self) -> None:
        text = _block("1\n") + _block("2\n") + _block("3\n")
        outcome, prompt = _interactive(text, ["n", "a"])
        assert outcome.new_body == _block("1\n") + "2\n3\n"
        assert len(prompt.reviews) == 2

    def test_abort_rest_keeps_remaining(self) -> None:
        text = _block("1\n") + _block("2\n") + _block("3\n") + _block("4\n")
        outcome, prompt = _interactive(text, ["y", "n", "d"])
        assert outcome.new_body == "1\n" + _block("2\n") + _block("3\n") + _block("4\n")
        assert len(prompt.reviews) == 3
        decisions = [r.decision for r in outcome.resolutions]
        assert decisions == ["accept", "reject", "abort_rest", "abort_rest"]
        assert outcome.rejected_count == 3

    def test_abort_rest_on_first_block_is_unchanged(self) -> None:
        outcome, _ = _interactive(BLOCK + BLOCK, ["d"])
        assert outcome.changed is False

    def test_quit_raises(self) -> None:
        prompt = ScriptedPrompt(["y", "q"])
        with pytest.raises(UserAbort):
            run_edit_session(BLOCK + BLOCK, interactive=True, prompt=prompt)

    def test_unrecognised_input_reprompts(self) -> None:
        outcome, prompt = _interactive(BLOCK, ["", "yes", "x", " Y \n"])
        assert outcome.changed is True
        assert len(prompt.reviews) == 4
        assert prompt.help_shown == []

    def test_help_prints_legend_and_reprompts(self) -> None:
        outcome, prompt = _interactive(BLOCK + BLOCK, ["?", "y", "h", "n"])
        assert prompt.help_shown == [DECISION_LEGEND, DECISION_LEGEND]
        assert outcome.new_body == "- [ ] a\n- [ ] b\n" + BLOCK

    def test_review_shows_context_window(self) -> None:
        text = "l1\nl2\nl3\n" + BLOCK + "t1\nt2\nt3\n"
        _, prompt = _interactive(text, ["y"], context_lines=2, item_label="#7")
        review = prompt.reviews[0]
        assert review.item_label == "#7"
        assert review.index == 1
        assert review.old_text == "l2\nl3\n" + BLOCK + "t1\nt2\n"
        assert review.new_text == "l2\nl3\n- [ ] a\n- [ ] b\nt1\nt2\n"

    def test_review_index_counts_blocks(self) -> None:
        _, prompt = _interactive(BLOCK + BLOCK, ["n", "n"])
        assert [r.index for r in prompt.reviews] == [1, 2]

    def test_interactive_requires_prompt(self) -> None:
        with pytest.raises(ValueError):
            EditSession(BLOCK, mode="interactive")

    def test_negative_context_rejected(self) -> None:
        with pytest.raises(ValueError):
            EditSession(BLOCK, context_lines=-1)


class TestStateTransitions:
    def test_start_state(self) -> None:
        state = start_session("doc\n")
        assert state.working == state.original == "doc\n"
        assert state.mode == "auto_accept"
        assert state.cursor == 0
        assert state.done is False

    def test_accept_shifts_following_offsets(self) -> None:
        text = _block("long inner line\n") + "x\n" + _block("2\n")
        state = start_session(text, "interactive")
        first = next_pending_block(state)
        assert first is not None
        state = apply_decision(state, first, "accept")
        assert state.offset_delta == len("long inner line\n") - len(first.outer)
        second = next_pending_block(state)
        assert second is not None
        state = apply_decision(state, second, "accept")
        assert state.working == "long inner line\nx\n2\n"
        assert next_pending_block(state) is None

    def test_accept_rest_switches_mode(self) -> None:
        state = start_session(BLOCK + BLOCK, "interactive")
        block = next_pending_block(state)
        assert block is not None
        state = apply_decision(state, block, "accept_rest")
        assert state.mode == "auto_accept"

    def test_reject_advances_cursor_only(self) -> None:
        state = start_session(BLOCK, "interactive")
        block = next_pending_block(state)
        assert block is not None
        state = apply_decision(state, block, "reject")
        assert state.cursor == block.span.char_end
        assert state.working == BLOCK
        assert next_pending_block(state) is None

    def test_abort_rest_marks_done(self) -> None:
        state = start_session(BLOCK + BLOCK, "interactive")
        block = next_pending_block(state)
        assert block is not None
        state = apply_decision(state, block, "abort_rest")
        assert state.done is True
        assert next_pending_block(state) is None
        assert len(state.resolutions) == 2

    def test_passed_block_cannot_be_decided_again(self) -> None:
        state = start_session(BLOCK, "interactive")
        block = scan_tasklist_blocks(BLOCK)[0]
        state = apply_decision(state, block, "reject")
        with pytest.raises(ValueError):
            apply_decision(state, block, "accept")

    def test_quit_discards_state(self) -> None:
        state = start_session(BLOCK, "interactive")
        block = scan_tasklist_blocks(BLOCK)[0]
        with pytest.raises(UserAbort):
            apply_decision(state, block, "quit")

    def test_finish_session(self) -> None:
        state = start_session(BLOCK)
        block = scan_tasklist_blocks(BLOCK)[0]
        outcome = finish_session(apply_decision(state, block, "accept"))
        assert outcome.original == BLOCK
        assert outcome.new_body == "- [ ] a\n- [ ] b\n"
        assert outcome.changed is True


class TestEditOutcome:
    def test_summary_no_blocks(self) -> None:
        assert run_edit_session("x\n").summary("#1") == "No tasklist blocks found in #1"

    def test_summary_changed(self) -> None:
        outcome, _ = _interactive(BLOCK + BLOCK, ["y", "n"])
        assert outcome.summary("#1") == "Removed 1 tasklist block(s) from #1, kept 1"

    def test_summary_all_kept(self) -> None:
        outcome, _ = _interactive(BLOCK, ["n"])
        assert outcome.summary("#1") == "No changes to make for #1 (1 tasklist block(s) kept)"

    def test_unified_diff(self) -> None:
        diff = run_edit_session("x\n" + BLOCK).unified_diff("a", "b")
        assert diff.startswith("--- a\n+++ b\n")
        assert "-```[tasklist]\n" in diff
        assert "-```\n" in diff
        assert " - [ ] a\n" in diff
