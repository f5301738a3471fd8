"""Tests for detasklister.context_window module."""
import pytest

from detasklister.context_window import build_context_window
from detasklister.scanner import scan_tasklist_blocks


BLOCK = "```[tasklist]\n- [ ] a\n```\n"


def _lines(prefix: str, count: int) -> str:
    return "".join(f"{prefix}{i}\n" for i in range(1, count + 1))


class TestBuildContextWindow:
    def test_default_five_lines_each_side(self) -> None:
        text = _lines("b", 8) + BLOCK + _lines("a", 8)
        block = scan_tasklist_blocks(text)[0]
        window = build_context_window(text, block)
        assert window.before == "b4\nb5\nb6\nb7\nb8\n"
        assert window.after == "a1\na2\na3\na4\na5\n"
        assert window.block is block

    def test_block_at_top_of_document(self) -> None:
        text = BLOCK + _lines("a", 4)
        block = scan_tasklist_blocks(text)[0]
        window = build_context_window(text, block, lines=2)
        assert window.before == ""
        assert window.after == "a1\na2\n"

    def test_fewer_lines_before_than_requested(self) -> None:
        text = "only\n" + BLOCK + "tail\n"
        block = scan_tasklist_blocks(text)[0]
        window = build_context_window(text, block, lines=2)
        assert window.before == "only\n"
        assert window.after == "tail\n"

    def test_zero_lines_is_just_the_block(self) -> None:
        text = "x\n" + BLOCK + "y\n"
        block = scan_tasklist_blocks(text)[0]
        window = build_context_window(text, block, lines=0)
        assert window.before == ""
        assert window.after == ""
        assert window.render() == BLOCK

    def test_unterminated_last_line_counts(self) -> None:
        text = BLOCK + "a1\na2"
        block = scan_tasklist_blocks(text)[0]
        window = build_context_window(text, block, lines=5)
        assert window.after == "a1\na2"

    def test_blank_lines_count_as_lines(self) -> None:
        text = "x\n\n\n" + BLOCK
        block = scan_tasklist_blocks(text)[0]
        window = build_context_window(text, block, lines=2)
        assert window.before == "\n\n"

    def test_window_follows_position_of_duplicate(self) -> None:
        text = "first\n" + BLOCK + "middle\n" + BLOCK + "last\n"
        _, second = scan_tasklist_blocks(text)
        window = build_context_window(text, second, lines=1)
        assert window.before == "middle\n"
        assert window.after == "last\n"

    def test_render_replaced(self) -> None:
        text = "x\n" + BLOCK + "y\n"
        block = scan_tasklist_blocks(text)[0]
        window = build_context_window(text, block, lines=1)
        assert window.render() == text
        assert window.render(replaced=True) == "x\n- [ ] a\ny\n"

    def test_negative_lines_rejected(self) -> None:
        block = scan_tasklist_blocks(BLOCK)[0]
        with pytest.raises(ValueError):
            build_context_window(BLOCK, block, lines=-1)
