from __future__ import annotations

import pytest

from html_helper.buffer import EditorBuffer, TextBuffer, whitespace_columns
from html_helper.config import HelperConfig
from html_helper.exceptions import BufferRangeError
from html_helper.models import Role
from html_helper.patterns import TokenPatterns

PATTERNS = TokenPatterns.from_config(HelperConfig())


def test_text_buffer_satisfies_editor_protocol():
    buffer: EditorBuffer = TextBuffer("<ul>")
    assert buffer.current_cursor_position() == 0


def test_line_boundaries():
    buffer = TextBuffer("<ul>\n  <li>one\n</ul>")
    assert buffer.line_start(7) == 5
    assert buffer.line_end(7) == 14
    assert buffer.line_end(15) == len(buffer)
    assert buffer.line_start(5) == 5
    assert buffer.line_text(9) == "  <li>one"


def test_line_numbers_and_offsets():
    buffer = TextBuffer("a\nbb\n\nccc")
    assert buffer.line_count() == 4
    assert buffer.line_number(3) == 1
    assert buffer.line_offset(0) == 0
    assert buffer.line_offset(2) == 5
    assert buffer.line_offset(3) == 6
    with pytest.raises(BufferRangeError):
        buffer.line_offset(4)
    with pytest.raises(BufferRangeError):
        buffer.line_offset(-1)


def test_indentation_measures_tabs():
    buffer = TextBuffer(" \tx\n    y\n   ", tab_width=4)
    assert buffer.indentation_end(0) == 2
    assert buffer.line_indentation_width(0) == 4
    assert buffer.line_indentation_width(5) == 4
    assert buffer.indentation_end(len(buffer)) == len(buffer)


@pytest.mark.parametrize(
    ("whitespace", "tab_width", "expected"),
    [("", 8, 0), ("  ", 8, 2), ("\t", 8, 8), (" \t", 8, 8), ("\t ", 4, 5), ("   \t", 2, 4)],
)
def test_whitespace_columns(whitespace: str, tab_width: int, expected: int):
    assert whitespace_columns(whitespace, tab_width) == expected


def test_offsets_outside_buffer_raise():
    buffer = TextBuffer("abc")
    with pytest.raises(BufferRangeError):
        buffer.goto(4)
    with pytest.raises(BufferRangeError):
        buffer.line_start(-1)
    with pytest.raises(BufferRangeError):
        buffer.get_text(0, 10)
    with pytest.raises(BufferRangeError):
        TextBuffer("abc", cursor=7)


def test_insert_moves_cursor_at_or_after_insertion_point():
    buffer = TextBuffer("abcd", cursor=2)
    buffer.insert_text(2, "XY")
    assert buffer.text == "abXYcd"
    assert buffer.current_cursor_position() == 4
    assert buffer.modified

    buffer.insert_text(5, "Z")
    assert buffer.current_cursor_position() == 4


def test_delete_shifts_cursor():
    buffer = TextBuffer("0123456789", cursor=8)
    buffer.delete_range(2, 5)
    assert buffer.text == "0156789"
    assert buffer.current_cursor_position() == 5

    buffer.goto(3)
    buffer.delete_range(2, 5)
    assert buffer.current_cursor_position() == 2


def test_empty_edits_leave_modified_flag_alone():
    buffer = TextBuffer("abc")
    buffer.delete_range(1, 1)
    buffer.insert_text(1, "")
    assert not buffer.modified


def test_save_point_clears_modified_flag():
    buffer = TextBuffer("abc")
    buffer.insert_text(0, "x")
    buffer.set_save_point()
    assert not buffer.modified


@pytest.mark.parametrize(
    ("use_tabs", "columns", "expected"),
    [(False, 0, ""), (False, 6, "      "), (True, 6, "      "), (True, 10, "\t  "), (True, 16, "\t\t")],
)
def test_indent_string(use_tabs: bool, columns: int, expected: str):
    buffer = TextBuffer(tab_width=8, use_tabs=use_tabs)
    assert buffer.indent_string(columns) == expected


def test_line_matches_at_start_skips_indentation():
    buffer = TextBuffer("<ul>\n    </ul> trailing")
    assert buffer.line_matches_at_start(7, PATTERNS.combined) is Role.LIST_END
    assert buffer.line_matches_at_start(0, PATTERNS.combined) is Role.LIST_START


def test_line_matches_at_start_sees_next_line():
    buffer = TextBuffer("<li\nclass='x'>")
    assert buffer.line_matches_at_start(0, PATTERNS.combined) is Role.ITEM_START


def test_search_backward_delegates_to_pattern():
    buffer = TextBuffer("<table>\n<tr>\n")
    token = buffer.search_backward(PATTERNS.anchors, len(buffer), 100)
    assert token is not None
    assert token.name == "tr"
    with pytest.raises(BufferRangeError):
        buffer.search_backward(PATTERNS.anchors, len(buffer) + 1, 100)
