"""Editor buffer interface and an in-memory implementation.

The indentation engine only talks to a document through `EditorBuffer`.
`TextBuffer` implements it over a plain string so the engine can be used
from the command line and in tests; an editor integration provides its own
implementation backed by the editor's document.
"""

from __future__ import annotations

from typing import Protocol

from .exceptions import BufferRangeError
from .models import Role, TokenMatch
from .patterns import TokenPattern


class EditorBuffer(Protocol):
    """Operations the indentation engine needs from a host editor."""

    modified: bool

    def current_cursor_position(self) -> int: ...

    def goto(self, position: int) -> None: ...

    def line_start(self, offset: int) -> int: ...

    def line_end(self, offset: int) -> int: ...

    def get_text(self, start: int, end: int) -> str: ...

    def indentation_end(self, offset: int) -> int: ...

    def line_indentation_width(self, offset: int) -> int: ...

    def search_backward(self, pattern: TokenPattern, start: int, limit: int) -> TokenMatch | None: ...

    def line_matches_at_start(self, offset: int, pattern: TokenPattern) -> Role: ...

    def delete_range(self, start: int, end: int) -> None: ...

    def insert_text(self, at: int, text: str) -> None: ...

    def indent_string(self, columns: int) -> str: ...


def whitespace_columns(whitespace: str, tab_width: int) -> int:
    """Compute the column width of a run of spaces and tabs.

    Tabs advance to the next multiple of `tab_width`.

    Examples:
        whitespace_columns("  ", 8)  # 2
        whitespace_columns(" \\t", 8)  # 8
    """
    columns = 0
    for character in whitespace:
        if character == "\t":
            columns += tab_width - (columns % tab_width)
        else:
            columns += 1
    return columns


class TextBuffer:
    """A document held in memory with a cursor and a modified flag.

    Args:
        text: Initial document text. Lines are separated by ``\\n``.
        cursor: Initial cursor offset.
        tab_width: Column width of a tab character.
        use_tabs: Whether `indent_string` uses tabs where possible.

    Attributes:
        modified: True once the text has been changed since the last save point.

    Examples:
        buffer = TextBuffer("<ul>\\n<li>one\\n", cursor=5)
        buffer.line_start(7)  # 5
    """

    def __init__(self, text: str = "", cursor: int = 0, tab_width: int = 8, use_tabs: bool = False):
        self._text = text
        self.tab_width = tab_width
        self.use_tabs = use_tabs
        self.modified = False
        self._cursor = 0
        self.goto(cursor)

    def __repr__(self) -> str:
        return f"TextBuffer(length={len(self._text)}, cursor={self._cursor}, modified={self.modified})"

    def __len__(self) -> int:
        return len(self._text)

    @property
    def text(self) -> str:
        return self._text

    def _check(self, offset: int) -> None:
        if offset < 0 or offset > len(self._text):
            raise BufferRangeError(offset, len(self._text))

    # Cursor

    def current_cursor_position(self) -> int:
        return self._cursor

    def goto(self, position: int) -> None:
        self._check(position)
        self._cursor = position

    def set_save_point(self) -> None:
        """Mark the current text as saved."""
        self.modified = False

    # Lines

    def line_start(self, offset: int) -> int:
        self._check(offset)
        return self._text.rfind("\n", 0, offset) + 1

    def line_end(self, offset: int) -> int:
        self._check(offset)
        end = self._text.find("\n", offset)
        return len(self._text) if end < 0 else end

    def line_count(self) -> int:
        return self._text.count("\n") + 1

    def line_number(self, offset: int) -> int:
        """Zero-based number of the line holding `offset`."""
        self._check(offset)
        return self._text.count("\n", 0, offset)

    def line_offset(self, line_number: int) -> int:
        """Offset of the first character of a zero-based line.

        Raises:
            BufferRangeError: If the line does not exist.
        """
        if line_number < 0:
            raise BufferRangeError(line_number, len(self._text))
        offset = 0
        for _ in range(line_number):
            newline = self._text.find("\n", offset)
            if newline < 0:
                raise BufferRangeError(line_number, len(self._text))
            offset = newline + 1
        return offset

    def get_text(self, start: int, end: int) -> str:
        self._check(start)
        self._check(end)
        return self._text[start:end]

    def line_text(self, offset: int) -> str:
        return self._text[self.line_start(offset) : self.line_end(offset)]

    def indentation_end(self, offset: int) -> int:
        """Offset of the first non-whitespace character of the line.

        For a blank line this is the end of the line.
        """
        position = self.line_start(offset)
        end = self.line_end(offset)
        while position < end and self._text[position] in " \t":
            position += 1
        return position

    def line_indentation_width(self, offset: int) -> int:
        start = self.line_start(offset)
        return whitespace_columns(self._text[start : self.indentation_end(offset)], self.tab_width)

    def column(self, offset: int) -> int:
        """Display column of `offset`, counting tabs to the next tab stop."""
        start = self.line_start(offset)
        return whitespace_columns(self._text[start:offset], self.tab_width)

    # Searching

    def search_backward(self, pattern: TokenPattern, start: int, limit: int) -> TokenMatch | None:
        self._check(start)
        return pattern.search_backward(self._text, start, limit)

    def line_matches_at_start(self, offset: int, pattern: TokenPattern) -> Role:
        token = pattern.match(self._text, self.indentation_end(offset))
        return token.role if token is not None else Role.NONE

    # Mutation

    def delete_range(self, start: int, end: int) -> None:
        self._check(start)
        self._check(end)
        if end <= start:
            return
        self._text = self._text[:start] + self._text[end:]
        if self._cursor >= end:
            self._cursor -= end - start
        elif self._cursor > start:
            self._cursor = start
        self.modified = True

    def insert_text(self, at: int, text: str) -> None:
        """Insert `text` at `at`; a cursor at or after `at` moves past it."""
        self._check(at)
        if not text:
            return
        self._text = self._text[:at] + text + self._text[at:]
        if self._cursor >= at:
            self._cursor += len(text)
        self.modified = True

    def indent_string(self, columns: int) -> str:
        if self.use_tabs:
            tabs, spaces = divmod(columns, self.tab_width)
            return "\t" * tabs + " " * spaces
        return " " * columns
