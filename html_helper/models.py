"""Data models for html-helper."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    """Indentation role of a markup token.

    Attributes:
        LIST_START: Opens a nestable container (``<ul>``, ``<table>``, ``{``).
        LIST_END: Closes a nestable container (``</ul>``, ``}``).
        ITEM_START: Opens a single entry (``<li>``, ``<td>``).
        ITEM_END: Closes a single entry (``</li>``, ``</td>``).
        NONE: No token found.
    """

    LIST_START = "list-start"
    LIST_END = "list-end"
    ITEM_START = "item-start"
    ITEM_END = "item-end"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


class ItemKind(Enum):
    """Kind of construct inserted by smart item insertion."""

    LIST_ITEM = "list-item"
    DEFINITION = "definition"


@dataclass(frozen=True)
class TokenMatch:
    """A token found by one of the pattern primitives.

    Attributes:
        role: Role of the pattern branch that matched.
        start: Offset of the first character of the token.
        end: Offset one past the last character of the token.
        name: Lowercase tag name, or the brace character for ``{``/``}``.
    """

    role: Role
    start: int
    end: int
    name: str = ""


@dataclass(frozen=True)
class Context:
    """Previous-line context used to compute indentation.

    Attributes:
        role: Role of the nearest anchor token, or ``Role.NONE``.
        column: Indentation width of the line holding that token.
    """

    role: Role
    column: int

    def __str__(self) -> str:
        return f"({self.role}, {self.column})"


@dataclass(frozen=True)
class IndentReport:
    """Outcome of one indent operation.

    Attributes:
        prev_role: Role of the previous context.
        cur_role: Role of the current line's leading token.
        prev_col: Column of the previous context.
        new_col: Indentation applied to the current line.
        changed: Whether the buffer text was modified.
    """

    prev_role: Role
    cur_role: Role
    prev_col: int
    new_col: int
    changed: bool = False

    def __str__(self) -> str:
        return (
            f"prev={self.prev_role} cur={self.cur_role} "
            f"prev_col={self.prev_col} new_col={self.new_col}"
        )
