"""Smart list item insertion."""

from __future__ import annotations

from .buffer import EditorBuffer
from .config import HelperConfig
from .constants import DEFINITION_TAGS, ITEM_ANCHOR_TAGS, LIST_ANCHOR_TAGS
from .indenter import Indenter
from .models import ItemKind, Role
from .patterns import TokenPattern, open_tag_source

ITEM_ANCHORS = TokenPattern(
    [
        (Role.ITEM_START, open_tag_source(ITEM_ANCHOR_TAGS)),
        (Role.LIST_START, open_tag_source(LIST_ANCHOR_TAGS)),
    ]
)

LIST_ITEM_TEXT = "<li>"
TERM_TEXT = "<dt>"
DEFINITION_TEXT = "<dd>"


def nearest_item_kind(buffer: EditorBuffer, position: int, config: HelperConfig) -> ItemKind:
    """Decide which kind of item belongs at `position`.

    Looks backward for the closest list or item tag; ``dt``, ``dl`` and ``dd``
    mean a definition list, anything else (or nothing) a plain list.
    """
    token = buffer.search_backward(ITEM_ANCHORS, position, config.search_limit)
    if token is not None and token.name in DEFINITION_TAGS:
        return ItemKind.DEFINITION
    return ItemKind.LIST_ITEM


def insert_item(buffer: EditorBuffer, indenter: Indenter) -> ItemKind:
    """Insert a new list item at the cursor.

    Inside a definition list a ``<dt>``/``<dd>`` pair is inserted on two
    lines, otherwise a single ``<li>``. When text precedes the cursor on its
    line, the line is split first. The cursor ends up after the opening
    ``<li>`` or ``<dt>`` tag, ready for the item text.

    Args:
        buffer: Document to edit.
        indenter: Indenter used for every inserted line.

    Returns:
        ItemKind: The kind of item inserted.

    Examples:
        buffer = TextBuffer("<dl>\\n", cursor=5)
        insert_item(buffer, Indenter())  # ItemKind.DEFINITION
        buffer.text  # "<dl>\\n  <dt>\\n  <dd>"
    """
    position = buffer.current_cursor_position()
    kind = nearest_item_kind(buffer, position, indenter.config)

    line_start = buffer.line_start(position)
    if buffer.get_text(line_start, position).strip():
        indenter.newline_and_indent(buffer)

    if kind is ItemKind.LIST_ITEM:
        buffer.insert_text(buffer.current_cursor_position(), LIST_ITEM_TEXT)
        indenter.indent_current_line(buffer)
        return kind

    buffer.insert_text(buffer.current_cursor_position(), TERM_TEXT)
    indenter.indent_current_line(buffer)
    indenter.newline_and_indent(buffer)
    buffer.insert_text(buffer.current_cursor_position(), DEFINITION_TEXT)
    indenter.indent_current_line(buffer)

    # back to the end of the term line
    term_line_end = buffer.line_start(buffer.current_cursor_position()) - 1
    buffer.goto(term_line_end)
    return kind
