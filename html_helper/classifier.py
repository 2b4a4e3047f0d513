"""Backward context classification."""

from __future__ import annotations

from .buffer import EditorBuffer
from .config import HelperConfig
from .models import Context, Role
from .patterns import TokenPatterns


def classify_previous_context(
    buffer: EditorBuffer,
    position: int,
    patterns: TokenPatterns,
    config: HelperConfig,
) -> Context:
    """Find the nearest indentation anchor before `position`.

    Searches backward, at most `config.search_limit` characters, for the
    closest list-start, list-end or item-start token. Closing item tags are
    not anchors and are skipped over.

    Args:
        buffer: Document to scan; it is not modified and its cursor is not moved.
        position: Offset to search backward from.
        patterns: Compiled token patterns.
        config: Configuration supplying the search limit.

    Returns:
        Context: Role of the anchor and the indentation of the line holding
        it. When no anchor lies inside the window, ``Role.NONE`` with the
        indentation of the line holding `position`.

    Examples:
        buffer = TextBuffer("  <ul>\\n<li>")
        classify_previous_context(buffer, 7, patterns, config)  # (list-start, 2)
    """
    token = buffer.search_backward(patterns.anchors, position, config.search_limit)
    if token is None:
        return Context(Role.NONE, buffer.line_indentation_width(position))
    return Context(token.role, buffer.line_indentation_width(token.start))


def describe_context(
    buffer: EditorBuffer,
    patterns: TokenPatterns,
    config: HelperConfig,
    position: int | None = None,
) -> str:
    """Render the previous context of a line as ``(role, column)``.

    The search starts at the beginning of the line holding `position` (the
    cursor by default), which is the context the indenter would use for that
    line.
    """
    if position is None:
        position = buffer.current_cursor_position()
    context = classify_previous_context(buffer, buffer.line_start(position), patterns, config)
    return str(context)
