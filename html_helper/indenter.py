"""Context-sensitive indentation of HTML and CSS-like markup."""

from __future__ import annotations

import re
from collections.abc import Callable

import click

from .buffer import EditorBuffer, TextBuffer
from .classifier import classify_previous_context
from .config import HelperConfig, normalize_config, validate_config
from .models import Context, IndentReport, Role
from .patterns import TokenPatterns


def _echo_report(report: IndentReport) -> None:
    click.echo(str(report), err=True)


# Whitespace and one more character: enough to finish any token started before it
_TOKEN_TAIL = re.compile(r"\s*\S?")


def _is_blank(line: str) -> bool:
    return line in ("", "\r")


class Indenter:
    """Indent lines from the nearest tag context above them.

    An indenter holds its configuration and compiled patterns and nothing
    else, so one instance can serve any number of buffers.

    Args:
        config: Indentation settings; defaults to a new `HelperConfig`.
        report: Callback receiving an `IndentReport` for every indent
            operation when `config.verbose` is set. Defaults to writing the
            report to stderr.

    Raises:
        ConfigError: If the configuration fails validation.

    Examples:
        buffer = TextBuffer("<ul>\\n<li>one\\n</ul>\\n")
        Indenter().indent_region(buffer, 0, 2)
        buffer.text  # "<ul>\\n  <li>one\\n</ul>\\n"
    """

    def __init__(
        self,
        config: HelperConfig | None = None,
        report: Callable[[IndentReport], None] | None = None,
    ):
        config = normalize_config(config or HelperConfig())
        validate_config(config)
        self.config = config
        self.patterns = TokenPatterns.from_config(config)
        self.report = report or _echo_report

    def compute_indent(self, previous: Context, current: Role) -> int:
        """Apply the indentation rules to a classified line.

        Args:
            previous: Context found above the line.
            current: Role of the line's own leading token.

        Returns:
            int: Target indentation column, never negative.
        """
        base = self.config.base_indent
        item = self.config.item_continue_indent

        if previous.role is Role.NONE:
            return previous.column

        target = previous.column
        if previous.role is Role.LIST_START:
            target += base

        # First matching rule wins
        if current in (Role.ITEM_START, Role.ITEM_END) and previous.role is Role.LIST_END:
            # a close tag sits at its items' depth; step back to the item level
            target -= item
        elif current is Role.LIST_END and previous.role is Role.LIST_END:
            target -= item + base
        elif current is Role.LIST_END:
            target -= base
        elif current is Role.LIST_START and previous.role is Role.ITEM_START:
            target += item
        elif current is Role.NONE and previous.role is Role.ITEM_START:
            target += item

        return max(target, 0)

    def find_indent(self, buffer: EditorBuffer, offset: int) -> IndentReport:
        """Compute the indentation of the line holding `offset` without editing it."""
        line_start = buffer.line_start(offset)
        previous = classify_previous_context(buffer, line_start, self.patterns, self.config)
        current = buffer.line_matches_at_start(offset, self.patterns.combined)
        return IndentReport(
            prev_role=previous.role,
            cur_role=current,
            prev_col=previous.column,
            new_col=self.compute_indent(previous, current),
        )

    def indent_current_line(self, buffer: EditorBuffer) -> IndentReport | None:
        """Reindent the line holding the cursor.

        The line's leading whitespace is replaced by the computed indentation
        and the cursor keeps its position relative to the line's content; a
        cursor inside the old indentation moves to the first non-whitespace
        character. When the indentation is already correct the text is left
        alone, so the buffer's modified flag does not change.

        Args:
            buffer: Document to edit.

        Returns:
            IndentReport | None: What was computed and applied, or None when
            indentation is disabled.
        """
        return self._indent_at(buffer, buffer.current_cursor_position())

    def indent_line(self, buffer: TextBuffer, line_number: int) -> IndentReport | None:
        """Reindent a zero-based line; the cursor follows the text it was on."""
        return self._indent_at(buffer, buffer.line_offset(line_number))

    def indent_region(self, buffer: TextBuffer, first_line: int, last_line: int) -> int:
        """Reindent lines `first_line` through `last_line` inclusive, top down.

        Empty lines are skipped. Each line is classified against the lines
        above it as already reindented.

        Returns:
            int: Number of lines whose text changed.
        """
        if self.config.indent_disabled:
            return 0
        changed = 0
        offset = buffer.line_offset(max(first_line, 0))
        for _ in range(max(first_line, 0), last_line + 1):
            if not _is_blank(buffer.get_text(offset, buffer.line_end(offset))):
                report = self._indent_at(buffer, offset)
                if report is not None and report.changed:
                    changed += 1
            end = buffer.line_end(offset)
            if end >= len(buffer):
                break
            offset = end + 1
        return changed

    def reindent_text(self, text: str) -> str:
        """Return `text` with every line reindented.

        Produces the same result as `indent_region` over a buffer holding the
        whole text, but each line is indented in a buffer holding only the
        lines the backward search can reach, so the cost does not grow with
        the size of the document.

        Examples:
            Indenter().reindent_text("<ul>\\n<li>one\\n</ul>\\n")
            # "<ul>\\n  <li>one\\n</ul>\\n"
        """
        if self.config.indent_disabled:
            return text

        lines = text.split("\n")
        context = ""
        end = -1
        for index, line in enumerate(lines):
            end += len(line) + 1
            if not _is_blank(line):
                # a token at the end of the line may run on past it
                tail = text[end : _TOKEN_TAIL.match(text, end).end()] if line.strip() else ""
                buffer = TextBuffer(
                    context + line + tail,
                    cursor=len(context),
                    tab_width=self.config.tab_width,
                    use_tabs=self.config.use_tabs,
                )
                self._indent_at(buffer, len(context))
                line = lines[index] = buffer.text[len(context) : len(buffer) - len(tail)]
            context = self._trim_context(context + line + "\n")
        return "\n".join(lines)

    def _trim_context(self, text: str) -> str:
        # keep whole lines covering at least search_limit characters
        excess = len(text) - self.config.search_limit
        if excess <= 0:
            return text
        return text[text.rfind("\n", 0, excess) + 1 :]

    def newline_and_indent(self, buffer: EditorBuffer) -> IndentReport | None:
        """Split the line at the cursor and indent both halves.

        Whitespace before the cursor is dropped so the first half does not
        keep trailing blanks. The first half is reindented unless it is now
        empty, then the new line holding the cursor.
        """
        position = buffer.current_cursor_position()
        line_start = buffer.line_start(position)
        blank_start = position
        while blank_start > line_start and buffer.get_text(blank_start - 1, blank_start) in " \t":
            blank_start -= 1
        buffer.delete_range(blank_start, position)
        buffer.insert_text(blank_start, "\n")
        buffer.goto(blank_start + 1)

        if self.config.indent_disabled:
            return None
        if blank_start > line_start:
            self._indent_at(buffer, line_start)
        return self.indent_current_line(buffer)

    def _indent_at(self, buffer: EditorBuffer, offset: int) -> IndentReport | None:
        if self.config.indent_disabled:
            return None

        cursor = buffer.current_cursor_position()
        line_start = buffer.line_start(offset)
        indent_end = buffer.indentation_end(offset)
        cursor_on_line = line_start <= cursor <= buffer.line_end(offset)
        content_offset = cursor - indent_end

        report = self.find_indent(buffer, offset)
        indent = buffer.indent_string(report.new_col)
        changed = buffer.get_text(line_start, indent_end) != indent
        if changed:
            buffer.delete_range(line_start, indent_end)
            buffer.insert_text(line_start, indent)

        if cursor_on_line:
            # the cursor can't land inside the new indentation
            new_indent_end = line_start + len(indent)
            buffer.goto(new_indent_end + max(content_offset, 0))

        report = IndentReport(
            prev_role=report.prev_role,
            cur_role=report.cur_role,
            prev_col=report.prev_col,
            new_col=report.new_col,
            changed=changed,
        )
        if self.config.verbose:
            self.report(report)
        return report
