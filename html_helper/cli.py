"""
Command line interface for html-helper.

Reindents HTML documents in place, reports the indentation context of a
line, creates new documents from the skeleton template, and refreshes their
"last modified" timestamps.
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from . import __version__
from .buffer import TextBuffer
from .classifier import classify_previous_context
from .config import ConfigError, HelperConfig, build_config
from .exceptions import BufferRangeError, TimestampError
from .filesystem import (
    create_document,
    get_max_file_size,
    normalize_filepath,
    normalize_new_filepath,
    read_document,
    write_document,
)
from .indenter import Indenter
from .skeleton import build_skeleton, update_timestamp

__all__ = ["cli"]


def _warn(message: str) -> None:
    click.echo(message, err=True)


def _resolve_config(search_path: Path, **overrides: object) -> HelperConfig:
    try:
        return build_config(search_path, **overrides)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error


def _load_document(
    raw_path: str, **overrides: object
) -> tuple[Path, HelperConfig, str, os.stat_result]:
    base_dir = Path.cwd().resolve()
    try:
        filepath = normalize_filepath(raw_path, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    config = _resolve_config(filepath.parent, **overrides)

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        text, initial_stat = read_document(filepath, max_file_size)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    return filepath, config, text, initial_stat


def _save_document(filepath: Path, text: str, initial_stat: os.stat_result) -> None:
    try:
        write_document(filepath, text, initial_stat, warn=_warn)
    except IOError as error:
        raise click.ClickException(str(error)) from error


@click.group()
@click.version_option(version=__version__, prog_name="html-helper")
def cli():
    """Helpers for authoring HTML documents."""


@cli.command()
@click.option("--base-indent", type=int, help="Columns added per nesting level")
@click.option("--item-continue-indent", type=int, help="Columns added for text continuing an item")
@click.option("--search-limit", type=int, help="Characters scanned backward for context")
@click.option("--use-tabs/--no-use-tabs", default=None, help="Indent with tabs where possible")
@click.option("--check", is_flag=True, help="Report whether the file needs reindenting; write nothing")
@click.option("-v", "--verbose", is_flag=True, help="Report the rule applied to every line")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def indent(
    filepath: str,
    base_indent: int | None = None,
    item_continue_indent: int | None = None,
    search_limit: int | None = None,
    use_tabs: bool | None = None,
    check: bool = False,
    verbose: bool = False,
):
    """
    Reindent every line of an HTML document in place.

    Args:
        filepath: Path to the HTML file to reindent.
        base_indent: Override for the nesting indent.
        item_continue_indent: Override for the item continuation indent.
        search_limit: Override for the backward search limit.
        use_tabs: Override for tab usage in indentation.
        check: Only report whether the file would change.
        verbose: Print an indent report for every line to stderr.

    Raises:
        click.BadParameter: If the path or configuration is invalid.
        click.ClickException: If the file cannot be read or safely rewritten.

    Examples:
        html-helper indent index.html --base-indent 4
    """
    path, config, text, initial_stat = _load_document(
        filepath,
        base_indent=base_indent,
        item_continue_indent=item_continue_indent,
        search_limit=search_limit,
        use_tabs=use_tabs,
        verbose=verbose or None,
    )
    if config.indent_disabled:
        _warn(f"Indentation is disabled for {path.name}")
        return

    reindented = Indenter(config, report=lambda report: _warn(str(report))).reindent_text(text)

    if check:
        if reindented != text:
            _warn(f"{path.name} would be reindented")
            raise SystemExit(1)
        return

    if reindented != text:
        _save_document(path, reindented, initial_stat)


@cli.command()
@click.option("--line", "line_number", type=int, required=True, help="Line number (1-based)")
@click.option("-v", "--verbose", is_flag=True, help="Also show the indentation the line would get")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def context(filepath: str, line_number: int, verbose: bool = False):
    """
    Show the indentation context of a line without modifying the file.

    Prints ``(role, column)`` for the nearest list or item tag above the line.

    Examples:
        html-helper context index.html --line 12
    """
    _, config, text, _ = _load_document(filepath)
    buffer = TextBuffer(text, tab_width=config.tab_width, use_tabs=config.use_tabs)
    try:
        offset = buffer.line_offset(line_number - 1)
    except BufferRangeError as error:
        raise click.BadParameter(f"Line {line_number} does not exist") from error

    indenter = Indenter(config)
    found = classify_previous_context(buffer, offset, indenter.patterns, config)
    click.echo(str(found))
    if verbose:
        click.echo(str(indenter.find_indent(buffer, offset)))


@cli.command()
@click.option("--title", default="", help="Document title")
@click.option("--address", help="Author address")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="File to create")
def skeleton(title: str = "", address: str | None = None, output: str | None = None):
    """
    Create a new HTML document from the skeleton template.

    Prints the document, or writes it to a new file with ``--output``.

    Examples:
        html-helper skeleton --title "Release notes" -o notes.html
    """
    base_dir = Path.cwd().resolve()
    if output is None:
        config = _resolve_config(base_dir, address=address)
        click.echo(build_skeleton(config, title=title), nl=False)
        return

    try:
        target = normalize_new_filepath(output, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error
    config = _resolve_config(target.parent, address=address)
    try:
        create_document(target, build_skeleton(config, title=title))
    except IOError as error:
        raise click.ClickException(str(error)) from error


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def timestamp(filepath: str):
    """
    Refresh the "last modified" block of an HTML document.

    Examples:
        html-helper timestamp index.html
    """
    path, config, text, initial_stat = _load_document(filepath)
    try:
        updated = update_timestamp(text, config)
    except TimestampError as error:
        raise click.ClickException(f"{path.name}: {error}") from error
    _save_document(path, updated, initial_stat)


if __name__ == "__main__":
    cli()
