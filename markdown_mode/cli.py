"""
Converts Markdown files between the compact and human layouts.
Each command prints its result to stdout, or rewrites the file with `--write`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import click
from .config import FormatOptions, build_options
from .detector import detect_current_mode, mode_stats
from .exceptions import UnknownModeError
from .filesystem import (
    DiskDocument,
    load_document,
    max_file_size_limit,
    resolve_document_path,
    rewrite_document,
)
from .formatter import apply_mode, format_markdown, toggle_mode
from .models import Mode

__all__ = ["cli"]

MODE_CHOICE = click.Choice([mode.value for mode in Mode], case_sensitive=False)
MODE_LABELS = {Mode.COMPACT: "Compact (AI-optimized)", Mode.HUMAN: "Human-readable"}


@dataclass
class _Document:
    source: DiskDocument
    options: FormatOptions

    @property
    def text(self) -> str:
        return self.source.text


def _format_options(function):
    """Attach the options shared by every formatting command."""
    function = click.option(
        "--max-blank-lines",
        "max_consecutive_blank_lines",
        type=int,
        help="Longest blank-line run kept in compact mode",
    )(function)
    function = click.option(
        "--no-preserve-code",
        is_flag=True,
        help="Reformat code spans and fences like ordinary text",
    )(function)
    function = click.option(
        "--no-preserve-quotes",
        is_flag=True,
        help="Reformat blockquotes like ordinary text",
    )(function)
    function = click.option(
        "--write",
        "-w",
        is_flag=True,
        help="Rewrite the file in place instead of printing the result",
    )(function)
    return function


def _load_document(filepath: str, **overrides: object) -> _Document:
    """Validate, configure, and read a Markdown file.

    Raises:
        click.BadParameter: If the path or the configuration is invalid.
        click.ClickException: If size limits or filesystem safety checks fail.
    """
    try:
        path = resolve_document_path(filepath, Path.cwd().resolve())
        options = build_options(path.parent, **overrides)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        source = load_document(path, max_file_size_limit(default=options.max_file_size))
    except (ValueError, IOError) as error:
        raise click.ClickException(str(error)) from error

    return _Document(source=source, options=options)


def _overrides(
    max_consecutive_blank_lines: int | None, no_preserve_code: bool, no_preserve_quotes: bool
) -> dict[str, object]:
    return {
        "max_consecutive_blank_lines": max_consecutive_blank_lines,
        "preserve_code_blocks": False if no_preserve_code else None,
        "preserve_blockquotes": False if no_preserve_quotes else None,
    }


def _emit(document: _Document, formatted: str, write: bool) -> bool:
    """Print `formatted`, or write it back; return True if the file was rewritten."""
    if not write:
        click.echo(formatted, nl=False)
        return False
    if formatted == document.text:
        return False
    try:
        rewrite_document(
            document.source,
            formatted,
            warn=lambda message: click.echo(message, err=True),
        )
    except IOError as error:
        raise click.ClickException(str(error)) from error
    return True


@click.group()
@click.version_option(package_name="markdown-mode")
@click.option("--verbose", "-v", is_flag=True, help="Log formatting details to stderr")
def cli(verbose: bool = False):
    """
    Switch Markdown documents between compact and human-readable layouts.

    Examples:
        markdown-mode detect README.md
        markdown-mode toggle --write README.md
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def detect(filepath: str):
    """Print the detected mode of FILEPATH (compact, human, or undetermined)."""
    document = _load_document(filepath)
    mode = detect_current_mode(document.text)
    click.echo(mode.value if mode is not None else "undetermined")


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def stats(filepath: str):
    """Print the detected mode and blank-line statistics of FILEPATH."""
    document = _load_document(filepath)
    click.echo(mode_stats(document.text).describe())


@cli.command(name="format")
@click.option("--mode", "-m", type=MODE_CHOICE, required=True, help="Target layout")
@_format_options
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def format_command(
    filepath: str,
    mode: str,
    write: bool = False,
    no_preserve_quotes: bool = False,
    no_preserve_code: bool = False,
    max_consecutive_blank_lines: int | None = None,
):
    """Reformat FILEPATH into the given mode, whatever its current layout."""
    document = _load_document(
        filepath, **_overrides(max_consecutive_blank_lines, no_preserve_code, no_preserve_quotes)
    )
    formatted = format_markdown(document.text, mode, document.options)
    _emit(document, formatted, write)


@cli.command()
@_format_options
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def toggle(
    filepath: str,
    write: bool = False,
    no_preserve_quotes: bool = False,
    no_preserve_code: bool = False,
    max_consecutive_blank_lines: int | None = None,
):
    """Convert FILEPATH to the mode opposite to its detected one."""
    document = _load_document(
        filepath, **_overrides(max_consecutive_blank_lines, no_preserve_code, no_preserve_quotes)
    )
    new_mode, formatted = toggle_mode(document.text, document.options)
    if _emit(document, formatted, write):
        click.echo(f"Converted to {MODE_LABELS[new_mode]} mode", err=True)


@cli.command()
@click.option("--force", is_flag=True, help="Reformat even if already in MODE")
@_format_options
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.argument("mode", type=MODE_CHOICE)
def apply(
    filepath: str,
    mode: str,
    force: bool = False,
    write: bool = False,
    no_preserve_quotes: bool = False,
    no_preserve_code: bool = False,
    max_consecutive_blank_lines: int | None = None,
):
    """
    Convert FILEPATH to MODE unless it is already in that mode.

    Examples:
        markdown-mode apply --write notes.md human
    """
    document = _load_document(
        filepath, **_overrides(max_consecutive_blank_lines, no_preserve_code, no_preserve_quotes)
    )
    try:
        target = Mode.parse(mode)
    except UnknownModeError as error:
        raise click.BadParameter(str(error)) from error

    formatted = apply_mode(document.text, target, document.options, force=force)
    if formatted is None:
        click.echo(f"Document is already in {target.value} mode", err=True)
        if not write:
            click.echo(document.text, nl=False)
        return

    if _emit(document, formatted, write):
        click.echo(f"Applied {MODE_LABELS[target]} mode", err=True)


if __name__ == "__main__":
    cli()
