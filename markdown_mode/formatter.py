"""Compact and human layouts for Markdown documents.

Both transforms work on lines. Code spans and blockquote runs are first swapped
for placeholder tokens (see `markdown_mode.protect`); each line is then
classified once and the blank-line runs between classified lines are rewritten
by a sequence of spacing rules. Only blank lines and trailing whitespace ever
change, so the visible content of a document is preserved.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .config import FormatOptions, validate_options
from .constants import (
    BLOCKQUOTE_PATTERN,
    CODE_FENCE_PATTERN,
    HEADER_PATTERN,
    HORIZONTAL_RULE_PATTERN,
    HUMAN_BLANK_LINES_BEFORE_HEADER,
    HUMAN_MAX_CONSECUTIVE_BLANK_LINES,
    LIST_ITEM_PATTERN,
)
from .detector import detect_current_mode
from .models import LineKind, Mode
from .protect import extract_verbatim, restore_verbatim

logger = logging.getLogger(__name__)

# Called with the non-blank line before a blank run (None at the start of the
# document), the run length, and the non-blank line after it (None at the
# end). Returns the new run length.
SpacingRule = Callable[[str | None, int, str | None], int]


def classify_line(line: str) -> LineKind:
    """Classify a line by its structural role.

    Args:
        line: A single line without its newline.

    Returns:
        LineKind: The first matching kind, checked in the order blank, header,
            horizontal rule, list item, blockquote, code fence, text.

    Examples:
        classify_line("## Usage")  # LineKind.HEADER
        classify_line("---")  # LineKind.RULE
        classify_line("  1. step")  # LineKind.LIST_ITEM
    """
    if not line.strip():
        return LineKind.BLANK
    if HEADER_PATTERN.match(line):
        return LineKind.HEADER
    if HORIZONTAL_RULE_PATTERN.match(line):
        return LineKind.RULE
    if LIST_ITEM_PATTERN.match(line):
        return LineKind.LIST_ITEM
    if BLOCKQUOTE_PATTERN.match(line):
        return LineKind.BLOCKQUOTE
    if CODE_FENCE_PATTERN.match(line):
        return LineKind.FENCE
    return LineKind.TEXT


def _list_family(line: str) -> str | None:
    match = LIST_ITEM_PATTERN.match(line)
    if match is None:
        return None
    return "bullet" if match.group("bullet") else "number"


def _is_kind(line: str | None, kind: LineKind) -> bool:
    return line is not None and classify_line(line) is kind


def _is_unindented_text(line: str | None) -> bool:
    return _is_kind(line, LineKind.TEXT) and not line[0].isspace()


def _respace(lines: list[str], rule: SpacingRule) -> list[str]:
    """Rewrite every blank-line run, including empty runs, using `rule`."""
    result: list[str] = []
    previous: str | None = None
    run = 0

    for line in lines:
        if not line.strip():
            run += 1
            continue
        result.extend([""] * rule(previous, run, line))
        result.append(line)
        previous = line
        run = 0

    result.extend([""] * rule(previous, run, None))
    return result


def _is_degenerate(text: str) -> bool:
    return not text or not text.strip()


# Compact rules


def _collapse_before_header(previous: str | None, run: int, following: str | None) -> int:
    return min(run, 1) if _is_kind(following, LineKind.HEADER) else run


def _drop_after_header(previous: str | None, run: int, following: str | None) -> int:
    return 0 if _is_kind(previous, LineKind.HEADER) else run


def _join_list_items(previous: str | None, run: int, following: str | None) -> int:
    if previous is None or following is None:
        return run
    family = _list_family(previous)
    if family is not None and family == _list_family(following):
        return 0
    return run


def _drop_blank_lines_inside_lists(lines: list[str]) -> list[str]:
    """Drop blank lines between list items, keeping those that end a list.

    Only the line right after a blank line is checked. A blank line followed by
    anything but a list item ends the list, so in a longer blank run between two
    items every line survives this pass and is left to the cap.
    """
    result: list[str] = []
    in_list = False

    for index, line in enumerate(lines):
        kind = classify_line(line)
        if kind is LineKind.BLANK:
            if in_list:
                following = lines[index + 1] if index + 1 < len(lines) else None
                if _is_kind(following, LineKind.LIST_ITEM):
                    continue
                in_list = False
        else:
            in_list = kind is LineKind.LIST_ITEM
        result.append(line)

    return result


def _cap_blank_runs(limit: int) -> SpacingRule:
    def _cap(previous: str | None, run: int, following: str | None) -> int:
        return min(run, limit)

    return _cap


def _trim_document_edges(previous: str | None, run: int, following: str | None) -> int:
    return 0 if previous is None or following is None else run


def _compact_text(text: str, max_consecutive_blank_lines: int) -> str:
    lines = [line.rstrip() for line in text.split("\n")]
    terminated = not lines[-1]

    lines = _respace(lines, _collapse_before_header)
    lines = _respace(lines, _drop_after_header)
    lines = _respace(lines, _join_list_items)
    lines = _drop_blank_lines_inside_lists(lines)
    lines = _respace(lines, _cap_blank_runs(max_consecutive_blank_lines))
    lines = _respace(lines, _trim_document_edges)

    return "\n".join(lines) + ("\n" if terminated else "")


# Human rules


def _human_spacing(previous: str | None, run: int, following: str | None) -> int:
    if following is None:
        return 0
    if previous is None:
        return run

    before = classify_line(previous)
    after = classify_line(following)

    if after is LineKind.HEADER:
        return HUMAN_BLANK_LINES_BEFORE_HEADER
    if before is LineKind.HEADER:
        return max(run, 1)
    if LineKind.RULE in (before, after):
        return 1
    if before is LineKind.LIST_ITEM and after is LineKind.LIST_ITEM:
        return max(run, 1)
    if _is_unindented_text(following):
        return max(run, 1)
    if _is_unindented_text(previous) and after is LineKind.LIST_ITEM:
        return max(run, 1)
    return run


def _human_text(text: str) -> str:
    lines = [line.rstrip() for line in text.split("\n")]

    lines = _respace(lines, _cap_blank_runs(1))
    lines = _respace(lines, _human_spacing)
    lines = _respace(lines, _cap_blank_runs(HUMAN_MAX_CONSECUTIVE_BLANK_LINES))

    return "\n".join(lines) + "\n"


def compact_format(text: str, options: FormatOptions | None = None) -> str:
    """Reformat Markdown into the compact layout.

    Strips trailing whitespace, keeps one blank line before headers and none
    after them, joins list items, caps blank-line runs at
    `options.max_consecutive_blank_lines` and trims blank lines at both ends of
    the document. A document that ended with a newline keeps exactly one.

    Args:
        text: Raw Markdown text.
        options: Formatting options. Defaults to `FormatOptions()`.

    Returns:
        str: The compact document. Empty or whitespace-only input, and input
            that triggers an internal fault, is returned unchanged.

    Raises:
        ConfigError: If `options` fails validation.

    Examples:
        compact_format("- a\\n\\n- b\\n")  # "- a\\n- b\\n"
    """
    options = options or FormatOptions()
    validate_options(options)
    if _is_degenerate(text):
        return text

    try:
        protected = extract_verbatim(
            text, options.preserve_code_blocks, options.preserve_blockquotes
        )
        result = _compact_text(protected.text, options.max_consecutive_blank_lines)
        return restore_verbatim(result, protected)
    except Exception:
        logger.exception("Compact formatting failed; returning the document unchanged")
        return text


def human_format(text: str, options: FormatOptions | None = None) -> str:
    """Reformat Markdown into the human layout.

    Resets blank-line runs to one, then puts two blank lines before headers,
    one after them, one between list items, one around horizontal rules and one
    between paragraphs. Runs never exceed two blank lines, a blank run at the
    start of the document shrinks to one blank line, and the document ends with
    exactly one newline.

    Args:
        text: Raw Markdown text.
        options: Formatting options. `max_consecutive_blank_lines` is ignored.

    Returns:
        str: The human document. Empty or whitespace-only input, and input that
            triggers an internal fault, is returned unchanged.

    Raises:
        ConfigError: If `options` fails validation.

    Examples:
        human_format("# Title\\nSome text")  # "# Title\\n\\nSome text\\n"
    """
    options = options or FormatOptions()
    validate_options(options)
    if _is_degenerate(text):
        return text

    try:
        protected = extract_verbatim(
            text, options.preserve_code_blocks, options.preserve_blockquotes
        )
        result = _human_text(protected.text)
        return restore_verbatim(result, protected)
    except Exception:
        logger.exception("Human formatting failed; returning the document unchanged")
        return text


def format_markdown(
    text: str, mode: Mode | str, options: FormatOptions | None = None
) -> str:
    """Reformat Markdown into `mode`.

    Args:
        text: Raw Markdown text.
        mode: Target mode, as a `Mode` or its string value.
        options: Formatting options.

    Returns:
        str: The reformatted document.

    Raises:
        UnknownModeError: If `mode` names no mode.
        ConfigError: If `options` fails validation.
    """
    if Mode.parse(mode) is Mode.COMPACT:
        return compact_format(text, options)
    return human_format(text, options)


def resolve_mode(text: str) -> Mode:
    """Return the detected mode of `text`, or compact when undetermined."""
    return detect_current_mode(text) or Mode.COMPACT


def toggle_mode(text: str, options: FormatOptions | None = None) -> tuple[Mode, str]:
    """Convert a document to the mode opposite to its current one.

    Args:
        text: Raw Markdown text.
        options: Formatting options.

    Returns:
        tuple[Mode, str]: The new mode and the reformatted document.

    Examples:
        mode, text = toggle_mode("# Title\\nBody\\n")  # Mode.HUMAN, ...
    """
    target = resolve_mode(text).opposite
    return target, format_markdown(text, target, options)


def apply_mode(
    text: str,
    mode: Mode | str,
    options: FormatOptions | None = None,
    force: bool = False,
) -> str | None:
    """Convert a document to `mode` unless it is already in that mode.

    Args:
        text: Raw Markdown text.
        mode: Target mode.
        options: Formatting options.
        force: Reformat even when `text` is already detected as `mode`.

    Returns:
        str | None: The reformatted document, or None when nothing was done.

    Raises:
        UnknownModeError: If `mode` names no mode.
    """
    target = Mode.parse(mode)
    if not force and resolve_mode(text) is target:
        logger.info("Document is already in %s mode", target.value)
        return None
    return format_markdown(text, target, options)
