"""Protection of code and blockquote spans while a document is reformatted.

Verbatim regions are cut out of the working text and replaced by placeholder
tokens. Transforms see each token as ordinary text and never remove it; the
regions are put back, untouched, once spacing has been rewritten.
"""

from __future__ import annotations

import logging
import re

from .constants import (
    BLOCKQUOTE_PATTERN,
    BLOCKQUOTE_PLACEHOLDER_NAME,
    CODE_PLACEHOLDER_NAME,
    CODE_SPAN_PATTERN,
    SENTINEL_CANDIDATES,
)
from .models import ProtectedText, RegionKind, VerbatimRegion

logger = logging.getLogger(__name__)


def choose_sentinel(text: str) -> str:
    """Pick a private-use character that does not occur in `text`.

    Args:
        text: Text that will carry placeholder tokens.

    Returns:
        str: A single character safe to delimit placeholder tokens.

    Raises:
        ValueError: If every candidate character already occurs in `text`.

    Examples:
        choose_sentinel("plain text")  # "\\ue000"
    """
    for code_point in SENTINEL_CANDIDATES:
        candidate = chr(code_point)
        if candidate not in text:
            return candidate
    raise ValueError("Text uses every placeholder sentinel character")


def make_placeholder(sentinel: str, name: str, index: int) -> str:
    return f"{sentinel}{name}_{index}{sentinel}"


def find_code_spans(text: str) -> list[VerbatimRegion]:
    """Locate fenced code blocks and inline code spans.

    A single left-to-right scan matches triple-backtick fences first
    (non-greedy, across lines) and single-backtick spans otherwise (never across
    a newline). Unterminated fences and stray backticks are left unmatched.

    Args:
        text: Text to scan.

    Returns:
        list[VerbatimRegion]: Code regions in document order.

    Examples:
        find_code_spans("use `x` here")  # one region covering "`x`"
    """
    return [
        VerbatimRegion(RegionKind.CODE, match.start(), match.end(), match.group(0))
        for match in CODE_SPAN_PATTERN.finditer(text)
    ]


def find_blockquote_runs(text: str) -> list[VerbatimRegion]:
    """Locate runs of blockquote lines.

    A run starts at a line matching optional whitespace then ``>`` and extends
    over further quote lines. Blank lines belong to the run only when another
    quote line follows them; blank lines trailing the last quote line are left
    outside.

    Args:
        text: Text to scan, normally with code already protected.

    Returns:
        list[VerbatimRegion]: One region per run, covering whole lines without
            their final newline.

    Examples:
        find_blockquote_runs("> a\\n>\\n> b\\n\\ntext")  # one region, "> a\\n>\\n> b"
    """
    runs: list[VerbatimRegion] = []
    run_start: int | None = None
    run_end = 0
    offset = 0

    for line in text.split("\n"):
        if BLOCKQUOTE_PATTERN.match(line):
            if run_start is None:
                run_start = offset
            run_end = offset + len(line)
        elif line.strip() and run_start is not None:
            runs.append(
                VerbatimRegion(
                    RegionKind.BLOCKQUOTE, run_start, run_end, text[run_start:run_end]
                )
            )
            run_start = None
        offset += len(line) + 1

    if run_start is not None:
        runs.append(
            VerbatimRegion(RegionKind.BLOCKQUOTE, run_start, run_end, text[run_start:run_end])
        )

    return runs


def _substitute(text: str, regions: list[VerbatimRegion], sentinel: str, name: str) -> str:
    parts = []
    offset = 0
    for index, region in enumerate(regions):
        parts.append(text[offset : region.start])
        parts.append(make_placeholder(sentinel, name, index))
        offset = region.end
    parts.append(text[offset:])
    return "".join(parts)


def extract_verbatim(
    text: str, protect_code: bool = True, protect_quotes: bool = True
) -> ProtectedText:
    """Replace code spans and blockquote runs with placeholder tokens.

    Code is extracted first, so a fence that contains ``>`` lines or list
    markers is never seen by the blockquote scan. Blockquote offsets refer to
    the code-protected text.

    Args:
        text: Raw Markdown text.
        protect_code: Extract fenced and inline code when True.
        protect_quotes: Extract blockquote runs when True.

    Returns:
        ProtectedText: Working text plus the regions needed to restore it.

    Raises:
        ValueError: If no sentinel character is free in `text`.

    Examples:
        protected = extract_verbatim("> quote\\n\\n```\\ncode\\n```")
        restore_verbatim(protected.text, protected)  # original text
    """
    sentinel = choose_sentinel(text)

    code_regions = find_code_spans(text) if protect_code else []
    working = _substitute(text, code_regions, sentinel, CODE_PLACEHOLDER_NAME)

    quote_regions = find_blockquote_runs(working) if protect_quotes else []
    working = _substitute(working, quote_regions, sentinel, BLOCKQUOTE_PLACEHOLDER_NAME)

    logger.debug(
        "Protected %d code span(s) and %d blockquote run(s)",
        len(code_regions),
        len(quote_regions),
    )
    return ProtectedText(
        text=working,
        code_regions=code_regions,
        quote_regions=quote_regions,
        sentinel=sentinel,
    )


def _restore(text: str, regions: list[VerbatimRegion], sentinel: str, name: str) -> str:
    if not regions:
        return text

    token_pattern = re.compile(
        rf"{re.escape(sentinel)}{re.escape(name)}_(\d+){re.escape(sentinel)}"
    )

    def _region_content(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(regions):
            return match.group(0)
        return regions[index].content

    return token_pattern.sub(_region_content, text)


def restore_verbatim(text: str, protected: ProtectedText) -> str:
    """Put extracted regions back in place of their placeholder tokens.

    Blockquotes are restored before code because a blockquote run may itself
    contain code tokens. A token missing from `text` leaves its region out; an
    unknown token is left as is.

    Args:
        text: Transformed working text.
        protected: Result of the `extract_verbatim` call that produced the
            working text.

    Returns:
        str: Text with every region reinserted verbatim.
    """
    text = _restore(text, protected.quote_regions, protected.sentinel, BLOCKQUOTE_PLACEHOLDER_NAME)
    return _restore(text, protected.code_regions, protected.sentinel, CODE_PLACEHOLDER_NAME)
