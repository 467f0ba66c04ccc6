"""Mode detection from whitespace statistics."""

from __future__ import annotations

import logging

from .constants import (
    COMPACT_MAX_BLANK_RATIO,
    COMPACT_MAX_BLANK_RUN,
    COMPACT_MAX_HEADER_SPACING,
    COMPACT_MAX_LIST_SPACING,
    HEADER_PATTERN,
    HUMAN_MIN_BLANK_RATIO,
    HUMAN_MIN_BLANK_RUN,
    HUMAN_MIN_HEADER_SPACING,
    HUMAN_MIN_LIST_SPACING,
    LIST_ITEM_PATTERN,
)
from .models import Mode, ModeStats, WhitespaceStats

logger = logging.getLogger(__name__)


def _document_lines(text: str) -> list[str]:
    lines = text.split("\n")
    # A terminating newline ends the last line; it does not start a new one.
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


def collect_whitespace_stats(text: str) -> WhitespaceStats:
    """Measure the blank-line layout of a document in a single scan.

    Code and blockquotes are measured like any other text: only spacing
    matters here, not content.

    Args:
        text: Raw Markdown text.

    Returns:
        WhitespaceStats: Counts for blank lines, headers, and list spacing.

    Examples:
        stats = collect_whitespace_stats("# Title\\n\\nBody\\n")
        stats.avg_header_spacing  # 1.0
    """
    stats = WhitespaceStats()
    blank_run = 0
    previous_was_header = False
    list_items = 0
    pending_list_blanks = 0

    def _close_list() -> None:
        nonlocal list_items, pending_list_blanks
        if list_items > 1:
            stats.list_runs += 1
        list_items = 0
        pending_list_blanks = 0

    for line in _document_lines(text):
        stats.total_lines += 1
        stripped = line.strip()

        if not stripped:
            stats.blank_lines += 1
            blank_run += 1
            stats.max_consecutive_blank_lines = max(stats.max_consecutive_blank_lines, blank_run)
            if previous_was_header:
                stats.blank_lines_after_headers += 1
            if list_items:
                pending_list_blanks += 1
            previous_was_header = False
            continue

        blank_run = 0

        if HEADER_PATTERN.match(stripped):
            stats.header_count += 1
            previous_was_header = True
            _close_list()
            continue

        previous_was_header = False

        if LIST_ITEM_PATTERN.match(line):
            if list_items:
                stats.list_blank_lines += pending_list_blanks
            list_items += 1
            pending_list_blanks = 0
        else:
            _close_list()

    _close_list()
    return stats


def score_stats(stats: WhitespaceStats) -> tuple[int, int]:
    """Score whitespace statistics against the compact and human profiles.

    Args:
        stats: Statistics from `collect_whitespace_stats`.

    Returns:
        tuple[int, int]: Compact score and human score, each between 0 and 6.
            A longest blank run of exactly two counts for both profiles.
    """
    ratio = stats.blank_line_ratio
    longest_run = stats.max_consecutive_blank_lines
    header_spacing = stats.avg_header_spacing
    list_spacing = stats.avg_list_spacing

    compact_score = (
        (2 if ratio < COMPACT_MAX_BLANK_RATIO else 0)
        + (2 if longest_run <= COMPACT_MAX_BLANK_RUN else 0)
        + (1 if header_spacing < COMPACT_MAX_HEADER_SPACING else 0)
        + (1 if list_spacing < COMPACT_MAX_LIST_SPACING else 0)
    )
    human_score = (
        (2 if ratio > HUMAN_MIN_BLANK_RATIO else 0)
        + (2 if longest_run >= HUMAN_MIN_BLANK_RUN else 0)
        + (1 if header_spacing > HUMAN_MIN_HEADER_SPACING else 0)
        + (1 if list_spacing > HUMAN_MIN_LIST_SPACING else 0)
    )
    return compact_score, human_score


def detect_current_mode(text: str) -> Mode | None:
    """Guess which layout a document is currently in.

    Args:
        text: Raw Markdown text.

    Returns:
        Mode | None: `Mode.HUMAN` when the human profile scores strictly
            higher, `Mode.COMPACT` otherwise (ties included), and None for
            empty or whitespace-only text or when detection fails.

    Examples:
        detect_current_mode("# A\\n\\n\\nBody\\n\\n\\n## B\\n\\nMore\\n")  # Mode.HUMAN
        detect_current_mode("plain")  # Mode.COMPACT
    """
    if not text or not text.strip():
        return None

    try:
        compact_score, human_score = score_stats(collect_whitespace_stats(text))
    except Exception:
        logger.exception("Mode detection failed")
        return None

    logger.debug("Mode scores: compact=%d human=%d", compact_score, human_score)
    if human_score > compact_score:
        return Mode.HUMAN
    return Mode.COMPACT


def mode_stats(text: str) -> ModeStats:
    """Summarize a document's layout.

    Args:
        text: Raw Markdown text.

    Returns:
        ModeStats: Detected mode plus line and blank-line counts.

    Examples:
        mode_stats("a\\n\\nb\\n").describe()
        # "Mode: compact | Lines: 3 | Blank: 1 (33.3%)"
    """
    stats = collect_whitespace_stats(text)
    return ModeStats(
        mode=detect_current_mode(text),
        line_count=stats.total_lines,
        blank_line_count=stats.blank_lines,
        blank_line_ratio=stats.blank_line_ratio,
    )
