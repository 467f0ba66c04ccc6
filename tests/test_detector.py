from __future__ import annotations

import logging

import pytest

import markdown_mode.detector as detector_module
from markdown_mode.detector import (
    collect_whitespace_stats,
    detect_current_mode,
    mode_stats,
    score_stats,
)
from markdown_mode.formatter import compact_format, human_format
from markdown_mode.models import Mode, WhitespaceStats

SAMPLE = "# Title\nIntro\n## Section\n- a\n- b\n- c\nOutro\n"


@pytest.mark.parametrize("text", ["", "   ", "  \n\t\n", "\n\n\n"])
def test_blank_input_is_undetermined(text: str):
    assert detect_current_mode(text) is None


@pytest.mark.parametrize("text", ["plain", "line one\nline two\nline three\n"])
def test_featureless_text_defaults_to_compact(text: str):
    assert detect_current_mode(text) is Mode.COMPACT


def test_human_formatted_document_is_detected_as_human():
    assert detect_current_mode(human_format(SAMPLE)) is Mode.HUMAN


def test_compact_formatted_document_is_detected_as_compact():
    assert detect_current_mode(compact_format(SAMPLE)) is Mode.COMPACT


def test_tie_defaults_to_compact():
    text = "a\n\n\nb\n"

    assert score_stats(collect_whitespace_stats(text)) == (4, 4)
    assert detect_current_mode(text) is Mode.COMPACT


def test_blank_run_of_two_scores_for_both_profiles():
    compact_score, human_score = score_stats(WhitespaceStats(max_consecutive_blank_lines=2))

    # ratio, header and list spacing are all zero: compact 2 + 2 + 1 + 1, human 2
    assert (compact_score, human_score) == (6, 2)


def test_scores_range_from_zero_to_six():
    spaced = WhitespaceStats(
        total_lines=10,
        blank_lines=5,
        max_consecutive_blank_lines=3,
        header_count=1,
        blank_lines_after_headers=1,
        list_blank_lines=2,
        list_runs=1,
    )

    assert score_stats(spaced) == (0, 6)
    assert score_stats(WhitespaceStats(total_lines=3)) == (6, 0)


def test_collect_whitespace_stats():
    stats = collect_whitespace_stats("# A\n\nBody\n- x\n\n- y\n\nEnd\n")

    assert stats == WhitespaceStats(
        total_lines=8,
        blank_lines=3,
        max_consecutive_blank_lines=1,
        header_count=1,
        blank_lines_after_headers=1,
        list_blank_lines=1,
        list_runs=1,
    )
    assert stats.avg_list_spacing == pytest.approx(1.0)


def test_terminating_newline_is_not_a_line():
    stats = collect_whitespace_stats("a\n")

    assert stats.total_lines == 1
    assert stats.blank_lines == 0


def test_trailing_blank_run_counts_towards_longest_run():
    assert collect_whitespace_stats("a\n\n\n\n").max_consecutive_blank_lines == 3


def test_terminating_newline_after_a_header_is_not_header_spacing():
    # Counting the empty string after the final newline as a blank line would
    # credit the header with spacing and tip this document to human.
    text = "- a\n\ntext\n\n\n# H\n"
    stats = collect_whitespace_stats(text)

    assert (stats.total_lines, stats.blank_lines) == (6, 3)
    assert stats.blank_lines_after_headers == 0
    assert score_stats(stats) == (4, 4)
    assert detect_current_mode(text) is Mode.COMPACT
    assert detect_current_mode(text + "\n") is Mode.HUMAN


def test_blank_lines_after_a_list_are_not_list_spacing():
    stats = collect_whitespace_stats("- a\n- b\n\n\nText\n")

    assert stats.list_runs == 1
    assert stats.list_blank_lines == 0


def test_single_item_lists_do_not_count_as_runs():
    stats = collect_whitespace_stats("- a\n\nText\n\n- b\n")

    assert stats.list_runs == 0
    assert stats.avg_list_spacing == 0.0


def test_header_ends_a_list_run():
    stats = collect_whitespace_stats("- a\n\n- b\n# H\n- c\n")

    assert stats.list_runs == 1
    assert stats.list_blank_lines == 1
    assert stats.header_count == 1
    assert stats.blank_lines_after_headers == 0


def test_detection_is_deterministic():
    text = human_format(SAMPLE)

    assert {detect_current_mode(text) for _ in range(5)} == {Mode.HUMAN}


def test_detection_fault_returns_none(monkeypatch, caplog):
    def _boom(text):
        raise RuntimeError("boom")

    monkeypatch.setattr(detector_module, "collect_whitespace_stats", _boom)

    with caplog.at_level(logging.ERROR, logger="markdown_mode.detector"):
        assert detect_current_mode("# Title\nBody\n") is None

    assert "Mode detection failed" in caplog.text


def test_mode_stats():
    stats = mode_stats("a\n\nb\n")

    assert stats.mode is Mode.COMPACT
    assert stats.line_count == 3
    assert stats.blank_line_count == 1
    assert stats.describe() == "Mode: compact | Lines: 3 | Blank: 1 (33.3%)"
