import pytest

from markdown_mode.exceptions import MarkdownModeError, UnknownModeError
from markdown_mode.models import LineKind, Mode, ModeStats, WhitespaceStats


def test_mode_members():
    assert [mode.value for mode in Mode] == ["compact", "human"]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("compact", Mode.COMPACT),
        ("HUMAN", Mode.HUMAN),
        ("  Human ", Mode.HUMAN),
        (Mode.COMPACT, Mode.COMPACT),
    ],
)
def test_mode_parse(value, expected):
    assert Mode.parse(value) is expected


@pytest.mark.parametrize("value", ["dense", "", None, 1])
def test_mode_parse_rejects_unknown_values(value):
    with pytest.raises(UnknownModeError) as excinfo:
        Mode.parse(value)

    assert isinstance(excinfo.value, MarkdownModeError)
    assert isinstance(excinfo.value, ValueError)
    assert "Unknown mode" in str(excinfo.value)


def test_mode_opposite():
    assert Mode.COMPACT.opposite is Mode.HUMAN
    assert Mode.HUMAN.opposite is Mode.COMPACT


def test_line_kind_members():
    assert list(LineKind) == [
        LineKind.BLANK,
        LineKind.HEADER,
        LineKind.RULE,
        LineKind.LIST_ITEM,
        LineKind.BLOCKQUOTE,
        LineKind.FENCE,
        LineKind.TEXT,
    ]


def test_whitespace_stats_defaults_avoid_division_by_zero():
    stats = WhitespaceStats()

    assert stats.blank_line_ratio == 0.0
    assert stats.avg_header_spacing == 0.0
    assert stats.avg_list_spacing == 0.0


def test_whitespace_stats_averages():
    stats = WhitespaceStats(
        total_lines=10,
        blank_lines=4,
        header_count=2,
        blank_lines_after_headers=1,
        list_blank_lines=3,
        list_runs=2,
    )

    assert stats.blank_line_ratio == pytest.approx(0.4)
    assert stats.avg_header_spacing == pytest.approx(0.5)
    assert stats.avg_list_spacing == pytest.approx(1.5)


def test_mode_stats_describe():
    stats = ModeStats(mode=Mode.HUMAN, line_count=8, blank_line_count=3, blank_line_ratio=0.375)

    assert stats.describe() == "Mode: human | Lines: 8 | Blank: 3 (37.5%)"


def test_mode_stats_describe_undetermined():
    stats = ModeStats(mode=None, line_count=1, blank_line_count=1, blank_line_ratio=1.0)

    assert stats.describe().startswith("Mode: undetermined |")
