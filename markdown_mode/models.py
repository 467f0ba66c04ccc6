"""Data models for markdown-mode."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .exceptions import UnknownModeError


class Mode(str, Enum):
    """Whitespace layout of a Markdown document.

    Attributes:
        COMPACT: Minimal blank lines, for dense machine consumption.
        HUMAN: Generous spacing, for visual scanning.
    """

    COMPACT = "compact"
    HUMAN = "human"

    @classmethod
    def parse(cls, value: Mode | str) -> Mode:
        """Return the mode named by `value`.

        Args:
            value: A `Mode` or its string value, in any letter case.

        Returns:
            Mode: The matching mode.

        Raises:
            UnknownModeError: If `value` names no mode.

        Examples:
            Mode.parse("Human")  # Mode.HUMAN
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError as error:
                raise UnknownModeError(value) from error
        raise UnknownModeError(value)

    @property
    def opposite(self) -> Mode:
        return Mode.HUMAN if self is Mode.COMPACT else Mode.COMPACT


class LineKind(Enum):
    """Structural role of a single line, as seen by the transforms.

    Attributes:
        BLANK: Empty or whitespace-only line.
        HEADER: ATX header (``#`` to ``######`` followed by text).
        RULE: Horizontal rule.
        LIST_ITEM: Bullet or ordered list item.
        BLOCKQUOTE: Line starting with ``>``.
        FENCE: Code fence marker (only seen when code is not protected).
        TEXT: Anything else, including placeholder lines.
    """

    BLANK = auto()
    HEADER = auto()
    RULE = auto()
    LIST_ITEM = auto()
    BLOCKQUOTE = auto()
    FENCE = auto()
    TEXT = auto()


class RegionKind(Enum):
    """Kind of verbatim region protected from reformatting."""

    CODE = auto()
    BLOCKQUOTE = auto()


@dataclass(frozen=True)
class VerbatimRegion:
    """A span of text exempted from spacing transforms.

    Attributes:
        kind: Whether the span is code or a blockquote run.
        start: Zero-based start offset (inclusive) in the text it was cut from.
        end: Zero-based end offset (exclusive) in the text it was cut from.
        content: The literal text of the span.
    """

    kind: RegionKind
    start: int
    end: int
    content: str


@dataclass(frozen=True)
class ProtectedText:
    """Text with verbatim regions replaced by placeholder tokens.

    Attributes:
        text: Working text containing placeholder tokens.
        code_regions: Code spans, indexed by their placeholder number.
        quote_regions: Blockquote runs, indexed by their placeholder number.
        sentinel: Character wrapping every placeholder token; absent from the
            original input.
    """

    text: str
    code_regions: list[VerbatimRegion] = field(default_factory=list)
    quote_regions: list[VerbatimRegion] = field(default_factory=list)
    sentinel: str = ""


@dataclass
class WhitespaceStats:
    """Whitespace measurements taken by the mode detector.

    Attributes:
        total_lines: Number of lines, not counting a final terminating newline.
        blank_lines: Number of empty or whitespace-only lines.
        max_consecutive_blank_lines: Longest run of blank lines.
        header_count: Number of header lines.
        blank_lines_after_headers: Headers directly followed by a blank line.
        list_blank_lines: Blank lines lying between two items of one list.
        list_runs: Number of lists with at least two items.
    """

    total_lines: int = 0
    blank_lines: int = 0
    max_consecutive_blank_lines: int = 0
    header_count: int = 0
    blank_lines_after_headers: int = 0
    list_blank_lines: int = 0
    list_runs: int = 0

    @property
    def blank_line_ratio(self) -> float:
        return self.blank_lines / self.total_lines if self.total_lines else 0.0

    @property
    def avg_header_spacing(self) -> float:
        return self.blank_lines_after_headers / self.header_count if self.header_count else 0.0

    @property
    def avg_list_spacing(self) -> float:
        return self.list_blank_lines / self.list_runs if self.list_runs else 0.0


@dataclass(frozen=True)
class ModeStats:
    """Summary of a document's layout.

    Attributes:
        mode: Detected mode, or None when undetermined.
        line_count: Number of lines.
        blank_line_count: Number of blank lines.
        blank_line_ratio: Fraction of lines that are blank.
    """

    mode: Mode | None
    line_count: int
    blank_line_count: int
    blank_line_ratio: float

    def describe(self) -> str:
        mode = self.mode.value if self.mode is not None else "undetermined"
        return (
            f"Mode: {mode} | Lines: {self.line_count} | "
            f"Blank: {self.blank_line_count} ({self.blank_line_ratio * 100:.1f}%)"
        )
