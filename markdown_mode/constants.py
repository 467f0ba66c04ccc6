"""Constants used across the markdown-mode package."""

from __future__ import annotations

import re

from .config import FormatOptions

DEFAULT_OPTIONS = FormatOptions()

# Line patterns; each is applied to a single line without its newline.
HEADER_PATTERN = re.compile(r"^#{1,6}[ \t]+\S")
LIST_ITEM_PATTERN = re.compile(r"^\s*(?:(?P<bullet>[-*+])|(?P<number>\d+)\.)\s+")
BLOCKQUOTE_PATTERN = re.compile(r"^\s*>")
CODE_FENCE_PATTERN = re.compile(r"^\s*```")
HORIZONTAL_RULE_PATTERN = re.compile(r"^ {0,3}(?:-{3,}|\*{3,}|_{3,})$")

# Fenced spans are matched non-greedily so two fences never merge; inline spans
# never cross a newline.
CODE_SPAN_PATTERN = re.compile(r"```.*?```|`[^`\n]+`", re.DOTALL)

# Placeholders
CODE_PLACEHOLDER_NAME = "CODE_BLOCK"
BLOCKQUOTE_PLACEHOLDER_NAME = "BLOCKQUOTE"
# Private use area; the first code point missing from the input wraps tokens.
SENTINEL_CANDIDATES = range(0xE000, 0xF900)

# Human layout
HUMAN_BLANK_LINES_BEFORE_HEADER = 2
HUMAN_MAX_CONSECUTIVE_BLANK_LINES = 2

# Detector thresholds
COMPACT_MAX_BLANK_RATIO = 0.2
HUMAN_MIN_BLANK_RATIO = 0.25
COMPACT_MAX_BLANK_RUN = 2
HUMAN_MIN_BLANK_RUN = 2
COMPACT_MAX_HEADER_SPACING = 0.5
HUMAN_MIN_HEADER_SPACING = 0.7
COMPACT_MAX_LIST_SPACING = 0.3
HUMAN_MIN_LIST_SPACING = 0.5

# Files
MARKDOWN_EXTENSIONS = (".md", ".markdown")
DEFAULT_MAX_FILE_SIZE = DEFAULT_OPTIONS.max_file_size
