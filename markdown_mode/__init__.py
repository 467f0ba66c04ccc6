"""
markdown-mode: switch Markdown documents between compact and human layouts.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    markdown-mode toggle --write README.md

Library Usage:
    from pathlib import Path
    from markdown_mode import Mode, detect_current_mode, format_markdown

    content = Path("README.md").read_text()
    if detect_current_mode(content) is Mode.COMPACT:
        content = format_markdown(content, Mode.HUMAN)
"""

from .config import ConfigError, FormatOptions
from .detector import collect_whitespace_stats, detect_current_mode, mode_stats
from .exceptions import MarkdownModeError, UnknownModeError
from .formatter import (
    apply_mode,
    compact_format,
    format_markdown,
    human_format,
    resolve_mode,
    toggle_mode,
)
from .models import Mode, ModeStats, ProtectedText, VerbatimRegion, WhitespaceStats
from .protect import extract_verbatim, restore_verbatim

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "format_markdown",
    "compact_format",
    "human_format",
    "detect_current_mode",
    # Mode helpers
    "resolve_mode",
    "toggle_mode",
    "apply_mode",
    "mode_stats",
    "collect_whitespace_stats",
    # Verbatim protection
    "extract_verbatim",
    "restore_verbatim",
    # Data models
    "FormatOptions",
    "Mode",
    "ModeStats",
    "ProtectedText",
    "VerbatimRegion",
    "WhitespaceStats",
    # Exceptions
    "ConfigError",
    "MarkdownModeError",
    "UnknownModeError",
    # Version
    "__version__",
]
