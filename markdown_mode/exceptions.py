"""Package-specific exception types."""

from __future__ import annotations


class MarkdownModeError(ValueError):
    """Base class for errors raised by the formatting engine's callers.

    The transforms themselves never raise for any Markdown input; these errors
    describe invalid arguments.
    """


class UnknownModeError(MarkdownModeError):
    """Raised when a value does not name a formatting mode.

    Args:
        value: The rejected value.
    """

    def __init__(self, value: object):
        self.value = value
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"Unknown mode {self.value!r} (expected 'compact' or 'human')"
