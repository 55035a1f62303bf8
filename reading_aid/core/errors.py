"""Exception taxonomy for the reading-aid core.

WHY: Only programming-contract violations propagate out of the core.
Expected edge cases (empty text, zero tokens, cancelling an idle timer)
are defined states, and invalid state-machine commands are logged and
ignored, so they need no exception class at all.

RULES:
- IndexOutOfRangeError is also an IndexError so generic handlers catch it
- RuleTableError is also a ValueError (bad input data, not a bug)
"""

from __future__ import annotations

from typing import Optional


class ReadingAidError(Exception):
    """Base class for all reading-aid errors."""


class IndexOutOfRangeError(ReadingAidError, IndexError):
    """A SpellingError position no longer matches the current text.

    Raised when the text was edited after detection. The text is left
    unchanged; callers should re-run detection.
    """

    def __init__(self, position: int, token_count: int, message: Optional[str] = None) -> None:
        self.position = position
        self.token_count = token_count
        super().__init__(
            message
            or "Position {} is out of range for {} token(s); re-run detection.".format(
                position, token_count
            )
        )


class RuleTableError(ReadingAidError, ValueError):
    """A custom rule table file is missing, unreadable, or malformed."""
