"""Exceptions raised by decider.

All exceptions inherit from ``DeciderError`` so callers can catch every
decider failure with a single except clause.
"""

from __future__ import annotations

# Messages are part of the public contract; existing callers match on them.
FULL_NO_MATCH_MESSAGE = "No matching rule found for the provided subject."
SIMPLE_NO_MATCH_MESSAGE = "No matching rule found."


class DeciderError(Exception):
    """Base exception for all decider errors."""


class NoMatchError(DeciderError):
    """Raised when no rule matches a subject and no default is configured.

    The message differs between the full and the simplified matcher.
    """

    def __init__(self, message: str = FULL_NO_MATCH_MESSAGE) -> None:
        """Initialize NoMatchError.

        Args:
            message: Human-readable failure message.
        """
        super().__init__(message)
