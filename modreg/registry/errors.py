"""Registry error taxonomy.

Every failure is a precondition violation raised before any state changes.
"""

from __future__ import annotations


class ModerationError(Exception):
    """Base class for rejected registry operations."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(ModerationError):
    """A content or report id is out of range."""

    kind = "not_found"


class InvalidInput(ModerationError):
    """Empty hash or reason, zero identity, or an unknown status."""

    kind = "invalid_input"


class Unauthorized(ModerationError):
    """The caller lacks the owner or moderator role."""

    kind = "unauthorized"


class Conflict(ModerationError):
    """The request conflicts with current registry state."""

    kind = "conflict"
