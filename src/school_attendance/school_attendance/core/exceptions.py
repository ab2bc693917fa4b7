from __future__ import annotations

from datetime import datetime


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class EmptyBatchError(ValidationError):
    """Raised when a bulk operation receives no students."""


class StudentNotFound(ValidationError):
    """Raised when a student is missing from the student directory."""


class WindowExceededError(DomainError):
    """A mutation was attempted after the correction window closed.

    ``marked_at`` keeps the original marking time; the message embeds it in
    ISO-8601 so callers can parse it back out of the text.
    """

    action = "modification"

    def __init__(self, marked_at: datetime, *, window_hours: float = 24):
        self.marked_at = marked_at
        self.window_hours = window_hours
        super().__init__(
            f"Attendance {self.action} is only allowed within {window_hours:g} hours of marking. "
            f"This attendance was marked at {marked_at.isoformat()}."
        )


class CorrectionWindowExceeded(WindowExceededError):
    action = "correction"


class DeletionWindowExceeded(WindowExceededError):
    action = "deletion"
