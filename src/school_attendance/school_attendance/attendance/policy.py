from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.constants import DEFAULT_CORRECTION_WINDOW_HOURS


@dataclass(frozen=True)
class CorrectionWindowPolicy:
    """Decides whether a marked record may still be corrected or deleted.

    The window is measured from the record's latest ``marked_at`` and the
    boundary is inclusive: exactly ``window_hours`` elapsed is still allowed.
    """

    window_hours: float = DEFAULT_CORRECTION_WINDOW_HOURS

    def __post_init__(self):
        if self.window_hours < 0:
            raise ValueError("window_hours must not be negative")

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.window_hours)

    def can_correct(self, original_marked_at: datetime, now: datetime) -> bool:
        return now - original_marked_at <= self.window
