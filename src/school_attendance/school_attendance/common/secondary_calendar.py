from __future__ import annotations

from datetime import date
from typing import Optional, Protocol


class SecondaryCalendar(Protocol):
    """Maps a civil date to a secondary calendar string (e.g. Bikram Sambat).

    Display only: correction windows and thresholds never consult it.
    """

    def to_secondary(self, value: date) -> Optional[str]:
        raise NotImplementedError


def secondary_date(calendar: Optional[SecondaryCalendar], value: date, explicit: Optional[str] = None) -> Optional[str]:
    if explicit:
        return explicit
    if calendar is None:
        return None
    return calendar.to_secondary(value)
