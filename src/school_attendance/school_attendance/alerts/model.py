from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceSummary, DateRange


@dataclass(frozen=True)
class AlertDetails:
    parent_notified: bool
    admin_notified: bool


@dataclass(frozen=True)
class AlertResult:
    student_id: int
    attendance_percentage: float
    below_threshold: bool
    alert_sent: bool
    alert_details: Optional[AlertDetails] = None


@dataclass(frozen=True)
class SummaryReport:
    """Attendance breakdown for one student with its distance to the threshold."""

    student_id: int
    student_name: Optional[str]
    date_range: DateRange
    summary: AttendanceSummary
    meets_threshold: bool
    threshold: float
    difference: float
    generated_at: datetime
