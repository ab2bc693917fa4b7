from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.constants import PERCENTAGE_DECIMALS
from ..core.enums import AttendanceStatus, SyncStatus


@dataclass(frozen=True)
class DayWise:
    """Attendance taken once for the whole day."""

    @property
    def period_number(self) -> None:
        return None


@dataclass(frozen=True)
class PeriodWise:
    """Attendance taken for one teaching period."""

    period_number: int

    def __post_init__(self):
        if int(self.period_number) <= 0:
            raise ValueError(f"period_number must be positive, got {self.period_number!r}")


Period = Union[DayWise, PeriodWise]

DAY_WISE = DayWise()


def period_of(period_number: Optional[int]) -> Period:
    """Build the period variant from a nullable period number."""
    if period_number is None:
        return DAY_WISE
    return PeriodWise(int(period_number))


def is_counted_present(status: AttendanceStatus) -> bool:
    """Late still counts as present for percentages and presence checks."""
    return status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for a day or a period."""

    attendance_id: int
    student_id: int
    class_id: int
    attendance_date: date
    period: Period
    status: AttendanceStatus
    marked_by: int
    marked_at: datetime
    sync_status: SyncStatus = SyncStatus.SYNCED
    remarks: Optional[str] = None
    date_bs: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def period_number(self) -> Optional[int]:
        return self.period.period_number

    @property
    def is_period_wise(self) -> bool:
        return isinstance(self.period, PeriodWise)

    @property
    def is_present(self) -> bool:
        return is_counted_present(self.status)

    def display_date(self) -> str:
        return self.date_bs or self.attendance_date.isoformat()


@dataclass(frozen=True)
class NewAttendance:
    """Data needed to create a record (no id, server timestamps not set yet)."""

    student_id: int
    class_id: int
    attendance_date: date
    status: AttendanceStatus
    marked_by: int
    marked_at: datetime
    period: Period = DAY_WISE
    sync_status: SyncStatus = SyncStatus.SYNCED
    remarks: Optional[str] = None
    date_bs: Optional[str] = None


@dataclass(frozen=True)
class AttendanceChange:
    """Correction patch applied to an existing record."""

    status: AttendanceStatus
    marked_by: int
    marked_at: datetime
    remarks: Optional[str] = None


@dataclass(frozen=True)
class MarkRequest:
    """Caller input for marking a single student."""

    student_id: int
    class_id: int
    attendance_date: date
    status: AttendanceStatus
    period: Period = DAY_WISE
    remarks: Optional[str] = None
    date_bs: Optional[str] = None
    sync_status: Optional[SyncStatus] = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive date bounds; either side may be open."""

    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start and self.end and self.end < self.start:
            raise ValueError("DateRange end must not be before start")

    def contains(self, value: date) -> bool:
        if self.start and value < self.start:
            return False
        if self.end and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class StatusCounts:
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    total: int = 0

    @property
    def counted_present(self) -> int:
        return self.present + self.late


@dataclass(frozen=True)
class AttendanceSummary:
    student_id: int
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    attendance_percentage: float


def attendance_percentage(counts: StatusCounts, *, decimals: int = PERCENTAGE_DECIMALS) -> float:
    """(present + late) / total * 100, or 0 when there are no records."""
    if counts.total == 0:
        return 0.0
    return round(counts.counted_present / counts.total * 100, decimals)


def summarize(student_id: int, counts: StatusCounts) -> AttendanceSummary:
    return AttendanceSummary(
        student_id=int(student_id),
        total_days=counts.total,
        present_days=counts.present,
        absent_days=counts.absent,
        late_days=counts.late,
        excused_days=counts.excused,
        attendance_percentage=attendance_percentage(counts),
    )
