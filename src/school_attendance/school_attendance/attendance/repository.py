from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_SYNC_BATCH_LIMIT
from ..core.enums import SyncStatus
from .model import AttendanceChange, AttendanceRecord, DateRange, NewAttendance, Period, StatusCounts


class AttendanceRepository(Protocol):
    """Persistence boundary for attendance records.

    A thin record mapper: no business validation happens here. Every create
    and update stamps server-observed ``created_at`` / ``updated_at``.
    ``period=None`` on lookups means "any period".
    """

    def create(self, new: NewAttendance) -> AttendanceRecord:
        raise NotImplementedError

    def bulk_create(self, news: Sequence[NewAttendance]) -> list[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(
        self,
        student_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
        *,
        class_id: Optional[int] = None,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_class_and_date(
        self,
        class_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student_and_range(self, student_id: int, date_range: DateRange) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def exists(
        self,
        student_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
        *,
        exclude_id: Optional[int] = None,
    ) -> bool:
        raise NotImplementedError

    def update(self, attendance_id: int, change: AttendanceChange) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def count_by_status_for_student(self, student_id: int, date_range: Optional[DateRange] = None) -> StatusCounts:
        raise NotImplementedError

    def list_pending_sync(self, limit: int = DEFAULT_SYNC_BATCH_LIMIT) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_error_sync(self, limit: int = DEFAULT_SYNC_BATCH_LIMIT) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def update_sync_status(self, attendance_id: int, status: SyncStatus) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def bulk_update_sync_status(self, attendance_ids: Iterable[int], status: SyncStatus) -> int:
        raise NotImplementedError
