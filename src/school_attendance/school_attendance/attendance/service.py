from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import utc_now
from ..common.secondary_calendar import SecondaryCalendar, secondary_date
from ..core.constants import DEFAULT_SYNC_BATCH_LIMIT
from ..core.enums import SyncStatus
from ..core.exceptions import CorrectionWindowExceeded, DeletionWindowExceeded, ValidationError
from .model import (
    AttendanceChange,
    AttendanceRecord,
    AttendanceSummary,
    DateRange,
    MarkRequest,
    NewAttendance,
    Period,
    summarize,
)
from .policy import CorrectionWindowPolicy
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Single-record marking, correction and deletion.

    Every mutation of an existing record goes through the correction window
    policy. A successful correction moves ``marked_at`` forward, which also
    restarts the window for that record.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        policy: CorrectionWindowPolicy | None = None,
        calendar: SecondaryCalendar | None = None,
    ):
        self._attendance = attendance
        self._policy = policy or CorrectionWindowPolicy()
        self._calendar = calendar

    @property
    def policy(self) -> CorrectionWindowPolicy:
        return self._policy

    def can_correct_attendance(self, marked_at: datetime, *, now: datetime | None = None) -> bool:
        return self._policy.can_correct(marked_at, now or utc_now())

    def mark_attendance(self, data: MarkRequest, acting_user_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        if data.sync_status not in (None, SyncStatus.PENDING):
            raise ValidationError("sync_status may only be set to pending when marking attendance")
        now = now or utc_now()

        existing = self._attendance.get_for_student_and_date(
            data.student_id,
            data.attendance_date,
            data.period,
            class_id=data.class_id,
        )

        if existing:
            if not self._policy.can_correct(existing.marked_at, now):
                raise CorrectionWindowExceeded(existing.marked_at, window_hours=self._policy.window_hours)

            logger.info(
                "Correcting attendance id=%s student=%s %s -> %s",
                existing.attendance_id,
                data.student_id,
                existing.status.value,
                data.status.value,
            )
            updated = self._attendance.update(
                existing.attendance_id,
                AttendanceChange(
                    status=data.status,
                    remarks=data.remarks,
                    marked_by=int(acting_user_id),
                    marked_at=now,
                ),
            )
            if not updated:
                raise ValidationError("Failed to update attendance record")
            return updated

        created = self._attendance.create(
            NewAttendance(
                student_id=data.student_id,
                class_id=data.class_id,
                attendance_date=data.attendance_date,
                period=data.period,
                status=data.status,
                marked_by=int(acting_user_id),
                marked_at=now,
                sync_status=data.sync_status or SyncStatus.SYNCED,
                remarks=data.remarks,
                date_bs=secondary_date(self._calendar, data.attendance_date, data.date_bs),
            )
        )
        logger.info(
            "Attendance marked id=%s student=%s status=%s",
            created.attendance_id,
            created.student_id,
            created.status.value,
        )
        return created

    def delete_attendance(self, attendance_id: int, acting_user_id: int, *, now: datetime | None = None) -> bool:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            return False

        if not self._policy.can_correct(record.marked_at, now or utc_now()):
            raise DeletionWindowExceeded(record.marked_at, window_hours=self._policy.window_hours)

        deleted = self._attendance.delete(attendance_id)
        if deleted:
            logger.info("Attendance id=%s deleted by user=%s", attendance_id, acting_user_id)
        return deleted

    def has_duplicate_attendance(
        self,
        student_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
        *,
        exclude_id: Optional[int] = None,
    ) -> bool:
        return self._attendance.exists(student_id, attendance_date, period, exclude_id=exclude_id)

    def get_class_attendance(
        self,
        class_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_class_and_date(class_id, attendance_date, period)

    def get_student_attendance(self, student_id: int, date_range: DateRange) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_student_and_range(student_id, date_range)

    def get_attendance_summary(self, student_id: int, date_range: DateRange | None = None) -> AttendanceSummary:
        return summarize(student_id, self._attendance.count_by_status_for_student(student_id, date_range))

    # Offline sync bookkeeping

    def list_pending_sync(self, *, limit: int = DEFAULT_SYNC_BATCH_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_pending_sync(limit)

    def list_sync_errors(self, *, limit: int = DEFAULT_SYNC_BATCH_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_error_sync(limit)

    def record_sync_result(self, attendance_ids: Iterable[int], status: SyncStatus) -> int:
        ids = [int(i) for i in attendance_ids]
        if not ids:
            return 0
        if len(ids) == 1:
            return 1 if self._attendance.update_sync_status(ids[0], status) else 0
        count = self._attendance.bulk_update_sync_status(ids, status)
        logger.info("Sync status %s recorded for %s record(s)", status.value, count)
        return count
