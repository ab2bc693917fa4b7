from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import hours_between, utc_now
from ..common.secondary_calendar import SecondaryCalendar, secondary_date
from ..common.validators import unique_in_order
from ..core.enums import AttendanceStatus, SyncStatus
from ..core.exceptions import EmptyBatchError
from .model import DAY_WISE, AttendanceChange, AttendanceRecord, NewAttendance, Period
from .policy import CorrectionWindowPolicy
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass
class BulkMarkPlan:
    """How each requested student is handled by a mark-all-present run."""

    to_create: list[int] = field(default_factory=list)
    to_update: list[AttendanceRecord] = field(default_factory=list)
    unchanged: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class BulkMarkReport:
    records: list[AttendanceRecord]
    created: int
    updated: int
    unchanged: list[int]
    skipped: list[int]


class BulkMarkingService:
    """Marks a whole class present in one call.

    Students that already have a present record are left alone and records
    outside the correction window are never touched, so running the same
    call twice creates nothing the second time.
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

    def plan(
        self,
        *,
        student_ids: Sequence[int],
        existing: Sequence[AttendanceRecord],
        now: datetime,
    ) -> BulkMarkPlan:
        by_student = {r.student_id: r for r in existing}
        plan = BulkMarkPlan()

        for student_id in student_ids:
            record = by_student.get(student_id)
            if record is None:
                plan.to_create.append(student_id)
            elif not self._policy.can_correct(record.marked_at, now):
                logger.warning(
                    "Skipping attendance id=%s student=%s: marked %.1fh ago, outside correction window",
                    record.attendance_id,
                    student_id,
                    hours_between(record.marked_at, now),
                )
                plan.skipped.append(student_id)
            elif record.status == AttendanceStatus.PRESENT:
                plan.unchanged.append(student_id)
            else:
                plan.to_update.append(record)

        return plan

    def mark_all_present_report(
        self,
        class_id: int,
        student_ids: Sequence[int],
        attendance_date: date,
        date_bs: Optional[str] = None,
        period: Period = DAY_WISE,
        *,
        acting_user_id: int,
        now: datetime | None = None,
    ) -> BulkMarkReport:
        if not student_ids:
            raise EmptyBatchError("No students provided for marking attendance")

        now = now or utc_now()
        ids = unique_in_order(int(s) for s in student_ids)

        logger.info(
            "Marking all present class=%s date=%s period=%s students=%s",
            class_id,
            attendance_date,
            period.period_number,
            len(ids),
        )

        existing = self._attendance.list_for_class_and_date(class_id, attendance_date, period)
        plan = self.plan(student_ids=ids, existing=existing, now=now)

        created: list[AttendanceRecord] = []
        if plan.to_create:
            bs = secondary_date(self._calendar, attendance_date, date_bs)
            created = self._attendance.bulk_create(
                [
                    NewAttendance(
                        student_id=student_id,
                        class_id=int(class_id),
                        attendance_date=attendance_date,
                        period=period,
                        status=AttendanceStatus.PRESENT,
                        marked_by=int(acting_user_id),
                        marked_at=now,
                        sync_status=SyncStatus.SYNCED,
                        date_bs=bs,
                    )
                    for student_id in plan.to_create
                ]
            )

        updated: list[AttendanceRecord] = []
        for record in plan.to_update:
            result = self._attendance.update(
                record.attendance_id,
                AttendanceChange(
                    status=AttendanceStatus.PRESENT,
                    remarks=record.remarks,
                    marked_by=int(acting_user_id),
                    marked_at=now,
                ),
            )
            if result:
                updated.append(result)

        logger.info(
            "Mark all present done class=%s created=%s updated=%s unchanged=%s skipped=%s",
            class_id,
            len(created),
            len(updated),
            len(plan.unchanged),
            len(plan.skipped),
        )

        return BulkMarkReport(
            records=[*created, *updated],
            created=len(created),
            updated=len(updated),
            unchanged=plan.unchanged,
            skipped=plan.skipped,
        )

    def mark_all_present(
        self,
        class_id: int,
        student_ids: Sequence[int],
        attendance_date: date,
        date_bs: Optional[str] = None,
        period: Period = DAY_WISE,
        *,
        acting_user_id: int,
        now: datetime | None = None,
    ) -> list[AttendanceRecord]:
        report = self.mark_all_present_report(
            class_id,
            student_ids,
            attendance_date,
            date_bs,
            period,
            acting_user_id=acting_user_id,
            now=now,
        )
        return report.records
