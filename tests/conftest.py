from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.school_attendance.school_attendance.alerts.notifier import OutgoingMessage, SendResult
from src.school_attendance.school_attendance.attendance.model import (
    AttendanceChange,
    AttendanceRecord,
    DateRange,
    NewAttendance,
    StatusCounts,
)
from src.school_attendance.school_attendance.common.datetime_utils import utc_now
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Role, SyncStatus
from src.school_attendance.school_attendance.students.model import StudentContact
from src.school_attendance.school_attendance.users.model import AdminContact


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


class InMemoryAttendance:
    """Attendance store fake honouring the natural-key uniqueness."""

    def __init__(self, clock=None):
        self._rows: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._clock = clock or utc_now
        self.bulk_create_calls = 0
        self.update_calls = 0

    # helpers for tests
    def seed(self, **fields) -> AttendanceRecord:
        new = NewAttendance(**fields)
        return self.create(new)

    def all(self) -> list[AttendanceRecord]:
        return list(self._rows.values())

    def _key(self, r) -> tuple:
        return (r.student_id, r.class_id, r.attendance_date, r.period)

    def create(self, new: NewAttendance) -> AttendanceRecord:
        if any(self._key(r) == self._key(new) for r in self._rows.values()):
            raise AssertionError(f"duplicate natural key {self._key(new)}")
        self._id += 1
        stamp = self._clock()
        rec = AttendanceRecord(
            attendance_id=self._id,
            student_id=new.student_id,
            class_id=new.class_id,
            attendance_date=new.attendance_date,
            period=new.period,
            status=new.status,
            marked_by=new.marked_by,
            marked_at=new.marked_at,
            sync_status=new.sync_status,
            remarks=new.remarks,
            date_bs=new.date_bs,
            created_at=stamp,
            updated_at=stamp,
        )
        self._rows[rec.attendance_id] = rec
        return rec

    def bulk_create(self, news):
        self.bulk_create_calls += 1
        return [self.create(n) for n in news]

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._rows.get(attendance_id)

    def get_for_student_and_date(self, student_id, attendance_date, period=None, *, class_id=None):
        for r in self._rows.values():
            if r.student_id != student_id or r.attendance_date != attendance_date:
                continue
            if class_id is not None and r.class_id != class_id:
                continue
            if period is not None and r.period != period:
                continue
            return r
        return None

    def list_for_class_and_date(self, class_id, attendance_date, period=None):
        items = [
            r
            for r in self._rows.values()
            if r.class_id == class_id and r.attendance_date == attendance_date and (period is None or r.period == period)
        ]
        return sorted(items, key=lambda r: r.student_id)

    def list_for_student_and_range(self, student_id, date_range: DateRange):
        items = [r for r in self._rows.values() if r.student_id == student_id and date_range.contains(r.attendance_date)]
        return sorted(items, key=lambda r: r.attendance_date)

    def exists(self, student_id, attendance_date, period=None, *, exclude_id=None) -> bool:
        return any(
            r.student_id == student_id
            and r.attendance_date == attendance_date
            and (period is None or r.period == period)
            and r.attendance_id != exclude_id
            for r in self._rows.values()
        )

    def update(self, attendance_id: int, change: AttendanceChange):
        self.update_calls += 1
        r = self._rows.get(attendance_id)
        if not r:
            return None
        updated = replace(
            r,
            status=change.status,
            remarks=change.remarks,
            marked_by=change.marked_by,
            marked_at=change.marked_at,
            updated_at=self._clock(),
        )
        self._rows[attendance_id] = updated
        return updated

    def delete(self, attendance_id: int) -> bool:
        return self._rows.pop(attendance_id, None) is not None

    def count_by_status_for_student(self, student_id, date_range=None) -> StatusCounts:
        rows = [
            r
            for r in self._rows.values()
            if r.student_id == student_id and (date_range is None or date_range.contains(r.attendance_date))
        ]

        def n(status):
            return sum(1 for r in rows if r.status == status)

        return StatusCounts(
            present=n(AttendanceStatus.PRESENT),
            absent=n(AttendanceStatus.ABSENT),
            late=n(AttendanceStatus.LATE),
            excused=n(AttendanceStatus.EXCUSED),
            total=len(rows),
        )

    def list_pending_sync(self, limit=100):
        return [r for r in self._rows.values() if r.sync_status == SyncStatus.PENDING][:limit]

    def list_error_sync(self, limit=100):
        return [r for r in self._rows.values() if r.sync_status == SyncStatus.ERROR][:limit]

    def update_sync_status(self, attendance_id, status):
        r = self._rows.get(attendance_id)
        if not r:
            return None
        self._rows[attendance_id] = replace(r, sync_status=status)
        return self._rows[attendance_id]

    def bulk_update_sync_status(self, attendance_ids, status) -> int:
        return sum(1 for i in attendance_ids if self.update_sync_status(i, status))


class InMemoryStudents:
    def __init__(self, contacts: dict[int, StudentContact] | None = None):
        self.contacts = contacts or {}

    def get_contact(self, student_id: int):
        return self.contacts.get(student_id)


class InMemoryUsers:
    def __init__(self, admins: list[AdminContact] | None = None):
        self.admins = admins or []

    def find_admins(self):
        return list(self.admins)


class RecordingSender:
    """Notification sender fake; records every call."""

    def __init__(self, *, alert_ok: bool = True, bulk_ok: bool = True, raise_on_send: bool = False):
        self.alert_ok = alert_ok
        self.bulk_ok = bulk_ok
        self.raise_on_send = raise_on_send
        self.alerts: list[tuple[str, str, float]] = []
        self.bulk: list[list[OutgoingMessage]] = []

    def send_alert(self, phone_number, display_name, percentage):
        self.alerts.append((phone_number, display_name, percentage))
        if self.raise_on_send:
            raise ConnectionError("gateway down")
        return SendResult(success=self.alert_ok, error=None if self.alert_ok else "rejected")

    def send_bulk(self, messages):
        self.bulk.append(list(messages))
        if self.raise_on_send:
            raise ConnectionError("gateway down")
        return [SendResult(success=self.bulk_ok, error=None if self.bulk_ok else "rejected") for _ in messages]


@pytest.fixture
def attendance_repo(fixed_now) -> InMemoryAttendance:
    return InMemoryAttendance(clock=lambda: fixed_now)


@pytest.fixture
def student() -> StudentContact:
    return StudentContact(
        student_id=7,
        display_name="Sita Kumari Sharma",
        student_code="STU-2026-007",
        father_phone="9800000001",
        mother_phone="9800000002",
    )


@pytest.fixture
def admins() -> list[AdminContact]:
    return [
        AdminContact(user_id=1, username="principal", role=Role.SCHOOL_ADMIN, phone_number="9811111111"),
        AdminContact(user_id=2, username="office", role=Role.SCHOOL_ADMIN, phone_number=None),
        AdminContact(user_id=3, username="vice", role=Role.SCHOOL_ADMIN, phone_number="9822222222"),
    ]


def seed_statuses(repo: InMemoryAttendance, student_id: int, statuses, *, start: date, marked_at: datetime):
    """Create one day-wise record per status on consecutive days."""
    for offset, status in enumerate(statuses):
        repo.seed(
            student_id=student_id,
            class_id=1,
            attendance_date=date.fromordinal(start.toordinal() + offset),
            status=status,
            marked_by=99,
            marked_at=marked_at,
        )
