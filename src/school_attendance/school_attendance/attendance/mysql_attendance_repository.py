from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import DEFAULT_SYNC_BATCH_LIMIT
from ..core.enums import AttendanceStatus, SyncStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone, in_placeholders
from .model import (
    AttendanceChange,
    AttendanceRecord,
    DateRange,
    NewAttendance,
    Period,
    StatusCounts,
    period_of,
)
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, student_id, class_id, attendance_date, date_bs, status, period_number,
    marked_by, marked_at, remarks, sync_status, created_at, updated_at
"""

_INSERT = """
    INSERT INTO attendance(
        student_id, class_id, attendance_date, date_bs, status, period_number,
        marked_by, marked_at, remarks, sync_status
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        attendance_date=r["attendance_date"],
        period=period_of(r.get("period_number")),
        status=AttendanceStatus(r["status"]),
        marked_by=int(r["marked_by"]),
        marked_at=r["marked_at"],
        sync_status=SyncStatus(r["sync_status"]),
        remarks=r.get("remarks"),
        date_bs=r.get("date_bs"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _insert_params(new: NewAttendance) -> tuple:
    return (
        new.student_id,
        new.class_id,
        new.attendance_date,
        new.date_bs,
        new.status.value,
        new.period.period_number,
        new.marked_by,
        new.marked_at,
        new.remarks,
        new.sync_status.value,
    )


def _period_clause(period: Optional[Period], clauses: list[str], params: list[Any]) -> None:
    if period is None:
        return
    if period.period_number is None:
        clauses.append("period_number IS NULL")
    else:
        clauses.append("period_number=%s")
        params.append(int(period.period_number))


def _range_clause(date_range: Optional[DateRange], clauses: list[str], params: list[Any]) -> None:
    if date_range is None:
        return
    if date_range.start is not None:
        clauses.append("attendance_date >= %s")
        params.append(date_range.start)
    if date_range.end is not None:
        clauses.append("attendance_date <= %s")
        params.append(date_range.end)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_by_id(self, cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
        r = fetchone(cur)
        return _row_to_record(r) if r else None

    def create(self, new: NewAttendance) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT, _insert_params(new))
            return self._select_by_id(cur, int(cur.lastrowid))

    def bulk_create(self, news: Sequence[NewAttendance]) -> list[AttendanceRecord]:
        if not news:
            return []
        # Single transaction: either every row lands or none does.
        with db_cursor(self._conn_factory) as (_, cur):
            ids: list[int] = []
            for new in news:
                cur.execute(_INSERT, _insert_params(new))
                ids.append(int(cur.lastrowid))

            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id IN ({in_placeholders(len(ids))}) ORDER BY attendance_id",
                tuple(ids),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, attendance_id)

    def get_for_student_and_date(
        self,
        student_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
        *,
        class_id: Optional[int] = None,
    ) -> Optional[AttendanceRecord]:
        clauses = ["student_id=%s", "attendance_date=%s"]
        params: list[Any] = [int(student_id), attendance_date]
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(class_id))
        _period_clause(period, clauses, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE {' AND '.join(clauses)} ORDER BY attendance_id LIMIT 1",
                tuple(params),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_class_and_date(
        self,
        class_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["class_id=%s", "attendance_date=%s"]
        params: list[Any] = [int(class_id), attendance_date]
        _period_clause(period, clauses, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE {' AND '.join(clauses)} ORDER BY student_id ASC",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_student_and_range(self, student_id: int, date_range: DateRange) -> Sequence[AttendanceRecord]:
        clauses = ["student_id=%s"]
        params: list[Any] = [int(student_id)]
        _range_clause(date_range, clauses, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE {' AND '.join(clauses)} ORDER BY attendance_date ASC",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def exists(
        self,
        student_id: int,
        attendance_date: date,
        period: Optional[Period] = None,
        *,
        exclude_id: Optional[int] = None,
    ) -> bool:
        clauses = ["student_id=%s", "attendance_date=%s"]
        params: list[Any] = [int(student_id), attendance_date]
        _period_clause(period, clauses, params)
        if exclude_id is not None:
            clauses.append("attendance_id<>%s")
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance WHERE {' AND '.join(clauses)}", tuple(params))
            return fetch_count(cur) > 0

    def update(self, attendance_id: int, change: AttendanceChange) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, remarks=%s, marked_by=%s, marked_at=%s
                WHERE attendance_id=%s
                """,
                (change.status.value, change.remarks, int(change.marked_by), change.marked_at, int(attendance_id)),
            )
            # rowcount is 0 for a no-op update too, so re-read instead of trusting it.
            return self._select_by_id(cur, attendance_id)

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def count_by_status_for_student(self, student_id: int, date_range: Optional[DateRange] = None) -> StatusCounts:
        clauses = ["student_id=%s"]
        params: list[Any] = [int(student_id)]
        _range_clause(date_range, clauses, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status, COUNT(*) AS n
                FROM attendance
                WHERE {' AND '.join(clauses)}
                GROUP BY status
                """,
                tuple(params),
            )
            by_status = {AttendanceStatus(r["status"]): int(r["n"]) for r in fetchall(cur)}

        return StatusCounts(
            present=by_status.get(AttendanceStatus.PRESENT, 0),
            absent=by_status.get(AttendanceStatus.ABSENT, 0),
            late=by_status.get(AttendanceStatus.LATE, 0),
            excused=by_status.get(AttendanceStatus.EXCUSED, 0),
            total=sum(by_status.values()),
        )

    def _list_by_sync_status(self, status: SyncStatus, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE sync_status=%s
                ORDER BY created_at ASC
                LIMIT %s
                """,
                (status.value, int(limit)),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_pending_sync(self, limit: int = DEFAULT_SYNC_BATCH_LIMIT) -> Sequence[AttendanceRecord]:
        return self._list_by_sync_status(SyncStatus.PENDING, limit)

    def list_error_sync(self, limit: int = DEFAULT_SYNC_BATCH_LIMIT) -> Sequence[AttendanceRecord]:
        return self._list_by_sync_status(SyncStatus.ERROR, limit)

    def update_sync_status(self, attendance_id: int, status: SyncStatus) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance SET sync_status=%s WHERE attendance_id=%s",
                (status.value, int(attendance_id)),
            )
            return self._select_by_id(cur, attendance_id)

    def bulk_update_sync_status(self, attendance_ids: Iterable[int], status: SyncStatus) -> int:
        ids = [int(i) for i in attendance_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance SET sync_status=%s WHERE attendance_id IN ({in_placeholders(len(ids))})",
                (status.value, *ids),
            )
            return int(cur.rowcount)
