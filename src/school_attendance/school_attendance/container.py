from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .alerts.notifier import LoggingNotificationSender, NotificationSender
from .alerts.service import AttendanceAlertService
from .attendance.bulk import BulkMarkingService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import CorrectionWindowPolicy
from .attendance.service import AttendanceService
from .common.secondary_calendar import SecondaryCalendar
from .core.constants import DEFAULT_CORRECTION_WINDOW_HOURS, LOW_ATTENDANCE_THRESHOLD
from .core.enums import Role
from .database.connection import DBConfig, DatabaseConnection
from .students.mysql_student_repository import MySQLStudentDirectory
from .users.mysql_user_repository import MySQLUserDirectory


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    students_repo: MySQLStudentDirectory
    users_repo: MySQLUserDirectory

    policy: CorrectionWindowPolicy
    attendance_service: AttendanceService
    bulk_marking_service: BulkMarkingService
    alert_service: AttendanceAlertService


def build_container(
    *,
    db_config: dict,
    correction_window_hours: float = DEFAULT_CORRECTION_WINDOW_HOURS,
    low_attendance_threshold: float = LOW_ATTENDANCE_THRESHOLD,
    admin_role: str = Role.SCHOOL_ADMIN.value,
    notifier: Optional[NotificationSender] = None,
    log_alerts_as_sent: bool = False,
    calendar: Optional[SecondaryCalendar] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    students_repo = MySQLStudentDirectory(conn)
    users_repo = MySQLUserDirectory(conn, admin_role=Role(admin_role))

    policy = CorrectionWindowPolicy(window_hours=correction_window_hours)
    attendance_service = AttendanceService(attendance_repo, policy=policy, calendar=calendar)
    bulk_marking_service = BulkMarkingService(attendance_repo, policy=policy, calendar=calendar)
    alert_service = AttendanceAlertService(
        attendance_repo,
        students_repo,
        users_repo,
        notifier or LoggingNotificationSender(threshold=low_attendance_threshold, report_as_sent=log_alerts_as_sent),
        threshold=low_attendance_threshold,
    )

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        students_repo=students_repo,
        users_repo=users_repo,
        policy=policy,
        attendance_service=attendance_service,
        bulk_marking_service=bulk_marking_service,
        alert_service=alert_service,
    )
