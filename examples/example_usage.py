"""Example: using the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.school_attendance.school_attendance.attendance.model import MarkRequest, PeriodWise
from src.school_attendance.school_attendance.container import build_container
from src.school_attendance.school_attendance.core.enums import AttendanceStatus


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    today = date.today()
    container.bulk_marking_service.mark_all_present(10, [101, 102, 103], today, acting_user_id=1)

    record = container.attendance_service.mark_attendance(
        MarkRequest(student_id=102, class_id=10, attendance_date=today, status=AttendanceStatus.LATE),
        acting_user_id=1,
    )
    print(record)

    container.attendance_service.mark_attendance(
        MarkRequest(
            student_id=101,
            class_id=10,
            attendance_date=today,
            status=AttendanceStatus.ABSENT,
            period=PeriodWise(3),
        ),
        acting_user_id=1,
    )
    print(container.alert_service.check_and_alert_low_attendance(101))


if __name__ == "__main__":
    main()
