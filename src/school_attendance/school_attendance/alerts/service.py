from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from ..attendance.model import DateRange, attendance_percentage, summarize
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import utc_now
from ..core.constants import LOW_ATTENDANCE_THRESHOLD
from ..core.exceptions import StudentNotFound
from ..students.model import StudentContact
from ..students.repository import StudentDirectory
from ..users.repository import UserDirectory
from .model import AlertDetails, AlertResult, SummaryReport
from .notifier import NotificationSender, OutgoingMessage, admin_alert_message

logger = logging.getLogger(__name__)


class AttendanceAlertService:
    """Attendance percentages and low-attendance notifications.

    Sending is best effort: a failing or raising sender is recorded as
    ``False`` in the alert details and never propagates to the caller.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentDirectory,
        users: UserDirectory,
        notifier: NotificationSender,
        *,
        threshold: float = LOW_ATTENDANCE_THRESHOLD,
    ):
        self._attendance = attendance
        self._students = students
        self._users = users
        self._notifier = notifier
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def calculate_attendance_percentage(self, student_id: int, date_range: DateRange | None = None) -> float:
        counts = self._attendance.count_by_status_for_student(student_id, date_range)
        return attendance_percentage(counts)

    def is_below_threshold(self, percentage: float) -> bool:
        return percentage < self._threshold

    def check_and_alert_low_attendance(self, student_id: int, date_range: DateRange | None = None) -> AlertResult:
        percentage = self.calculate_attendance_percentage(student_id, date_range)

        if not self.is_below_threshold(percentage):
            return AlertResult(
                student_id=int(student_id),
                attendance_percentage=percentage,
                below_threshold=False,
                alert_sent=False,
            )

        student = self._students.get_contact(student_id)
        if not student:
            raise StudentNotFound(f"Student with ID {student_id} not found")

        parent_notified = self._notify_parent(student, percentage)
        admin_notified = self._notify_admins(student, percentage)

        return AlertResult(
            student_id=int(student_id),
            attendance_percentage=percentage,
            below_threshold=True,
            alert_sent=parent_notified or admin_notified,
            alert_details=AlertDetails(parent_notified=parent_notified, admin_notified=admin_notified),
        )

    def batch_check_low_attendance(
        self,
        student_ids: Iterable[int],
        date_range: DateRange | None = None,
    ) -> list[AlertResult]:
        ids = list(student_ids)
        results: list[AlertResult] = []

        for student_id in ids:
            try:
                results.append(self.check_and_alert_low_attendance(student_id, date_range))
            except Exception:
                logger.exception("Attendance check failed for student=%s, continuing batch", student_id)

        logger.info(
            "Batch attendance check: students=%s processed=%s below_threshold=%s alerts_sent=%s",
            len(ids),
            len(results),
            sum(1 for r in results if r.below_threshold),
            sum(1 for r in results if r.alert_sent),
        )
        return results

    def generate_attendance_summary_report(
        self,
        student_id: int,
        date_range: DateRange | None = None,
        *,
        now: datetime | None = None,
    ) -> SummaryReport:
        summary = summarize(student_id, self._attendance.count_by_status_for_student(student_id, date_range))
        student = self._students.get_contact(student_id)

        return SummaryReport(
            student_id=int(student_id),
            student_name=student.display_name if student else None,
            date_range=date_range or DateRange(),
            summary=summary,
            meets_threshold=not self.is_below_threshold(summary.attendance_percentage),
            threshold=self._threshold,
            difference=round(summary.attendance_percentage - self._threshold, 2),
            generated_at=now or utc_now(),
        )

    def _notify_parent(self, student: StudentContact, percentage: float) -> bool:
        phone = student.parent_phone
        if not phone:
            logger.warning("No parent phone for student=%s, parent alert not sent", student.student_id)
            return False

        try:
            result = self._notifier.send_alert(phone, student.display_name, percentage)
        except Exception:
            logger.exception("Parent alert raised for student=%s", student.student_id)
            return False

        if result.success:
            logger.info("Low attendance alert sent to parent of student=%s (%.2f%%)", student.student_id, percentage)
        else:
            logger.warning("Parent alert failed for student=%s: %s", student.student_id, result.error)
        return bool(result.success)

    def _notify_admins(self, student: StudentContact, percentage: float) -> bool:
        try:
            admins = self._users.find_admins()
        except Exception:
            logger.exception("Admin lookup failed for student=%s", student.student_id)
            return False

        messages = [
            OutgoingMessage(
                recipient=admin.phone_number,
                message=admin_alert_message(student.display_name, student.student_code, percentage, self._threshold),
            )
            for admin in admins
            if admin.phone_number
        ]
        if not messages:
            logger.warning("No admin with a phone number for student=%s, admin alert not sent", student.student_id)
            return False

        try:
            results = self._notifier.send_bulk(messages)
        except Exception:
            logger.exception("Admin alert raised for student=%s", student.student_id)
            return False

        sent = sum(1 for r in results if r.success)
        logger.info("Low attendance alert to admins for student=%s: %s/%s sent", student.student_id, sent, len(messages))
        return sent > 0
