from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from ..core.constants import LOW_ATTENDANCE_THRESHOLD

logger = logging.getLogger(__name__)

NO_GATEWAY_ERROR = "no gateway configured"


@dataclass(frozen=True)
class SendResult:
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class OutgoingMessage:
    recipient: str
    message: str


class NotificationSender(Protocol):
    """Transport for alert messages (an SMS gateway in production)."""

    def send_alert(self, phone_number: str, display_name: str, percentage: float) -> SendResult:
        raise NotImplementedError

    def send_bulk(self, messages: Sequence[OutgoingMessage]) -> list[SendResult]:
        raise NotImplementedError


def parent_alert_message(display_name: str, percentage: float, threshold: float) -> str:
    return (
        f"Dear Parent, {display_name}'s attendance is {percentage:.1f}%, "
        f"below the required {threshold:g}%. Please contact the school."
    )


def admin_alert_message(display_name: str, student_code: str, percentage: float, threshold: float) -> str:
    return (
        f"Low Attendance Alert: {display_name} (ID: {student_code}) has {percentage:.1f}% attendance. "
        f"Threshold: {threshold:g}%."
    )


class LoggingNotificationSender(NotificationSender):
    """Writes alerts to the log instead of sending them.

    Used when no SMS gateway is wired in. Nothing is delivered, so results
    report failure unless ``report_as_sent`` is set (development, tests).
    """

    def __init__(self, *, threshold: float = LOW_ATTENDANCE_THRESHOLD, report_as_sent: bool = False):
        self._threshold = threshold
        self._report_as_sent = report_as_sent

    def _result(self) -> SendResult:
        if self._report_as_sent:
            return SendResult(success=True)
        return SendResult(success=False, error=NO_GATEWAY_ERROR)

    def send_alert(self, phone_number: str, display_name: str, percentage: float) -> SendResult:
        logger.info("[sms:%s] %s", phone_number, parent_alert_message(display_name, percentage, self._threshold))
        return self._result()

    def send_bulk(self, messages: Sequence[OutgoingMessage]) -> list[SendResult]:
        results = []
        for m in messages:
            logger.info("[sms:%s] %s", m.recipient, m.message)
            results.append(self._result())
        return results
