from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles known to the attendance engine."""

    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class SyncStatus(str, Enum):
    """Offline-first bookkeeping flag, unrelated to the correction window."""

    SYNCED = "synced"
    PENDING = "pending"
    ERROR = "error"
