from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from urllib.parse import quote

import pytest
from conftest import InMemoryAttendance, InMemoryStudents, InMemoryUsers, RecordingSender

from src.school_attendance.school_attendance.alerts.service import AttendanceAlertService
from src.school_attendance.school_attendance.attendance.bulk import BulkMarkingService
from src.school_attendance.school_attendance.attendance.policy import CorrectionWindowPolicy
from src.school_attendance.school_attendance.attendance.service import AttendanceService
from src.school_attendance.school_attendance.common.datetime_utils import utc_now
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.main import create_app


@pytest.fixture
def repo():
    return InMemoryAttendance()


@pytest.fixture
def client(monkeypatch, repo, student, admins):
    monkeypatch.setenv("APP_ENV", "testing")
    policy = CorrectionWindowPolicy()
    container = SimpleNamespace(
        attendance_service=AttendanceService(repo, policy=policy),
        bulk_marking_service=BulkMarkingService(repo, policy=policy),
        alert_service=AttendanceAlertService(
            repo,
            InMemoryStudents({student.student_id: student}),
            InMemoryUsers(admins),
            RecordingSender(),
        ),
    )
    app = create_app(container=container)
    return app.test_client()


def _login(client, user_id=42):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def test_requires_login(client):
    resp = client.post("/api/attendance", json={})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_mark_attendance_then_correct(client):
    _login(client)
    body = {"student_id": 7, "class_id": 10, "date": "2026-02-02", "status": "absent"}

    first = client.post("/api/attendance", json=body)
    second = client.post("/api/attendance", json={**body, "status": "present", "remarks": " arrived "})

    assert first.status_code == 200
    assert second.status_code == 200
    data = second.get_json()["data"]
    assert data["attendance_id"] == first.get_json()["data"]["attendance_id"]
    assert data["status"] == "present"
    assert data["remarks"] == "arrived"
    assert data["marked_by"] == 42
    assert data["period_number"] is None


def test_mark_attendance_validation_errors(client):
    _login(client)

    bad_status = client.post(
        "/api/attendance", json={"student_id": 7, "class_id": 10, "date": "2026-02-02", "status": "holiday"}
    )
    bad_date = client.post("/api/attendance", json={"student_id": 7, "class_id": 10, "date": "02/02/2026", "status": "present"})
    bad_period = client.post(
        "/api/attendance",
        json={"student_id": 7, "class_id": 10, "date": "2026-02-02", "status": "present", "period_number": 0},
    )

    assert bad_status.status_code == 400
    assert "status must be one of" in bad_status.get_json()["message"]
    assert bad_date.status_code == 400
    assert bad_period.status_code == 400


def test_correction_outside_window_is_conflict(client, repo):
    _login(client)
    marked_at = utc_now() - timedelta(hours=30)
    repo.seed(
        student_id=7,
        class_id=10,
        attendance_date=date(2026, 2, 2),
        status=AttendanceStatus.ABSENT,
        marked_by=5,
        marked_at=marked_at,
    )

    resp = client.post(
        "/api/attendance", json={"student_id": 7, "class_id": 10, "date": "2026-02-02", "status": "present"}
    )

    assert resp.status_code == 409
    payload = resp.get_json()
    assert payload["marked_at"] == marked_at.isoformat()
    assert marked_at.isoformat() in payload["message"]


def test_mark_all_present_reports_counts(client, repo):
    _login(client)
    repo.seed(
        student_id=2,
        class_id=10,
        attendance_date=date(2026, 2, 2),
        status=AttendanceStatus.PRESENT,
        marked_by=5,
        marked_at=utc_now(),
    )

    resp = client.post(
        "/api/attendance/mark-all-present", json={"class_id": 10, "student_ids": [1, 2, 3], "date": "2026-02-02"}
    )

    payload = resp.get_json()
    assert resp.status_code == 200
    assert payload["created"] == 2
    assert payload["updated"] == 0
    assert payload["unchanged"] == [2]
    assert payload["skipped"] == []
    assert sorted(r["student_id"] for r in payload["data"]) == [1, 3]


def test_mark_all_present_empty_list_rejected(client):
    _login(client)

    resp = client.post("/api/attendance/mark-all-present", json={"class_id": 10, "student_ids": [], "date": "2026-02-02"})

    assert resp.status_code == 400


def test_delete_attendance(client, repo):
    _login(client)
    rec = repo.seed(
        student_id=7,
        class_id=10,
        attendance_date=date(2026, 2, 2),
        status=AttendanceStatus.ABSENT,
        marked_by=5,
        marked_at=utc_now(),
    )

    assert client.delete(f"/api/attendance/{rec.attendance_id}").status_code == 200
    assert client.delete(f"/api/attendance/{rec.attendance_id}").status_code == 404


def test_can_correct_endpoint(client):
    _login(client)
    recent = (utc_now() - timedelta(hours=1)).isoformat()
    old = (utc_now() - timedelta(hours=48)).isoformat()

    assert client.get(f"/api/attendance/can-correct?marked_at={recent}").get_json()["can_correct"] is True
    assert client.get(f"/api/attendance/can-correct?marked_at={old}").get_json()["can_correct"] is False
    assert client.get("/api/attendance/can-correct?marked_at=yesterday").status_code == 400


def test_can_correct_accepts_offset_timestamps(client):
    _login(client)
    aware_recent = datetime.now(timezone.utc) - timedelta(hours=1)
    aware_old = datetime.now(timezone(timedelta(hours=5, minutes=45))) - timedelta(hours=30)

    recent = client.get(f"/api/attendance/can-correct?marked_at={quote(aware_recent.isoformat())}")
    old = client.get(f"/api/attendance/can-correct?marked_at={quote(aware_old.isoformat())}")

    assert recent.status_code == 200
    assert recent.get_json()["can_correct"] is True
    assert old.status_code == 200
    assert old.get_json()["can_correct"] is False


def test_mark_attendance_rejects_non_pending_sync_status(client, repo):
    _login(client)
    body = {"student_id": 7, "class_id": 10, "date": "2026-02-02", "status": "present"}

    rejected = client.post("/api/attendance", json={**body, "sync_status": "error"})
    pending = client.post("/api/attendance", json={**body, "sync_status": "pending"})

    assert rejected.status_code == 400
    assert "pending" in rejected.get_json()["message"]
    assert pending.status_code == 200
    assert pending.get_json()["data"]["sync_status"] == "pending"
    assert len(repo.all()) == 1


def test_class_listing_summary_and_alert(client, repo):
    _login(client)
    for day, status in ((1, AttendanceStatus.PRESENT), (2, AttendanceStatus.ABSENT), (3, AttendanceStatus.ABSENT)):
        repo.seed(
            student_id=7,
            class_id=10,
            attendance_date=date(2026, 2, day),
            status=status,
            marked_by=5,
            marked_at=utc_now(),
        )

    listing = client.get("/api/attendance/class/10?date=2026-02-01").get_json()["data"]
    summary = client.get("/api/attendance/student/7/summary").get_json()["data"]
    ranged = client.get("/api/attendance/student/7/percentage?date_from=2026-02-02").get_json()["data"]
    alert = client.post("/api/attendance/student/7/low-attendance-check").get_json()["data"]
    batch = client.post("/api/attendance/low-attendance-check", json={"student_ids": [7, 999]}).get_json()["data"]

    assert [r["student_id"] for r in listing] == [7]
    assert summary["total_days"] == 3
    assert summary["attendance_percentage"] == 33.33
    assert ranged["attendance_percentage"] == 0.0
    assert alert["below_threshold"] is True
    assert alert["alert_details"] == {"parent_notified": True, "admin_notified": True}
    # 999 has no records, so it is at 0% and missing from the directory
    assert [r["student_id"] for r in batch] == [7]


def test_bad_date_range_rejected(client):
    _login(client)

    resp = client.get("/api/attendance/student/7/summary?date_from=2026-03-01&date_to=2026-02-01")

    assert resp.status_code == 400
