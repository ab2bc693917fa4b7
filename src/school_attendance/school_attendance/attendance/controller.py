from __future__ import annotations

from datetime import datetime
from functools import wraps

from flask import Flask, jsonify, request, session

from ..alerts.model import AlertResult
from ..common.datetime_utils import parse_iso_date, to_naive_utc
from ..common.validators import require_positive_int
from ..container import Container
from ..core.enums import AttendanceStatus, SyncStatus
from ..core.exceptions import ValidationError, WindowExceededError
from .model import AttendanceRecord, AttendanceSummary, DateRange, MarkRequest, period_of


def record_to_json(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "student_id": r.student_id,
        "class_id": r.class_id,
        "date": r.attendance_date.isoformat(),
        "date_bs": r.date_bs,
        "period_number": r.period_number,
        "status": r.status.value,
        "marked_by": r.marked_by,
        "marked_at": r.marked_at.isoformat(),
        "remarks": r.remarks,
        "sync_status": r.sync_status.value,
    }


def summary_to_json(s: AttendanceSummary) -> dict:
    return {
        "student_id": s.student_id,
        "total_days": s.total_days,
        "present_days": s.present_days,
        "absent_days": s.absent_days,
        "late_days": s.late_days,
        "excused_days": s.excused_days,
        "attendance_percentage": s.attendance_percentage,
    }


def alert_to_json(a: AlertResult) -> dict:
    data = {
        "student_id": a.student_id,
        "attendance_percentage": a.attendance_percentage,
        "below_threshold": a.below_threshold,
        "alert_sent": a.alert_sent,
    }
    if a.alert_details is not None:
        data["alert_details"] = {
            "parent_notified": a.alert_details.parent_notified,
            "admin_notified": a.alert_details.admin_notified,
        }
    return data


def _parse_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def _parse_date(value, field_name: str):
    if not value:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def _optional_period(value):
    if value in (None, ""):
        return period_of(None)
    return period_of(require_positive_int(value, "period_number"))


def _offline_sync_status(value):
    """Only the offline path may set a sync status on marking, and only to pending."""
    if value in (None, ""):
        return None
    status = _parse_enum(SyncStatus, value, "sync_status")
    if status != SyncStatus.PENDING:
        raise ValidationError("sync_status may only be set to pending when marking attendance")
    return status


def _date_range_from_args() -> DateRange | None:
    date_from = request.args.get("date_from")
    date_to = request.args.get("date_to")
    if not date_from and not date_to:
        return None
    try:
        return DateRange(
            start=_parse_date(date_from, "date_from") if date_from else None,
            end=_parse_date(date_to, "date_to") if date_to else None,
        )
    except ValueError as e:
        raise ValidationError(str(e))


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            return view(*args, **kwargs)

        return wrapper

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(WindowExceededError)
    def handle_window_exceeded(e: WindowExceededError):
        return jsonify({"success": False, "message": str(e), "marked_at": e.marked_at.isoformat()}), 409

    @app.route("/api/attendance", methods=["POST"], endpoint="api_mark_attendance")
    @login_required
    def mark_attendance():
        data = request.get_json(silent=True) or {}
        mark = MarkRequest(
            student_id=require_positive_int(data.get("student_id"), "student_id"),
            class_id=require_positive_int(data.get("class_id"), "class_id"),
            attendance_date=_parse_date(data.get("date"), "date"),
            status=_parse_enum(AttendanceStatus, data.get("status"), "status"),
            period=_optional_period(data.get("period_number")),
            remarks=(data.get("remarks") or "").strip() or None,
            date_bs=data.get("date_bs") or None,
            sync_status=_offline_sync_status(data.get("sync_status")),
        )
        record = container.attendance_service.mark_attendance(mark, int(session["user_id"]))
        return jsonify({"success": True, "data": record_to_json(record)}), 200

    @app.route("/api/attendance/mark-all-present", methods=["POST"], endpoint="api_mark_all_present")
    @login_required
    def mark_all_present():
        data = request.get_json(silent=True) or {}
        student_ids = data.get("student_ids") or []
        if not isinstance(student_ids, list):
            raise ValidationError("student_ids must be a list")

        report = container.bulk_marking_service.mark_all_present_report(
            require_positive_int(data.get("class_id"), "class_id"),
            [require_positive_int(s, "student_ids") for s in student_ids],
            _parse_date(data.get("date"), "date"),
            data.get("date_bs") or None,
            _optional_period(data.get("period_number")),
            acting_user_id=int(session["user_id"]),
        )
        return jsonify(
            {
                "success": True,
                "data": [record_to_json(r) for r in report.records],
                "created": report.created,
                "updated": report.updated,
                "unchanged": report.unchanged,
                "skipped": report.skipped,
            }
        ), 200

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="api_delete_attendance")
    @login_required
    def delete_attendance(attendance_id: int):
        deleted = container.attendance_service.delete_attendance(attendance_id, int(session["user_id"]))
        if not deleted:
            return jsonify({"success": False, "message": "Attendance record not found"}), 404
        return jsonify({"success": True}), 200

    @app.route("/api/attendance/can-correct", methods=["GET"], endpoint="api_can_correct")
    @login_required
    def can_correct():
        raw = request.args.get("marked_at", "")
        try:
            marked_at = to_naive_utc(datetime.fromisoformat(raw))
        except ValueError:
            raise ValidationError("marked_at must be an ISO-8601 timestamp")
        return jsonify({"success": True, "can_correct": container.attendance_service.can_correct_attendance(marked_at)})

    @app.route("/api/attendance/class/<int:class_id>", methods=["GET"], endpoint="api_class_attendance")
    @login_required
    def class_attendance(class_id: int):
        attendance_date = _parse_date(request.args.get("date"), "date")
        period_arg = request.args.get("period_number")
        period = _optional_period(period_arg) if period_arg else None
        records = container.attendance_service.get_class_attendance(class_id, attendance_date, period)
        return jsonify({"success": True, "data": [record_to_json(r) for r in records]})

    @app.route("/api/attendance/student/<int:student_id>/summary", methods=["GET"], endpoint="api_student_summary")
    @login_required
    def student_summary(student_id: int):
        summary = container.attendance_service.get_attendance_summary(student_id, _date_range_from_args())
        return jsonify({"success": True, "data": summary_to_json(summary)})

    @app.route(
        "/api/attendance/student/<int:student_id>/percentage",
        methods=["GET"],
        endpoint="api_student_percentage",
    )
    @login_required
    def student_percentage(student_id: int):
        pct = container.alert_service.calculate_attendance_percentage(student_id, _date_range_from_args())
        return jsonify({"success": True, "data": {"student_id": student_id, "attendance_percentage": pct}})

    @app.route(
        "/api/attendance/student/<int:student_id>/low-attendance-check",
        methods=["POST"],
        endpoint="api_low_attendance_check",
    )
    @login_required
    def low_attendance_check(student_id: int):
        result = container.alert_service.check_and_alert_low_attendance(student_id, _date_range_from_args())
        return jsonify({"success": True, "data": alert_to_json(result)})

    @app.route("/api/attendance/low-attendance-check", methods=["POST"], endpoint="api_batch_low_attendance_check")
    @login_required
    def batch_low_attendance_check():
        data = request.get_json(silent=True) or {}
        student_ids = data.get("student_ids") or []
        if not isinstance(student_ids, list) or not student_ids:
            raise ValidationError("student_ids must be a non-empty list")

        results = container.alert_service.batch_check_low_attendance(
            [require_positive_int(s, "student_ids") for s in student_ids],
            _date_range_from_args(),
        )
        return jsonify({"success": True, "data": [alert_to_json(r) for r in results]})
