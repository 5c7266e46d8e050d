from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import (
    AlreadyMarkedError,
    AuthorizationError,
    DomainError,
    ProviderUnavailableError,
    StoreUnavailableError,
    ValidationError,
    VerificationFailedError,
)
from ..face.frames import decode_data_url
from ..geofence.model import GeoPoint
from ..verification.session import VerificationSession
from ..verification.sources import ClientGeolocation, UploadedFrameSource
from .service import ManualEntry

logger = logging.getLogger(__name__)

STAFF_ROLES = {Role.ADMIN.value, Role.LECTURER.value, Role.STAFF.value}

_ERROR_STATUS = (
    (AlreadyMarkedError, 409),
    (StoreUnavailableError, 503),
    (ProviderUnavailableError, 503),
    (VerificationFailedError, 422),
    (AuthorizationError, 403),
    (ValidationError, 400),
)


def _error_response(e: DomainError):
    for exc_type, status in _ERROR_STATUS:
        if isinstance(e, exc_type):
            body = {"success": False, "message": str(e)}
            if isinstance(e, AlreadyMarkedError):
                body["attendanceId"] = e.attendance_id
            if exc_type in (StoreUnavailableError, ProviderUnavailableError):
                body["retry"] = True
            return jsonify(body), status
    return jsonify({"success": False, "message": str(e)}), 400


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            return view(*args, **kwargs)

        return wrapper

    def staff_required(view):
        """Lecturer, staff or admin."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            if session.get("role") not in STAFF_ROLES:
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    def api_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return _error_response(e)

        return wrapper

    def _session_key(class_id: str) -> str:
        return f"verification:{class_id}"

    def _load_verification(student_id: str, class_id: str) -> VerificationSession:
        data = session.get(_session_key(class_id))
        if data and data.get("student_id") == student_id:
            return VerificationSession.from_dict(data)
        return VerificationSession(
            student_id=student_id,
            class_id=class_id,
            started_at=container.clock(),
            max_age_seconds=container.verification_max_age_seconds,
        )

    def _save_verification(vs: VerificationSession) -> None:
        session[_session_key(vs.class_id)] = vs.to_dict()

    def _verification_body(vs: VerificationSession) -> dict:
        return {
            "location": vs.location_outcome.to_dict(),
            "face": vs.face_outcome.to_dict(),
            "canMark": vs.can_mark(container.clock()),
        }

    def _optional_date(name: str):
        value = request.args.get(name)
        return parse_iso_date(value) if value else None

    @app.route("/api/classes/<class_id>/link-status", methods=["GET"], endpoint="class_link_status")
    @login_required
    @api_errors
    def class_link_status(class_id: str):
        status = container.class_service.check_link_status(class_id)
        return jsonify({"success": True, **status.to_dict()})

    @app.route("/api/attendance/<class_id>/location", methods=["POST"], endpoint="verify_location")
    @login_required
    @api_errors
    def verify_location(class_id: str):
        student_id = str(session["user_id"])
        container.class_service.verify_access(student_id, class_id)
        container.class_service.require_active_link(class_id)
        student = container.users_repo.get_by_id(student_id)

        data = request.get_json(silent=True) or {}
        if data.get("error"):
            source = ClientGeolocation(None, error=str(data["error"]))
        else:
            source = ClientGeolocation(GeoPoint.from_values(data.get("lat"), data.get("lng")))

        vs = _load_verification(student_id, class_id)
        outcome = container.verification_service.verify_location(
            vs,
            source,
            registered=student.registered_location if student else None,
            zone_id=data.get("zoneId"),
        )
        _save_verification(vs)
        return jsonify({"success": outcome.is_verified, **_verification_body(vs)})

    @app.route("/api/attendance/<class_id>/face", methods=["POST"], endpoint="verify_face")
    @login_required
    @api_errors
    def verify_face(class_id: str):
        student_id = str(session["user_id"])
        container.class_service.verify_access(student_id, class_id)
        container.class_service.require_active_link(class_id)
        student = container.users_repo.get_by_id(student_id)

        data = request.get_json(silent=True) or {}
        frames = UploadedFrameSource(decode_data_url(data.get("image", "")))

        vs = _load_verification(student_id, class_id)
        outcome = container.verification_service.verify_face(vs, frames, student.face_embedding if student else None)
        _save_verification(vs)
        return jsonify({"success": outcome.is_verified, **_verification_body(vs)})

    @app.route("/api/attendance/<class_id>/mark", methods=["POST"], endpoint="mark_attendance")
    @login_required
    @api_errors
    def mark_attendance(class_id: str):
        student_id = str(session["user_id"])
        container.class_service.verify_access(student_id, class_id)
        container.class_service.require_active_link(class_id)

        vs = _load_verification(student_id, class_id)
        record = container.attendance_marker.mark_session(vs)
        session.pop(_session_key(class_id), None)
        return jsonify({"success": True, "message": "Attendance marked successfully", "record": record.to_dict()}), 201

    @app.route("/api/attendance/me", methods=["GET"], endpoint="my_attendance")
    @login_required
    @api_errors
    def my_attendance():
        student_id = str(session["user_id"])
        start = _optional_date("start")
        end = _optional_date("end")

        records = container.attendance_marker.get_student_records(student_id, start_date=start, end_date=end)
        stats = container.report_service.get_stats(student_id=student_id, start_date=start, end_date=end)
        return jsonify({"success": True, "records": [r.to_dict() for r in records], "stats": stats.to_dict()})

    @app.route("/api/attendance/classes/<class_id>", methods=["GET"], endpoint="class_attendance")
    @staff_required
    @api_errors
    def class_attendance(class_id: str):
        records = container.attendance_marker.get_class_records(class_id, on_date=_optional_date("date"))
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/attendance/classes/<class_id>/breakdown", methods=["GET"], endpoint="class_breakdown")
    @staff_required
    @api_errors
    def class_breakdown(class_id: str):
        start = _optional_date("start")
        end = _optional_date("end")
        if start is None or end is None:
            raise ValidationError("start and end dates are required")

        rows = container.report_service.get_class_breakdown(class_id, start_date=start, end_date=end)
        return jsonify({"success": True, "students": rows})

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    @api_errors
    def attendance_stats():
        student_id: Optional[str] = request.args.get("studentId")
        if session.get("role") not in STAFF_ROLES:
            # Students only see their own numbers.
            student_id = str(session["user_id"])

        stats = container.report_service.get_stats(
            class_id=request.args.get("classId"),
            student_id=student_id,
            start_date=_optional_date("start"),
            end_date=_optional_date("end"),
        )
        return jsonify({"success": True, "stats": stats.to_dict()})

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="bulk_mark_attendance")
    @staff_required
    @api_errors
    def bulk_mark_attendance():
        data = request.get_json(silent=True) or {}
        try:
            entries = [
                ManualEntry(
                    student_id=str(item["studentId"]),
                    class_id=str(item["classId"]),
                    date=parse_iso_date(item["date"]),
                    status=AttendanceStatus(item["status"]),
                    notes=item.get("notes"),
                )
                for item in data.get("records", [])
            ]
        except (KeyError, TypeError, ValueError):
            raise ValidationError("Each record needs studentId, classId, date and a valid status")

        result = container.attendance_marker.bulk_mark(
            entries,
            current_role=Role(session["role"]),
            marked_by=str(session["user_id"]),
        )
        return jsonify({"success": True, "created": result.created, "skipped": result.skipped})

    @app.route("/api/users/me/face", methods=["POST"], endpoint="enroll_face")
    @login_required
    @api_errors
    def enroll_face():
        data = request.get_json(silent=True) or {}
        image_ref = container.enrollment_service.enroll(str(session["user_id"]), decode_data_url(data.get("image", "")))
        return jsonify({"success": True, "message": "Reference face saved", "imageUrl": image_ref})
