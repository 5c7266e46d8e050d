from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyMarkedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..geofence.model import GeoPoint
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    attendance_id, student_id, class_id, attendance_date, status,
    location_verified, face_verified, face_confidence, location_lat, location_lng,
    captured_image_ref, marked_by, notes, mark_time, created_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    location = None
    if r.get("location_lat") is not None and r.get("location_lng") is not None:
        location = GeoPoint(lat=float(r["location_lat"]), lng=float(r["location_lng"]))
    return AttendanceRecord(
        attendance_id=r["attendance_id"],
        student_id=r["student_id"],
        class_id=r["class_id"],
        date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        location_verified=bool(r["location_verified"]),
        face_verified=bool(r["face_verified"]),
        face_confidence=float(r["face_confidence"] or 0.0),
        mark_time=r["mark_time"],
        created_at=r["created_at"],
        location=location,
        captured_image_ref=r.get("captured_image_ref"),
        marked_by=r.get("marked_by"),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_key(self, attendance_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_if_absent(self, record: NewAttendance) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        attendance_id, student_id, class_id, attendance_date, status,
                        location_verified, face_verified, face_confidence, location_lat, location_lng,
                        captured_image_ref, marked_by, notes, mark_time, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,NOW(),NOW())
                    """,
                    (
                        record.attendance_id,
                        record.student_id,
                        record.class_id,
                        record.date,
                        record.status.value,
                        int(record.location_verified),
                        int(record.face_verified),
                        float(record.face_confidence),
                        record.location.lat if record.location else None,
                        record.location.lng if record.location else None,
                        record.captured_image_ref,
                        record.marked_by,
                        record.notes,
                    ),
                )
                cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (record.attendance_id,))
                return _to_record(fetchone(cur))
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise AlreadyMarkedError(record.attendance_id) from e
            raise

    def find(
        self,
        *,
        student_id: Optional[str] = None,
        class_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(student_id)
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        if start_date is not None:
            clauses.append("attendance_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("attendance_date <= %s")
            params.append(end_date)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                {where}
                ORDER BY attendance_date DESC, mark_time DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
