from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.validators import require_key_part
from ..core.constants import ATTENDANCE_KEY_SEPARATOR
from ..core.enums import AttendanceStatus
from ..geofence.model import GeoPoint


def build_attendance_key(student_id: str, class_id: str, day: date) -> str:
    """One record per (student, class, calendar day)."""
    parts = (
        require_key_part(student_id, "student_id"),
        require_key_part(class_id, "class_id"),
        day.strftime("%Y-%m-%d"),
    )
    return ATTENDANCE_KEY_SEPARATOR.join(parts)


@dataclass(frozen=True)
class NewAttendance:
    """Write model: everything except the server-assigned timestamps."""

    attendance_id: str
    student_id: str
    class_id: str
    date: date
    status: AttendanceStatus
    location_verified: bool
    face_verified: bool
    face_confidence: float
    location: Optional[GeoPoint] = None
    captured_image_ref: Optional[str] = None
    marked_by: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one committed attendance record."""

    attendance_id: str
    student_id: str
    class_id: str
    date: date
    status: AttendanceStatus
    location_verified: bool
    face_verified: bool
    face_confidence: float
    mark_time: datetime
    created_at: datetime
    location: Optional[GeoPoint] = None
    captured_image_ref: Optional[str] = None
    marked_by: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_new(cls, new: NewAttendance, *, committed_at: datetime) -> "AttendanceRecord":
        return cls(
            attendance_id=new.attendance_id,
            student_id=new.student_id,
            class_id=new.class_id,
            date=new.date,
            status=new.status,
            location_verified=new.location_verified,
            face_verified=new.face_verified,
            face_confidence=new.face_confidence,
            mark_time=committed_at,
            created_at=committed_at,
            location=new.location,
            captured_image_ref=new.captured_image_ref,
            marked_by=new.marked_by,
            notes=new.notes,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "studentId": self.student_id,
            "classId": self.class_id,
            "date": self.date.strftime("%Y-%m-%d"),
            "time": self.mark_time.strftime("%H:%M:%S"),
            "status": self.status.value,
            "locationVerified": self.location_verified,
            "faceVerified": self.face_verified,
            "faceConfidence": self.face_confidence,
            "location": self.location.to_dict() if self.location else None,
            "capturedImage": self.captured_image_ref,
            "markedBy": self.marked_by,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
        }
