from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    LECTURER = "lecturer"
    STAFF = "staff"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance status persisted on every record."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class VerificationKind(str, Enum):
    LOCATION = "location"
    FACE = "face"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class FaceImageKind(str, Enum):
    """Folder a captured face image is uploaded to."""

    REFERENCE = "reference"
    ATTENDANCE = "attendance"
