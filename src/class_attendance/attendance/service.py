from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_key_part
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AlreadyMarkedError, AuthorizationError, ValidationError
from ..geofence.model import GeoPoint
from ..verification.model import VerificationOutcome
from ..verification.session import VerificationSession
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, NewAttendance, build_attendance_key
from .repository import AttendanceRepository
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)

MANUAL_MARKING_ROLES = {Role.ADMIN, Role.LECTURER, Role.STAFF}


@dataclass(frozen=True)
class ManualEntry:
    student_id: str
    class_id: str
    date: date
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass
class BulkMarkResult:
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class AttendanceMarker:
    """Idempotent write path for attendance records.

    The record key is the concurrency control: the store's atomic
    create-if-absent lets exactly one of several racing attempts win, the
    others get AlreadyMarkedError. StoreUnavailableError propagates so the
    caller can retry with the same key.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable = now_local,
    ):
        self._attendance = attendance
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock

    def derive_status(self, *, location_verified: bool, face_verified: bool) -> StatusDecision:
        strategy = self._factory.for_verification(location_verified=location_verified, face_verified=face_verified)
        return strategy.decide(location_verified=location_verified, face_verified=face_verified)

    def mark(
        self,
        student_id: str,
        class_id: str,
        day: Optional[date],
        location_outcome: VerificationOutcome,
        face_outcome: VerificationOutcome,
        captured_image_ref: Optional[str] = None,
        *,
        location: Optional[GeoPoint] = None,
        marked_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        day = day or self._clock().date()
        key = build_attendance_key(student_id, class_id, day)

        location_verified = location_outcome.is_verified
        face_verified = face_outcome.is_verified
        decision = self.derive_status(location_verified=location_verified, face_verified=face_verified)

        new = NewAttendance(
            attendance_id=key,
            student_id=student_id.strip(),
            class_id=class_id.strip(),
            date=day,
            status=decision.status,
            location_verified=location_verified,
            face_verified=face_verified,
            face_confidence=face_outcome.confidence,
            location=location,
            captured_image_ref=captured_image_ref,
            marked_by=marked_by,
            notes=notes or decision.note,
        )

        try:
            record = self._attendance.create_if_absent(new)
        except AlreadyMarkedError:
            logger.warning("Attendance already marked: %s", key)
            raise

        logger.info("Attendance %s marked %s", key, record.status.value)
        return record

    def mark_session(self, session: VerificationSession, *, day: Optional[date] = None) -> AttendanceRecord:
        """Student-facing path: only allowed once both checks are verified and fresh."""
        if not session.can_mark(self._clock()):
            raise ValidationError("Please verify both location and face before marking attendance")

        return self.mark(
            session.student_id,
            session.class_id,
            day,
            session.location_outcome,
            session.face_outcome,
            session.captured_image_ref,
            location=session.location_fix,
            marked_by=session.student_id,
        )

    def bulk_mark(self, entries: Iterable[ManualEntry], *, current_role: Role, marked_by: str) -> BulkMarkResult:
        """Manual entry by teaching staff; existing records are skipped, never overwritten."""
        if current_role not in MANUAL_MARKING_ROLES:
            raise AuthorizationError("Only lecturers, staff or admins can mark attendance manually")

        # Keys are validated for the whole batch before the first write.
        batch = [
            NewAttendance(
                attendance_id=build_attendance_key(entry.student_id, entry.class_id, entry.date),
                student_id=entry.student_id.strip(),
                class_id=entry.class_id.strip(),
                date=entry.date,
                status=entry.status,
                location_verified=False,
                face_verified=False,
                face_confidence=0.0,
                marked_by=marked_by,
                notes=entry.notes,
            )
            for entry in entries
        ]

        result = BulkMarkResult()
        for new in batch:
            try:
                self._attendance.create_if_absent(new)
            except AlreadyMarkedError:
                result.skipped.append(new.attendance_id)
                continue
            result.created.append(new.attendance_id)

        logger.info("Bulk mark by %s: %d created, %d skipped", marked_by, len(result.created), len(result.skipped))
        return result

    def get_student_records(
        self,
        student_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        student_id = require_key_part(student_id, "student_id")
        return self._attendance.find(student_id=student_id, start_date=start_date, end_date=end_date)

    def get_class_records(self, class_id: str, *, on_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        class_id = require_key_part(class_id, "class_id")
        return self._attendance.find(class_id=class_id, start_date=on_date, end_date=on_date)
