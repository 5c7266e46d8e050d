from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.repository import UserRepository
from .model import ClassInfo, LinkStatus
from .repository import ClassRepository


class ClassService:
    def __init__(self, classes: ClassRepository, users: UserRepository, *, clock: Callable = now_local):
        self._classes = classes
        self._users = users
        self._clock = clock

    def _get_class(self, class_id: str) -> ClassInfo:
        info = self._classes.get_by_id(class_id)
        if not info:
            raise ValidationError("Class not found")
        return info

    def verify_access(self, student_id: str, class_id: str) -> ClassInfo:
        """Student must belong to the class batch (or list the class) to mark it."""
        info = self._get_class(class_id)
        if not info.batch_id:
            raise AuthorizationError("Class is not assigned to any batch")

        student = self._users.get_by_id(student_id)
        if not student or not student.is_active:
            raise ValidationError("Student not found")
        if student.role != Role.STUDENT:
            raise AuthorizationError("Only students can mark attendance")
        if student.batch_id != info.batch_id and class_id not in student.class_ids:
            raise AuthorizationError("You do not have access to this class. This class is for a different batch.")
        return info

    def check_link_status(self, class_id: str, *, now: Optional[datetime] = None) -> LinkStatus:
        info = self._get_class(class_id)
        now = now or self._clock()

        if not info.auto_activation:
            return LinkStatus(is_active=False, message="Attendance link auto-activation is disabled for this class")
        if not info.schedule_day or info.start_time is None:
            return LinkStatus(is_active=False, message="Class schedule is not properly configured")

        today = now.strftime("%A")
        if today != info.schedule_day:
            return LinkStatus(
                is_active=False,
                message=f"This class is scheduled for {info.schedule_day}, not today ({today})",
            )

        start = datetime.combine(now.date(), info.start_time)
        active_from = start - timedelta(minutes=info.link_minutes_before)
        active_to = start + timedelta(minutes=info.link_minutes_after)

        if active_from <= now <= active_to:
            return LinkStatus(True, "Attendance link is currently active", active_from, active_to)
        return LinkStatus(
            False,
            f"Attendance link is not active. Active from {active_from:%H:%M} to {active_to:%H:%M}",
            active_from,
            active_to,
        )

    def require_active_link(self, class_id: str, *, now: Optional[datetime] = None) -> LinkStatus:
        """Verification and marking are only accepted while the class link is active."""
        status = self.check_link_status(class_id, now=now)
        if not status.is_active:
            raise ValidationError(status.message)
        return status
