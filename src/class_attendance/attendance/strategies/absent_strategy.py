from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Neither signal verified."""

    def decide(self, *, location_verified: bool, face_verified: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
