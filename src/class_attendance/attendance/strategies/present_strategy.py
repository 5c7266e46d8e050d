from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Both location and face verified."""

    def decide(self, *, location_verified: bool, face_verified: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
