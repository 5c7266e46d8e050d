from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Partial verification counts as tardy, not absent."""

    def decide(self, *, location_verified: bool, face_verified: bool) -> StatusDecision:
        missing = "face" if location_verified else "location"
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Partial verification ({missing} not verified)")
