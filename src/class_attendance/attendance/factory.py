from __future__ import annotations

from dataclasses import dataclass

from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_verification(self, *, location_verified: bool, face_verified: bool) -> AttendanceStrategy:
        if location_verified and face_verified:
            return PresentStrategy()
        if location_verified or face_verified:
            return LateStrategy()
        return AbsentStrategy()
