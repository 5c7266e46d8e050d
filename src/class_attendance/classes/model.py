from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..core.constants import DEFAULT_LINK_ACTIVE_MINUTES_AFTER, DEFAULT_LINK_ACTIVE_MINUTES_BEFORE


@dataclass(frozen=True)
class ClassInfo:
    """Scheduled class a student marks attendance for."""

    class_id: str
    class_name: str
    batch_id: Optional[str]
    course_code: Optional[str] = None
    instructor: Optional[str] = None
    schedule_day: Optional[str] = None  # weekday name, e.g. "Monday"
    start_time: Optional[time] = None
    link_minutes_before: int = DEFAULT_LINK_ACTIVE_MINUTES_BEFORE
    link_minutes_after: int = DEFAULT_LINK_ACTIVE_MINUTES_AFTER
    auto_activation: bool = True

    def to_dict(self) -> dict:
        return {
            "className": self.class_name,
            "courseCode": self.course_code,
            "batchId": self.batch_id,
            "instructor": self.instructor,
        }


@dataclass(frozen=True)
class LinkStatus:
    is_active: bool
    message: str
    active_from: Optional[datetime] = None
    active_to: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "isActive": self.is_active,
            "message": self.message,
            "activeFrom": self.active_from.strftime("%H:%M") if self.active_from else None,
            "activeTo": self.active_to.strftime("%H:%M") if self.active_to else None,
        }
