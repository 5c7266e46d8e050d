from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AttendanceStats:
    """Derived on demand, never stored."""

    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    attendance_rate: float

    def to_dict(self) -> dict:
        return {
            "totalDays": self.total_days,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "lateDays": self.late_days,
            "attendanceRate": self.attendance_rate,
        }
