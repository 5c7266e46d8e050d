from __future__ import annotations

from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..core.exceptions import ValidationError
from .aggregator import AttendanceStatsAggregator
from .model import AttendanceStats


class AttendanceReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        aggregator: Optional[AttendanceStatsAggregator] = None,
    ):
        self._attendance = attendance
        self._aggregator = aggregator or AttendanceStatsAggregator()

    def get_stats(
        self,
        *,
        class_id: Optional[str] = None,
        student_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceStats:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        records = self._attendance.find(
            class_id=class_id,
            student_id=student_id,
            start_date=start_date,
            end_date=end_date,
        )
        return self._aggregator.aggregate(records)

    def get_class_breakdown(self, class_id: str, *, start_date: date, end_date: date) -> list[dict]:
        """Per-student stats for one class, lowest attendance rate first."""
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")
        records = self._attendance.find(class_id=class_id, start_date=start_date, end_date=end_date)

        by_student: dict[str, list] = {}
        for r in records:
            by_student.setdefault(r.student_id, []).append(r)

        rows = []
        for student_id, items in by_student.items():
            stats = self._aggregator.aggregate(items)
            rows.append({"studentId": student_id, **stats.to_dict()})

        rows.sort(key=lambda x: (x["attendanceRate"], x["studentId"]))
        return rows
