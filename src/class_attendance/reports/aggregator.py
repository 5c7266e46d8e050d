from __future__ import annotations

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus
from .model import AttendanceStats


def _round_rate(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class AttendanceStatsAggregator:
    """Pure aggregation over an already fetched, date-filtered record set."""

    def aggregate(self, records: Iterable[AttendanceRecord]) -> AttendanceStats:
        counts = Counter(r.status for r in records)
        total = sum(counts.values())
        present = counts[AttendanceStatus.PRESENT]

        rate = (present / total) * 100 if total > 0 else 0.0
        return AttendanceStats(
            total_days=total,
            present_days=present,
            absent_days=counts[AttendanceStatus.ABSENT],
            late_days=counts[AttendanceStatus.LATE],
            attendance_rate=_round_rate(rate),
        )
