from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    def get_by_key(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_if_absent(self, record: NewAttendance) -> AttendanceRecord:
        """Atomically create the record under its key.

        Raises AlreadyMarkedError when the key exists (existing record is
        left untouched) and StoreUnavailableError on transient failures.
        Timestamps are assigned by the store at commit.
        """

        raise NotImplementedError

    def find(
        self,
        *,
        student_id: Optional[str] = None,
        class_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records matching every given filter, date bounds inclusive, newest first."""

        raise NotImplementedError
