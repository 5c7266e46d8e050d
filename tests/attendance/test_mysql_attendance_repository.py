from __future__ import annotations

from datetime import date, datetime

import pytest
from mysql.connector import errorcode, errors

from class_attendance.attendance.model import NewAttendance
from class_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from class_attendance.core.enums import AttendanceStatus
from class_attendance.core.exceptions import AlreadyMarkedError, StoreUnavailableError

COMMITTED_AT = datetime(2025, 3, 3, 9, 5, 12)


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self._row = None

    def execute(self, sql, params=()):
        self._conn.statements.append(sql.strip().split()[0])
        if self._conn.fail_with is not None:
            raise self._conn.fail_with
        if sql.strip().startswith("INSERT"):
            self._conn.inserted = params
        else:
            self._row = self._conn.row_for(params[0])

    def fetchone(self):
        return self._row

    def fetchall(self):
        return [self._row] if self._row else []

    def close(self):
        pass


class FakeConnection:
    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.statements = []
        self.inserted = None
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def row_for(self, attendance_id):
        if not self.inserted or self.inserted[0] != attendance_id:
            return None
        p = self.inserted
        return {
            "attendance_id": p[0],
            "student_id": p[1],
            "class_id": p[2],
            "attendance_date": p[3],
            "status": p[4],
            "location_verified": p[5],
            "face_verified": p[6],
            "face_confidence": p[7],
            "location_lat": p[8],
            "location_lng": p[9],
            "captured_image_ref": p[10],
            "marked_by": p[11],
            "notes": p[12],
            "mark_time": COMMITTED_AT,
            "created_at": COMMITTED_AT,
        }

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, conn):
        self.conn = conn

    def connect(self, with_database=True):
        return self.conn


def _new():
    return NewAttendance(
        attendance_id="S100_CS101_2025-03-03",
        student_id="S100",
        class_id="CS101",
        date=date(2025, 3, 3),
        status=AttendanceStatus.PRESENT,
        location_verified=True,
        face_verified=True,
        face_confidence=0.8,
    )


def test_create_if_absent_returns_committed_record():
    conn = FakeConnection()
    repo = MySQLAttendanceRepository(FakeConnectionFactory(conn))

    record = repo.create_if_absent(_new())

    assert record.attendance_id == "S100_CS101_2025-03-03"
    assert record.status == AttendanceStatus.PRESENT
    assert record.mark_time == COMMITTED_AT
    assert conn.statements == ["INSERT", "SELECT"]
    assert conn.committed and conn.closed


def test_duplicate_key_maps_to_already_marked():
    dup = errors.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    conn = FakeConnection(fail_with=dup)
    repo = MySQLAttendanceRepository(FakeConnectionFactory(conn))

    with pytest.raises(AlreadyMarkedError) as exc:
        repo.create_if_absent(_new())

    assert exc.value.attendance_id == "S100_CS101_2025-03-03"
    assert conn.rolled_back and not conn.committed


def test_other_integrity_errors_propagate():
    conn = FakeConnection(fail_with=errors.IntegrityError(msg="FK", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    repo = MySQLAttendanceRepository(FakeConnectionFactory(conn))

    with pytest.raises(errors.IntegrityError):
        repo.create_if_absent(_new())


def test_lost_connection_maps_to_store_unavailable():
    conn = FakeConnection(fail_with=errors.OperationalError(msg="Lost connection", errno=errorcode.CR_SERVER_LOST))
    repo = MySQLAttendanceRepository(FakeConnectionFactory(conn))

    with pytest.raises(StoreUnavailableError):
        repo.create_if_absent(_new())
    assert conn.closed
