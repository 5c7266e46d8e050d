from __future__ import annotations

import io
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

import numpy as np
import pytest
from PIL import Image

from class_attendance.attendance.model import AttendanceRecord, NewAttendance
from class_attendance.classes.model import ClassInfo
from class_attendance.core.enums import VerificationKind
from class_attendance.core.exceptions import AlreadyMarkedError, ProviderUnavailableError
from class_attendance.face.model import DetectedFace
from class_attendance.users.model import User
from class_attendance.verification.model import VerificationOutcome

EMBEDDING_DIM = 128


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryAttendance:
    """Store double with an atomic create-if-absent."""

    def __init__(self, clock=None):
        self._records: dict[str, AttendanceRecord] = {}
        self._lock = threading.Lock()
        self._clock = clock or datetime.now
        self.create_calls = 0

    def get_by_key(self, attendance_id: str) -> Optional[AttendanceRecord]:
        return self._records.get(attendance_id)

    def create_if_absent(self, record: NewAttendance) -> AttendanceRecord:
        with self._lock:
            self.create_calls += 1
            if record.attendance_id in self._records:
                raise AlreadyMarkedError(record.attendance_id)
            committed = AttendanceRecord.from_new(record, committed_at=self._clock())
            self._records[record.attendance_id] = committed
            return committed

    def find(self, *, student_id=None, class_id=None, start_date=None, end_date=None) -> Sequence[AttendanceRecord]:
        items = [
            r
            for r in self._records.values()
            if (student_id is None or r.student_id == student_id)
            and (class_id is None or r.class_id == class_id)
            and (start_date is None or r.date >= start_date)
            and (end_date is None or r.date <= end_date)
        ]
        items.sort(key=lambda r: (r.date, r.mark_time), reverse=True)
        return items

    def all(self) -> list[AttendanceRecord]:
        return list(self._records.values())


@dataclass
class InMemoryUsers:
    users: dict[str, User] = field(default_factory=dict)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def set_face_reference(self, user_id: str, *, embedding, image_ref) -> bool:
        user = self.users.get(user_id)
        if not user:
            return False
        self.users[user_id] = replace(user, face_embedding=embedding, reference_image_ref=image_ref)
        return True


@dataclass
class InMemoryClasses:
    classes: dict[str, ClassInfo] = field(default_factory=dict)

    def get_by_id(self, class_id: str) -> Optional[ClassInfo]:
        return self.classes.get(class_id)


class FakeEmbeddingProvider:
    """Returns whatever faces the test queued, regardless of the frame."""

    def __init__(self, faces: Sequence[DetectedFace] = (), *, loaded: bool = True, fail_load: bool = False):
        self.faces = list(faces)
        self._loaded = loaded
        self._fail_load = fail_load
        self.frames_seen = 0

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        if self._fail_load:
            raise ProviderUnavailableError("model files missing")
        self._loaded = True

    def detect_faces(self, frame):
        self.frames_seen += 1
        return list(self.faces)


class MemoryBlobStore:
    def __init__(self):
        self.blobs: dict[str, bytes] = {}

    def upload(self, path: str, data: bytes) -> str:
        self.blobs[path] = data
        return f"memory://{path}"


def embedding(*head: float) -> np.ndarray:
    vec = np.zeros(EMBEDDING_DIM)
    vec[: len(head)] = head
    return vec


def outcome(kind: VerificationKind, verified: bool, at: datetime, confidence: float = 1.0) -> VerificationOutcome:
    if verified:
        return VerificationOutcome.verified(kind, at, confidence=confidence)
    return VerificationOutcome.failed(kind, at)


@pytest.fixture
def fixed_now() -> datetime:
    # A Monday.
    return datetime(2025, 3, 3, 9, 5, 0)


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def attendance_repo(clock) -> InMemoryAttendance:
    return InMemoryAttendance(clock)


@pytest.fixture
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 16), color=(200, 180, 160)).save(buf, format="PNG")
    return buf.getvalue()
