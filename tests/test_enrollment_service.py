from __future__ import annotations

import numpy as np
import pytest

from conftest import FakeEmbeddingProvider, InMemoryUsers, MemoryBlobStore, embedding
from class_attendance.core.enums import Role
from class_attendance.core.exceptions import AuthorizationError, VerificationFailedError
from class_attendance.face.evaluator import FaceMatchEvaluator
from class_attendance.face.model import DetectedFace
from class_attendance.storage.face_images import FaceImageStore
from class_attendance.users.model import User
from class_attendance.users.service import FaceEnrollmentService


@pytest.fixture
def users():
    return InMemoryUsers({"S1": User("S1", "Ann Perera", Role.STUDENT), "L1": User("L1", "Dr. Jay", Role.LECTURER)})


def _service(users, provider, clock, blobs=None):
    images = FaceImageStore(blobs, clock=clock) if blobs is not None else None
    return FaceEnrollmentService(users, FaceMatchEvaluator(provider), images)


def test_enroll_stores_embedding_and_image(users, clock, png_bytes):
    blobs = MemoryBlobStore()
    provider = FakeEmbeddingProvider([DetectedFace(confidence=0.9, embedding=embedding(0.3))])

    ref = _service(users, provider, clock, blobs).enroll("S1", png_bytes)

    assert ref.startswith("memory://face-images/reference/reference_S1_")
    assert np.array_equal(users.users["S1"].face_embedding, embedding(0.3))
    assert users.users["S1"].reference_image_ref == ref


def test_enroll_requires_exactly_one_face(users, clock, png_bytes):
    faces = [DetectedFace(confidence=0.9, embedding=embedding(i)) for i in range(2)]
    with pytest.raises(VerificationFailedError):
        _service(users, FakeEmbeddingProvider(faces), clock).enroll("S1", png_bytes)
    assert users.users["S1"].face_embedding is None


def test_only_students_enroll(users, clock, png_bytes):
    with pytest.raises(AuthorizationError):
        _service(users, FakeEmbeddingProvider(), clock).enroll("L1", png_bytes)
