from __future__ import annotations

import base64
import importlib
from datetime import time

import pytest

from conftest import FakeEmbeddingProvider, InMemoryClasses, InMemoryUsers, MemoryBlobStore, embedding
from class_attendance.classes.model import ClassInfo
from class_attendance.container import build_services
from class_attendance.core.enums import Role
from class_attendance.face.model import DetectedFace
from class_attendance.main import create_app
from class_attendance.users.model import User

SETTINGS = "class_attendance.config.testing"
CAMPUS = {"lat": 6.897664, "lng": 80.599450}


@pytest.fixture
def container(attendance_repo, clock):
    users = InMemoryUsers(
        {
            "S1": User("S1", "Ann Perera", Role.STUDENT, batch_id="B2025", face_embedding=embedding(0.0)),
            "S2": User("S2", "Ben Silva", Role.STUDENT, batch_id="B2025"),
            "L1": User("L1", "Dr. Jay", Role.LECTURER),
        }
    )
    classes = InMemoryClasses({"CS101": ClassInfo("CS101", "Algorithms", "B2025", schedule_day="Monday", start_time=time(9, 0))})
    return build_services(
        attendance_repo=attendance_repo,
        users_repo=users,
        classes_repo=classes,
        embedding_provider=FakeEmbeddingProvider([DetectedFace(confidence=0.9, embedding=embedding(0.2))]),
        settings=importlib.import_module(SETTINGS),
        blob_store=MemoryBlobStore(),
        clock=clock,
    )


@pytest.fixture
def client(container):
    app = create_app(container=container, settings_module=SETTINGS)
    return app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def _image(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode()


def _verify_both(client, png_bytes):
    loc = client.post("/api/attendance/CS101/location", json=CAMPUS)
    face = client.post("/api/attendance/CS101/face", json={"image": _image(png_bytes)})
    return loc, face


def test_requires_login(client):
    assert client.post("/api/attendance/CS101/mark").status_code == 401


def test_full_marking_flow(client, png_bytes):
    _login(client, "S1", "student")

    loc, face = _verify_both(client, png_bytes)
    assert loc.get_json()["success"] is True
    assert loc.get_json()["canMark"] is False
    assert face.get_json()["canMark"] is True

    resp = client.post("/api/attendance/CS101/mark")
    assert resp.status_code == 201
    record = resp.get_json()["record"]
    assert record["id"] == "S1_CS101_2025-03-03"
    assert record["status"] == "present"
    assert record["faceConfidence"] == pytest.approx(0.8)
    assert record["capturedImage"].startswith("memory://face-images/attendance/")

    _verify_both(client, png_bytes)
    again = client.post("/api/attendance/CS101/mark")
    assert again.status_code == 409
    assert again.get_json()["attendanceId"] == "S1_CS101_2025-03-03"


def test_mark_without_verification_is_rejected(client, attendance_repo):
    _login(client, "S1", "student")
    resp = client.post("/api/attendance/CS101/mark")
    assert resp.status_code == 400
    assert attendance_repo.all() == []


def test_failed_location_is_reported_not_raised(client):
    _login(client, "S1", "student")
    resp = client.post("/api/attendance/CS101/location", json={"error": "permission denied"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is False
    assert body["location"]["status"] == "failed"


def test_invalid_coordinates(client):
    _login(client, "S1", "student")
    resp = client.post("/api/attendance/CS101/location", json={"lat": "north", "lng": 80.5})
    assert resp.status_code == 400


def test_student_from_other_class_forbidden(client, container):
    container.users_repo.users["S9"] = User("S9", "Other", Role.STUDENT, batch_id="B1999")
    _login(client, "S9", "student")
    assert client.post("/api/attendance/CS101/location", json=CAMPUS).status_code == 403


def test_link_status(client):
    _login(client, "S1", "student")
    body = client.get("/api/classes/CS101/link-status").get_json()
    assert body["isActive"] is True


def test_bulk_marking_and_class_records(client):
    _login(client, "L1", "lecturer")
    resp = client.post(
        "/api/attendance/bulk",
        json={"records": [{"studentId": "S2", "classId": "CS101", "date": "2025-03-03", "status": "absent"}]},
    )
    assert resp.get_json()["created"] == ["S2_CS101_2025-03-03"]

    records = client.get("/api/attendance/classes/CS101?date=2025-03-03").get_json()["records"]
    assert [r["studentId"] for r in records] == ["S2"]


def test_bulk_marking_rejects_bad_status(client):
    _login(client, "L1", "lecturer")
    resp = client.post(
        "/api/attendance/bulk",
        json={"records": [{"studentId": "S2", "classId": "CS101", "date": "2025-03-03", "status": "excused"}]},
    )
    assert resp.status_code == 400


def test_students_cannot_bulk_mark(client):
    _login(client, "S1", "student")
    assert client.post("/api/attendance/bulk", json={"records": []}).status_code == 403


def test_student_stats_are_their_own(client, png_bytes):
    _login(client, "L1", "lecturer")
    client.post(
        "/api/attendance/bulk",
        json={"records": [{"studentId": "S2", "classId": "CS101", "date": "2025-03-03", "status": "absent"}]},
    )

    _login(client, "S1", "student")
    _verify_both(client, png_bytes)
    client.post("/api/attendance/CS101/mark")

    stats = client.get("/api/attendance/stats?studentId=S2").get_json()["stats"]
    assert stats == {"totalDays": 1, "presentDays": 1, "absentDays": 0, "lateDays": 0, "attendanceRate": 100.0}

    mine = client.get("/api/attendance/me").get_json()
    assert [r["id"] for r in mine["records"]] == ["S1_CS101_2025-03-03"]


def test_face_enrollment(client, container, png_bytes):
    _login(client, "S2", "student")
    resp = client.post("/api/users/me/face", json={"image": _image(png_bytes)})
    assert resp.get_json()["imageUrl"].startswith("memory://face-images/reference/reference_S2_")
    assert container.users_repo.users["S2"].face_embedding is not None


def test_marking_outside_link_window_is_rejected(client, clock, attendance_repo, png_bytes):
    _login(client, "S1", "student")
    _verify_both(client, png_bytes)
    clock.advance(hours=5)

    resp = client.post("/api/attendance/CS101/mark")

    assert resp.status_code == 400
    assert "not active" in resp.get_json()["message"]
    assert attendance_repo.all() == []


def test_verification_outside_link_window_is_rejected(client, clock):
    clock.advance(days=1)
    _login(client, "S1", "student")

    resp = client.post("/api/attendance/CS101/location", json=CAMPUS)

    assert resp.status_code == 400
    assert "scheduled for Monday" in resp.get_json()["message"]


def test_bulk_marking_with_invalid_entry_writes_nothing(client, attendance_repo):
    _login(client, "L1", "lecturer")
    resp = client.post(
        "/api/attendance/bulk",
        json={
            "records": [
                {"studentId": "S1", "classId": "CS101", "date": "2025-03-03", "status": "present"},
                {"studentId": "S_2", "classId": "CS101", "date": "2025-03-03", "status": "present"},
            ]
        },
    )
    assert resp.status_code == 400
    assert attendance_repo.all() == []


def test_class_breakdown_for_staff(client):
    _login(client, "L1", "lecturer")
    client.post(
        "/api/attendance/bulk",
        json={
            "records": [
                {"studentId": "S1", "classId": "CS101", "date": "2025-03-03", "status": "present"},
                {"studentId": "S2", "classId": "CS101", "date": "2025-03-03", "status": "absent"},
            ]
        },
    )

    body = client.get("/api/attendance/classes/CS101/breakdown?start=2025-03-01&end=2025-03-31").get_json()

    assert [(r["studentId"], r["attendanceRate"]) for r in body["students"]] == [("S2", 0.0), ("S1", 100.0)]
    assert client.get("/api/attendance/classes/CS101/breakdown").status_code == 400


def test_students_cannot_see_class_breakdown(client):
    _login(client, "S1", "student")
    resp = client.get("/api/attendance/classes/CS101/breakdown?start=2025-03-01&end=2025-03-31")
    assert resp.status_code == 403
