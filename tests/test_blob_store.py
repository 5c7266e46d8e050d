from __future__ import annotations

import pytest

from class_attendance.core.exceptions import ValidationError
from class_attendance.storage.blob_store import LocalBlobStore


def test_upload_writes_under_root(tmp_path):
    store = LocalBlobStore(str(tmp_path), base_url="/uploads")

    url = store.upload("face-images/attendance/a.jpg", b"jpeg")

    assert url == "/uploads/face-images/attendance/a.jpg"
    assert (tmp_path / "face-images" / "attendance" / "a.jpg").read_bytes() == b"jpeg"
    assert store.read("face-images/attendance/a.jpg") == b"jpeg"


@pytest.mark.parametrize("path", ["../escape.jpg", "/etc/passwd", "a/../../b.jpg"])
def test_upload_rejects_paths_outside_root(tmp_path, path):
    with pytest.raises(ValidationError):
        LocalBlobStore(str(tmp_path), base_url="/uploads").upload(path, b"x")
