from __future__ import annotations

from typing import Callable

from ..common.datetime_utils import now_local
from ..common.validators import require_key_part
from ..core.constants import FACE_IMAGE_PREFIX
from ..core.enums import FaceImageKind
from .blob_store import BlobStore


class FaceImageStore:
    """Uploads captured face images: face-images/{kind}/{kind}_{student}_{ms}.jpg"""

    def __init__(self, blobs: BlobStore, *, clock: Callable = now_local):
        self._blobs = blobs
        self._clock = clock

    def upload_face_image(self, student_id: str, data: bytes, kind: FaceImageKind) -> str:
        student_id = require_key_part(student_id, "student_id")
        millis = int(self._clock().timestamp() * 1000)
        filename = f"{kind.value}_{student_id}_{millis}.jpg"
        return self._blobs.upload(f"{FACE_IMAGE_PREFIX}/{kind.value}/{filename}", data)
