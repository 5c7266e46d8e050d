from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import FaceImageKind, Role
from ..core.exceptions import AuthorizationError, ValidationError, VerificationFailedError
from ..face.evaluator import FaceMatchEvaluator
from ..face.frames import decode_image
from ..storage.face_images import FaceImageStore
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class FaceEnrollmentService:
    """Use case: register the reference face a student is verified against."""

    def __init__(self, users: UserRepository, faces: FaceMatchEvaluator, face_images: Optional[FaceImageStore] = None):
        self._users = users
        self._faces = faces
        self._face_images = face_images

    def get_student(self, student_id: str) -> User:
        user = self._users.get_by_id(student_id)
        if not user or not user.is_active:
            raise ValidationError("Student not found")
        if user.role != Role.STUDENT:
            raise AuthorizationError("Only students have a reference face")
        return user

    def enroll(self, student_id: str, image: bytes) -> Optional[str]:
        """Store the embedding of the single face in `image`; returns the image URL."""
        self.get_student(student_id)

        detection = self._faces.detect(decode_image(image))
        if not detection.found or detection.embedding is None:
            raise VerificationFailedError("Exactly one face must be visible in the reference photo")

        image_ref = None
        if self._face_images is not None:
            image_ref = self._face_images.upload_face_image(student_id, image, FaceImageKind.REFERENCE)

        if not self._users.set_face_reference(student_id, embedding=detection.embedding, image_ref=image_ref):
            raise ValidationError("Could not save the reference face")

        logger.info("Reference face enrolled for student=%s", student_id)
        return image_ref
