from __future__ import annotations

from typing import Optional, Protocol

from ..face.model import FaceEmbedding
from .model import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def set_face_reference(self, user_id: str, *, embedding: FaceEmbedding, image_ref: Optional[str]) -> bool:
        raise NotImplementedError
