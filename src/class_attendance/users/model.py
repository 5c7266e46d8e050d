from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role
from ..face.model import FaceEmbedding
from ..geofence.model import GeoPoint


@dataclass(frozen=True)
class User:
    """Domain entity: User (students carry their verification references)."""

    user_id: str
    full_name: str
    role: Role
    batch_id: Optional[str] = None
    class_ids: tuple[str, ...] = ()
    registered_location: Optional[GeoPoint] = None
    face_embedding: Optional[FaceEmbedding] = None
    reference_image_ref: Optional[str] = None
    is_active: bool = True
