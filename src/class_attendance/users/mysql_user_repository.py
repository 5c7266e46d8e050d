from __future__ import annotations

import json
from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from ..face.model import FaceEmbedding, as_embedding
from ..geofence.model import GeoPoint
from .model import User
from .repository import UserRepository


def _to_user(r: dict) -> User:
    registered = None
    if r.get("registered_lat") is not None and r.get("registered_lng") is not None:
        registered = GeoPoint(lat=float(r["registered_lat"]), lng=float(r["registered_lng"]))

    embedding = as_embedding(json.loads(r["face_embedding"])) if r.get("face_embedding") else None
    class_ids = tuple(json.loads(r["class_ids"])) if r.get("class_ids") else ()

    return User(
        user_id=r["user_id"],
        full_name=r["full_name"],
        role=Role(r["role"]),
        batch_id=r.get("batch_id"),
        class_ids=class_ids,
        registered_location=registered,
        face_embedding=embedding,
        reference_image_ref=r.get("reference_image_ref"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, role, batch_id, class_ids, registered_lat, registered_lng,
                       face_embedding, reference_image_ref, is_active
                FROM users
                WHERE user_id=%s
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _to_user(r) if r else None

    def set_face_reference(self, user_id: str, *, embedding: FaceEmbedding, image_ref: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET face_embedding=%s, reference_image_ref=%s WHERE user_id=%s",
                (json.dumps([float(v) for v in embedding]), image_ref, user_id),
            )
            return cur.rowcount > 0
