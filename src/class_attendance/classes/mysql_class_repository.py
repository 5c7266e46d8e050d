from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import ClassInfo
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: str) -> Optional[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, class_name, course_code, batch_id, instructor, schedule_day, start_time,
                       link_minutes_before, link_minutes_after, auto_activation
                FROM classes
                WHERE class_id=%s
                """,
                (class_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClassInfo(
                class_id=r["class_id"],
                class_name=r["class_name"],
                batch_id=r.get("batch_id"),
                course_code=r.get("course_code"),
                instructor=r.get("instructor"),
                schedule_day=r.get("schedule_day"),
                start_time=normalize_mysql_time(r.get("start_time")),
                link_minutes_before=int(r["link_minutes_before"]),
                link_minutes_after=int(r["link_minutes_after"]),
                auto_activation=bool(r["auto_activation"]),
            )
