from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ViewerProfile
from .repository import ProfileRepository


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_viewer_profile(self, user_id: str) -> Optional[ViewerProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, role, daerah_id, desa_id, kelompok_id
                FROM profiles
                WHERE id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            if not row:
                return None

            taught: tuple[str, ...] = ()
            if row["role"] == Role.TEACHER.value:
                cur.execute(
                    "SELECT class_id FROM teacher_classes WHERE teacher_id=%s ORDER BY class_id",
                    (user_id,),
                )
                taught = tuple(str(r["class_id"]) for r in fetchall(cur))

            return ViewerProfile(
                user_id=str(row["id"]),
                role=Role(row["role"]),
                full_name=row.get("full_name") or "",
                daerah_id=row.get("daerah_id"),
                desa_id=row.get("desa_id"),
                kelompok_id=row.get("kelompok_id"),
                taught_class_ids=taught,
            )
