from __future__ import annotations

from typing import Iterable, Sequence

from ..core.constants import TEACHER_CLASS_KEYWORD
from ..core.enums import OrgLevel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import ClassRecord
from .repository import OrganizationRepository

# Column holding the node id for each level once classes are joined up to desa.
_LEVEL_COLUMN = {
    OrgLevel.KELOMPOK: "c.kelompok_id",
    OrgLevel.DESA: "k.desa_id",
    OrgLevel.DAERAH: "d.daerah_id",
}


def _split(value) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(v for v in str(value).split("|") if v)


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_classes_by_ids(self, class_ids: Iterable[str]) -> Sequence[ClassRecord]:
        ids = sorted({str(c) for c in class_ids if c})
        if not ids:
            return []

        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    c.id, c.name, c.kelompok_id, k.desa_id, d.daerah_id,
                    GROUP_CONCAT(DISTINCT cm.id SEPARATOR '|') AS master_ids,
                    GROUP_CONCAT(DISTINCT cat.code SEPARATOR '|') AS category_codes,
                    GROUP_CONCAT(DISTINCT cat.name SEPARATOR '|') AS category_names,
                    COALESCE(MAX(cat.is_sambung_capable), 0) AS sambung_capable
                FROM classes c
                LEFT JOIN kelompok k ON k.id = c.kelompok_id
                LEFT JOIN desa d ON d.id = k.desa_id
                LEFT JOIN class_master_mappings m ON m.class_id = c.id
                LEFT JOIN class_masters cm ON cm.id = m.class_master_id
                LEFT JOIN class_master_categories cat ON cat.id = cm.category_id
                WHERE c.id IN ({placeholders})
                GROUP BY c.id, c.name, c.kelompok_id, k.desa_id, d.daerah_id
                """,
                params,
            )
            rows = fetchall(cur)
            return [
                ClassRecord(
                    class_id=str(r["id"]),
                    name=r["name"] or "",
                    kelompok_id=r.get("kelompok_id"),
                    desa_id=r.get("desa_id"),
                    daerah_id=r.get("daerah_id"),
                    category_codes=_split(r.get("category_codes")),
                    category_names=_split(r.get("category_names")),
                    sambung_capable=bool(int(r.get("sambung_capable") or 0)),
                    master_class_ids=_split(r.get("master_ids")),
                )
                for r in rows
            ]

    def list_class_ids_under(self, level: OrgLevel, node_id: str) -> Sequence[str]:
        column = _LEVEL_COLUMN[OrgLevel(level)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT c.id
                FROM classes c
                LEFT JOIN kelompok k ON k.id = c.kelompok_id
                LEFT JOIN desa d ON d.id = k.desa_id
                WHERE {column}=%s
                """,
                (node_id,),
            )
            return [str(r["id"]) for r in fetchall(cur)]

    def list_teacher_class_ids_in_kelompok(self, kelompok_ids: Iterable[str]) -> Sequence[str]:
        ids = sorted({str(k) for k in kelompok_ids if k})
        if not ids:
            return []

        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT c.id
                FROM classes c
                WHERE c.kelompok_id IN ({placeholders}) AND LOWER(c.name) LIKE %s
                """,
                (*params, f"%{TEACHER_CLASS_KEYWORD}%"),
            )
            return [str(r["id"]) for r in fetchall(cur)]
