from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .repository import StudentRepository


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_ids_in_classes(self, class_ids: Iterable[str]) -> Sequence[str]:
        ids = sorted({str(c) for c in class_ids if c})
        if not ids:
            return []

        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT s.id, MIN(s.name) AS name
                FROM students s
                JOIN student_classes sc ON sc.student_id = s.id
                WHERE sc.class_id IN ({placeholders})
                GROUP BY s.id
                ORDER BY name ASC, s.id ASC
                """,
                params,
            )
            return [str(r["id"]) for r in fetchall(cur)]

    def get_existing_ids(self, student_ids: Iterable[str]) -> set[str]:
        ids = sorted({str(s) for s in student_ids if s})
        if not ids:
            return set()

        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id FROM students WHERE id IN ({placeholders})", params)
            return {str(r["id"]) for r in fetchall(cur)}

    def get_class_ids_for_students(self, student_ids: Iterable[str]) -> Mapping[str, frozenset[str]]:
        ids = sorted({str(s) for s in student_ids if s})
        if not ids:
            return {}

        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT student_id, class_id FROM student_classes WHERE student_id IN ({placeholders})",
                params,
            )
            out: dict[str, set[str]] = {}
            for r in fetchall(cur):
                out.setdefault(str(r["student_id"]), set()).add(str(r["class_id"]))
            return {k: frozenset(v) for k, v in out.items()}
