from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import AttendanceEntry, AttendanceLog
from .repository import AttendanceLogRepository


def _to_log(r: dict) -> AttendanceLog:
    return AttendanceLog(
        meeting_id=str(r["meeting_id"]),
        student_id=str(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        reason=r.get("reason"),
        recorded_by=r.get("recorded_by"),
    )


class MySQLAttendanceRepository(AttendanceLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def fetch_for_meetings(self, meeting_ids: Sequence[str]) -> Sequence[AttendanceLog]:
        if not meeting_ids:
            return []

        placeholders, params = in_clause(list(meeting_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT meeting_id, student_id, status, reason, recorded_by
                FROM attendance_logs
                WHERE meeting_id IN ({placeholders})
                ORDER BY meeting_id, student_id
                """,
                params,
            )
            return [_to_log(r) for r in fetchall(cur)]

    def list_for_meeting(self, meeting_id: str) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT al.meeting_id, al.student_id, al.status, al.reason, al.recorded_by
                FROM attendance_logs al
                LEFT JOIN students s ON s.id = al.student_id
                WHERE al.meeting_id=%s
                ORDER BY s.name ASC, al.student_id ASC
                """,
                (meeting_id,),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def upsert_many(
        self, *, meeting_id: str, meeting_date: date, entries: Sequence[AttendanceEntry], recorded_by: str
    ) -> int:
        if not entries:
            return 0

        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_logs(student_id, meeting_id, date, status, reason, recorded_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status), reason=VALUES(reason), recorded_by=VALUES(recorded_by)
                """,
                [(e.student_id, meeting_id, meeting_date, e.status.value, e.reason, recorded_by) for e in entries],
            )
        return len(entries)

    def delete_for_meeting(self, meeting_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_logs WHERE meeting_id=%s", (meeting_id,))
            return int(cur.rowcount or 0)
