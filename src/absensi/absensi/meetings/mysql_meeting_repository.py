from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Iterable, Optional, Sequence

from ..core.enums import MeetingType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_id_list, encode_id_list, fetchall, fetchone, in_clause
from .model import Meeting
from .repository import MeetingRepository

_COLUMNS = """
    m.id, m.class_id, m.class_ids, m.kelompok_ids, m.teacher_id, m.title, m.date,
    m.topic, m.description, m.meeting_type, m.student_snapshot, m.meeting_number,
    m.created_at, m.updated_at
"""


def _to_meeting(r: dict) -> Meeting:
    class_ids = decode_id_list(r.get("class_ids")) or (str(r["class_id"]),)
    return Meeting(
        meeting_id=str(r["id"]),
        primary_class_id=str(r["class_id"]),
        class_ids=class_ids,
        kelompok_ids=decode_id_list(r.get("kelompok_ids")),
        teacher_id=str(r["teacher_id"]),
        title=r["title"],
        date=r["date"],
        topic=r.get("topic"),
        description=r.get("description"),
        meeting_type=MeetingType(r.get("meeting_type") or MeetingType.PEMBINAAN.value),
        student_snapshot=decode_id_list(r.get("student_snapshot")),
        sequence_number=int(r.get("meeting_number") or 0),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_candidates(
        self,
        *,
        class_ids: Optional[Collection[str]],
        before: Optional[date],
        limit: int,
    ) -> Sequence[Meeting]:
        clauses: list[str] = []
        params: list = []

        if class_ids is not None:
            ids = sorted({str(c) for c in class_ids})
            if not ids:
                return []
            placeholders, id_params = in_clause(ids)
            clauses.append(
                f"EXISTS (SELECT 1 FROM meeting_classes mc WHERE mc.meeting_id = m.id AND mc.class_id IN ({placeholders}))"
            )
            params.extend(id_params)

        if before is not None:
            clauses.append("m.date < %s")
            params.append(before)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM meetings m
                {where}
                ORDER BY m.date DESC, m.meeting_number DESC, m.id ASC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_meeting(r) for r in fetchall(cur)]

    def get_by_id(self, meeting_id: str) -> Optional[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM meetings m WHERE m.id=%s", (meeting_id,))
            row = fetchone(cur)
            return _to_meeting(row) if row else None

    def create(self, meeting: Meeting) -> Meeting:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO meetings(
                    id, class_id, class_ids, kelompok_ids, teacher_id, title, date, topic, description,
                    meeting_type, student_snapshot, meeting_number, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    meeting.meeting_id,
                    meeting.primary_class_id,
                    encode_id_list(meeting.class_ids),
                    encode_id_list(meeting.kelompok_ids) if meeting.kelompok_ids else None,
                    meeting.teacher_id,
                    meeting.title,
                    meeting.date,
                    meeting.topic,
                    meeting.description,
                    meeting.meeting_type.value,
                    encode_id_list(meeting.student_snapshot),
                    int(meeting.sequence_number),
                    meeting.created_at,
                    meeting.updated_at,
                ),
            )
            cur.executemany(
                "INSERT INTO meeting_classes(meeting_id, class_id) VALUES(%s,%s)",
                [(meeting.meeting_id, c) for c in meeting.class_ids],
            )
        return meeting

    def update(
        self,
        *,
        meeting_id: str,
        title: str,
        date: date,
        topic: Optional[str],
        description: Optional[str],
        student_snapshot: Optional[Sequence[str]],
        updated_at: datetime,
    ) -> bool:
        sets = ["title=%s", "date=%s", "topic=%s", "description=%s", "updated_at=%s"]
        params: list = [title, date, topic, description, updated_at]
        if student_snapshot is not None:
            sets.append("student_snapshot=%s")
            params.append(encode_id_list(student_snapshot))
        params.append(meeting_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE meetings SET {', '.join(sets)} WHERE id=%s", tuple(params))
            # Logs carry a copy of the meeting date.
            cur.execute(
                "UPDATE attendance_logs SET date=%s WHERE meeting_id=%s AND date<>%s",
                (date, meeting_id, date),
            )
            # rowcount is 0 when nothing changed; existence is checked by the caller.
            return True

    def delete(self, meeting_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM meeting_classes WHERE meeting_id=%s", (meeting_id,))
            cur.execute("DELETE FROM meetings WHERE id=%s", (meeting_id,))
            return cur.rowcount > 0

    def max_sequence_number(self, class_ids: Iterable[str]) -> int:
        ids = sorted({str(c) for c in class_ids if c})
        if not ids:
            return 0

        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COALESCE(MAX(m.meeting_number), 0) AS last_number
                FROM meetings m
                JOIN meeting_classes mc ON mc.meeting_id = m.id
                WHERE mc.class_id IN ({placeholders})
                """,
                params,
            )
            row = fetchone(cur)
            return int(row["last_number"]) if row else 0
