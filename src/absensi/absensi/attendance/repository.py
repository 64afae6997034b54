from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import AttendanceEntry, AttendanceLog


class AttendanceLogRepository(Protocol):
    def fetch_for_meetings(self, meeting_ids: Sequence[str]) -> Sequence[AttendanceLog]:
        """One "meeting_id IN (...)" query; callers keep the list under the store's ceiling."""

        raise NotImplementedError

    def list_for_meeting(self, meeting_id: str) -> Sequence[AttendanceLog]:
        raise NotImplementedError

    def upsert_many(
        self, *, meeting_id: str, meeting_date: date, entries: Sequence[AttendanceEntry], recorded_by: str
    ) -> int:
        """Insert or overwrite by (student_id, meeting_id); last write wins."""

        raise NotImplementedError

    def delete_for_meeting(self, meeting_id: str) -> int:
        raise NotImplementedError
