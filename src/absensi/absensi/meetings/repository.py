from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Iterable, Optional, Protocol, Sequence

from .model import Meeting


class MeetingRepository(Protocol):
    def list_candidates(
        self,
        *,
        class_ids: Optional[Collection[str]],
        before: Optional[date],
        limit: int,
    ) -> Sequence[Meeting]:
        """Meetings touching any of class_ids (all meetings when None), newest first.

        Ordered by date DESC, then sequence number DESC, then id; `before`
        keeps only meetings with date < before.
        """

        raise NotImplementedError

    def get_by_id(self, meeting_id: str) -> Optional[Meeting]:
        raise NotImplementedError

    def create(self, meeting: Meeting) -> Meeting:
        raise NotImplementedError

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
        """Update editable fields; student_snapshot=None leaves the snapshot untouched."""

        raise NotImplementedError

    def delete(self, meeting_id: str) -> bool:
        raise NotImplementedError

    def max_sequence_number(self, class_ids: Iterable[str]) -> int:
        """Highest meeting number among meetings sharing any of class_ids (0 if none)."""

        raise NotImplementedError
