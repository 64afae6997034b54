from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import MeetingType


@dataclass(frozen=True)
class Meeting:
    """Pertemuan (meeting) with its frozen student snapshot.

    student_snapshot is the authoritative roster for statistics; it is only
    replaced by an explicit roster edit, never re-derived from class membership.
    """

    meeting_id: str
    primary_class_id: str
    class_ids: tuple[str, ...]
    teacher_id: str
    title: str
    date: date
    meeting_type: MeetingType
    student_snapshot: tuple[str, ...]
    sequence_number: int = 0
    kelompok_ids: tuple[str, ...] = ()
    topic: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.class_ids:
            raise ValueError("Meeting needs at least one class")
        if self.primary_class_id not in self.class_ids:
            raise ValueError("primary_class_id must be one of class_ids")

    def to_dict(self) -> dict:
        return {
            "id": self.meeting_id,
            "class_id": self.primary_class_id,
            "class_ids": list(self.class_ids),
            "kelompok_ids": list(self.kelompok_ids),
            "teacher_id": self.teacher_id,
            "title": self.title,
            "date": self.date.strftime("%Y-%m-%d"),
            "topic": self.topic,
            "description": self.description,
            "meeting_type": self.meeting_type.value,
            "meeting_type_label": self.meeting_type.label,
            "student_snapshot": list(self.student_snapshot),
            "meeting_number": self.sequence_number,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class MeetingWithStats:
    """Read-model returned to list/detail callers."""

    meeting: Meeting
    total_students: int
    present_count: int
    absent_count: int
    sick_count: int
    excused_count: int
    attendance_percentage: int
    class_names: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        out = self.meeting.to_dict()
        out.update(
            {
                "class_names": list(self.class_names),
                "totalStudents": self.total_students,
                "presentCount": self.present_count,
                "absentCount": self.absent_count,
                "sickCount": self.sick_count,
                "excusedCount": self.excused_count,
                "attendancePercentage": self.attendance_percentage,
            }
        )
        return out


@dataclass(frozen=True)
class MeetingPage:
    meetings: list[MeetingWithStats] = field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "meetings": [m.to_dict() for m in self.meetings],
            "hasMore": self.has_more,
            "nextCursor": self.next_cursor.strftime("%Y-%m-%d") if self.next_cursor else None,
        }
