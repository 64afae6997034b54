from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceLog:
    """Satu baris attendance_logs; unik per (student_id, meeting_id)."""

    meeting_id: str
    student_id: str
    status: AttendanceStatus
    reason: Optional[str] = None
    recorded_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "meeting_id": self.meeting_id,
            "student_id": self.student_id,
            "status": self.status.value,
            "reason": self.reason,
            "recorded_by": self.recorded_by,
        }


@dataclass(frozen=True)
class AttendanceEntry:
    """Input row for saving attendance of one student."""

    student_id: str
    status: AttendanceStatus
    reason: Optional[str] = None


@dataclass(frozen=True)
class MeetingStats:
    total_students: int = 0
    present_count: int = 0
    absent_count: int = 0
    sick_count: int = 0
    excused_count: int = 0
    attendance_percentage: int = 0


@dataclass(frozen=True)
class SaveResult:
    meeting_id: str
    saved: int
