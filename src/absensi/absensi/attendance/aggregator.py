from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping

from ..core.enums import AttendanceStatus
from .model import AttendanceLog, MeetingStats


def attendance_percentage(present: int, total: int) -> int:
    """round(present / total * 100) with halves rounded up; 0 for an empty roster."""

    if total <= 0:
        return 0
    return (present * 200 + total) // (2 * total)


def group_logs(logs: Iterable[AttendanceLog], meeting_ids: Iterable[str]) -> dict[str, dict[str, AttendanceLog]]:
    """meeting_id -> student_id -> log.

    Logs of meetings outside meeting_ids (e.g. orphans of a half-finished
    delete) are dropped; a repeated (meeting, student) keeps the last row.
    """

    grouped: dict[str, dict[str, AttendanceLog]] = {m: {} for m in meeting_ids}
    for log in logs:
        bucket = grouped.get(log.meeting_id)
        if bucket is not None:
            bucket[log.student_id] = log
    return grouped


class AttendanceStatsAggregator:
    """Fold attendance logs into per-meeting counts against the relevant roster.

    Students without a log are "not yet recorded": they count toward
    total_students but toward no status bucket.
    """

    def stats_for(self, roster: frozenset[str], logs_by_student: Mapping[str, AttendanceLog]) -> MeetingStats:
        counts = Counter(log.status for sid, log in logs_by_student.items() if sid in roster)
        total = len(roster)
        present = counts[AttendanceStatus.PRESENT]
        return MeetingStats(
            total_students=total,
            present_count=present,
            absent_count=counts[AttendanceStatus.ABSENT],
            sick_count=counts[AttendanceStatus.SICK],
            excused_count=counts[AttendanceStatus.EXCUSED],
            attendance_percentage=attendance_percentage(present, total),
        )

    def aggregate(
        self,
        rosters: Mapping[str, frozenset[str]],
        logs: Iterable[AttendanceLog],
    ) -> dict[str, MeetingStats]:
        grouped = group_logs(logs, rosters.keys())
        return {meeting_id: self.stats_for(roster, grouped[meeting_id]) for meeting_id, roster in rosters.items()}
