from __future__ import annotations

import logging
from typing import Iterable, Mapping, Union

from ..common.validators import optional_text
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError, wrap_errors
from ..meetings.service import MeetingService
from ..users.model import ViewerProfile
from .model import AttendanceEntry, AttendanceLog, SaveResult
from .repository import AttendanceLogRepository

logger = logging.getLogger(__name__)

EntryInput = Union[AttendanceEntry, Mapping[str, object]]


def _to_entry(raw: EntryInput) -> AttendanceEntry:
    if isinstance(raw, AttendanceEntry):
        return raw
    student_id = str(raw.get("student_id") or "").strip()
    if not student_id:
        raise ValidationError("student_id wajib diisi")
    status = raw.get("status")
    try:
        parsed = AttendanceStatus(str(status).strip().upper())
    except ValueError:
        raise ValidationError(f"Status kehadiran tidak valid: {status!r}")
    reason = raw.get("reason")
    return AttendanceEntry(student_id=student_id, status=parsed, reason=optional_text(str(reason)) if reason else None)


class AttendanceService:
    def __init__(self, logs: AttendanceLogRepository, meetings: MeetingService):
        self._logs = logs
        self._meetings = meetings

    def save_attendance_for_meeting(
        self,
        viewer: ViewerProfile,
        meeting_id: str,
        entries: Iterable[EntryInput],
    ) -> SaveResult:
        """Upsert one log per (student, meeting); a repeated student keeps its last entry."""

        latest: dict[str, AttendanceEntry] = {}
        for raw in entries or []:
            entry = _to_entry(raw)
            latest.pop(entry.student_id, None)
            latest[entry.student_id] = entry
        if not latest:
            raise ValidationError("Data absensi kosong")

        accessible = self._meetings.get_accessible_meeting(viewer, meeting_id)
        meeting = accessible.meeting
        snapshot = set(meeting.student_snapshot)
        for student_id in latest:
            if student_id not in snapshot:
                raise NotFoundError(
                    "Siswa",
                    student_id,
                    message=f"Siswa {student_id} tidak terdaftar pada pertemuan ini",
                )
            if student_id not in accessible.roster:
                raise AuthorizationError(f"Anda tidak dapat mengisi absensi siswa {student_id}")

        with wrap_errors("save_attendance_for_meeting"):
            saved = self._logs.upsert_many(
                meeting_id=meeting.meeting_id,
                meeting_date=meeting.date,
                entries=list(latest.values()),
                recorded_by=viewer.user_id,
            )

        logger.info("attendance saved for meeting %s by %s: %d row(s)", meeting.meeting_id, viewer.user_id, saved)
        return SaveResult(meeting_id=meeting.meeting_id, saved=saved)

    def get_attendance_for_meeting(self, viewer: ViewerProfile, meeting_id: str) -> list[AttendanceLog]:
        """Logs of the meeting restricted to the students the viewer is responsible for."""

        accessible = self._meetings.get_accessible_meeting(viewer, meeting_id)
        with wrap_errors("get_attendance_for_meeting"):
            logs = self._logs.list_for_meeting(accessible.meeting.meeting_id)
        return [log for log in logs if log.student_id in accessible.roster]
