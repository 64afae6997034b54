from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..access.factory import ScopeStrategyFactory
from ..access.resolver import ScopeResolver
from ..access.scope import ClassScoped, HierarchyScoped, ViewerScope, derive_scope
from ..attendance.aggregator import AttendanceStatsAggregator
from ..attendance.batch_fetcher import BatchedLogFetcher
from ..attendance.model import MeetingStats
from ..attendance.repository import AttendanceLogRepository
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import optional_text, require_ids, require_limit, require_non_empty
from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, MYSQL_FK_VIOLATION_ERRNO
from ..core.enums import MeetingType, Role
from ..core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
    wrap_errors,
)
from ..organization.hierarchy import HierarchyIndex
from ..organization.repository import OrganizationRepository
from ..students.repository import StudentRepository
from ..users.model import ViewerProfile
from .model import Meeting, MeetingPage, MeetingWithStats
from .repository import MeetingRepository
from .roster import RosterSnapshotResolver
from .visibility import MeetingVisibilityFilter, VisibleMeeting

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessibleMeeting:
    """A meeting the viewer may see, with the students the viewer is responsible for."""

    meeting: Meeting
    roster: frozenset[str]


def _with_stats(meeting: Meeting, stats: MeetingStats, class_names: Sequence[str]) -> MeetingWithStats:
    return MeetingWithStats(
        meeting=meeting,
        total_students=stats.total_students,
        present_count=stats.present_count,
        absent_count=stats.absent_count,
        sick_count=stats.sick_count,
        excused_count=stats.excused_count,
        attendance_percentage=stats.attendance_percentage,
        class_names=tuple(class_names),
    )


class MeetingService:
    def __init__(
        self,
        meetings: MeetingRepository,
        attendance_logs: AttendanceLogRepository,
        directory: OrganizationRepository,
        students: StudentRepository,
        *,
        fetcher: BatchedLogFetcher | None = None,
        aggregator: AttendanceStatsAggregator | None = None,
        strategy_factory: ScopeStrategyFactory | None = None,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._meetings = meetings
        self._logs = attendance_logs
        self._directory = directory
        self._students = students
        self._factory = strategy_factory or ScopeStrategyFactory()
        self._scopes = ScopeResolver(directory)
        self._visibility = MeetingVisibilityFilter(self._factory)
        self._roster = RosterSnapshotResolver(students, self._factory)
        self._fetcher = fetcher or BatchedLogFetcher(attendance_logs)
        self._aggregator = aggregator or AttendanceStatsAggregator()
        self._default_limit = int(default_limit)
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))
        self._now = clock or now_local

    # ------------------------------------------------------------------ reads

    def get_meetings_with_stats(
        self,
        viewer: ViewerProfile,
        *,
        class_filter: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
        cursor: Optional[str | date] = None,
    ) -> MeetingPage:
        """Visible meetings older than cursor, newest first, with attendance statistics.

        Pages are cut on the date column; meetings sharing the boundary date can
        be skipped or repeated across pages.
        """

        limit = require_limit(self._default_limit if limit is None else limit, maximum=MAX_PAGE_LIMIT)
        before = parse_iso_date(cursor) if cursor else None

        with wrap_errors("get_meetings_with_stats"):
            scope = self._scopes.for_viewer(viewer, class_filter)
            strategy = self._factory.for_scope(scope)
            index = HierarchyIndex.load(self._directory, strategy.scope_class_ids(scope))

            neighborhood = strategy.neighborhood(scope, index, self._directory)
            if neighborhood is not None and not neighborhood:
                return MeetingPage()

            candidates = list(self._meetings.list_candidates(class_ids=neighborhood, before=before, limit=limit + 1))
            has_more = len(candidates) > limit
            page = candidates[:limit]

            index = index.extend(self._directory, (c for m in page for c in m.class_ids))
            visible = self._visibility.apply(page, scope, index)
            items = self._build_stats(visible, scope, index)

        logger.debug(
            "meetings for %s: %d candidate(s), %d visible, has_more=%s",
            viewer.user_id,
            len(page),
            len(items),
            has_more,
        )
        return MeetingPage(
            meetings=items,
            has_more=has_more,
            next_cursor=page[-1].date if has_more and page else None,
        )

    def get_meeting(self, viewer: ViewerProfile, meeting_id: str) -> MeetingWithStats:
        with wrap_errors("get_meeting"):
            meeting = self._require_meeting(meeting_id)
            scope, visible, index = self._visible_for(viewer, meeting)
            return self._build_stats([visible], scope, index)[0]

    def get_accessible_meeting(self, viewer: ViewerProfile, meeting_id: str) -> AccessibleMeeting:
        """Meeting plus relevant roster; AuthorizationError when the viewer cannot see it."""

        with wrap_errors("get_accessible_meeting"):
            meeting = self._require_meeting(meeting_id)
            scope, visible, _ = self._visible_for(viewer, meeting)
            roster = self._roster.resolve([visible], scope)[meeting.meeting_id]
        return AccessibleMeeting(meeting=meeting, roster=roster)

    def available_meeting_types(self, class_ids: Iterable[str]) -> list[MeetingType]:
        ids = require_ids(class_ids, "Kelas")
        with wrap_errors("available_meeting_types"):
            index = HierarchyIndex.load(self._directory, ids)
        return self._available_types(ids, index)

    # ----------------------------------------------------------------- writes

    def create_meeting(
        self,
        viewer: ViewerProfile,
        *,
        class_ids: Iterable[str],
        date: str | date,
        title: str,
        meeting_type: str | MeetingType = MeetingType.PEMBINAAN,
        kelompok_ids: Optional[Iterable[str]] = None,
        student_ids: Optional[Iterable[str]] = None,
        topic: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Meeting:
        title = require_non_empty(title, "Judul")
        ids = require_ids(class_ids, "Kelas")
        meeting_date = parse_iso_date(date)
        try:
            mtype = MeetingType(meeting_type)
        except ValueError:
            raise ValidationError(f"Jenis pertemuan tidak valid: {meeting_type}")
        kelompok = tuple(require_ids(kelompok_ids, "Kelompok")) if kelompok_ids else ()

        with wrap_errors("create_meeting"):
            index = HierarchyIndex.load(self._directory, ids)
            for c in ids:
                if c not in index:
                    raise NotFoundError("Kelas", c)

            self._authorize_classes(viewer, ids, index)

            if mtype not in self._available_types(ids, index):
                raise ValidationError(f"Jenis pertemuan {mtype.label} tidak tersedia untuk kelas ini")
            if kelompok and mtype != MeetingType.SAMBUNG_DESA:
                raise ValidationError("Kelompok hanya dapat dipilih untuk pertemuan Sambung Desa")
            if mtype == MeetingType.SAMBUNG_DESA:
                ineligible = [index.name_of(c) for c in ids if not index.category_of(c).is_sambung_eligible]
                if ineligible:
                    raise ValidationError(f"Kelas tidak dapat mengikuti Sambung Desa: {', '.join(ineligible)}")

            if student_ids:
                snapshot = self._require_students(student_ids)
            else:
                snapshot = tuple(self._students.list_ids_in_classes(ids))
                if not snapshot:
                    raise ValidationError("Tidak ada siswa di kelas ini")

            now = self._now()
            meeting = Meeting(
                meeting_id=self._new_id(),
                primary_class_id=ids[0],
                class_ids=tuple(ids),
                kelompok_ids=kelompok,
                teacher_id=viewer.user_id,
                title=title,
                date=meeting_date,
                meeting_type=mtype,
                student_snapshot=snapshot,
                sequence_number=self._meetings.max_sequence_number(ids) + 1,
                topic=optional_text(topic),
                description=optional_text(description),
                created_at=now,
                updated_at=now,
            )
            created = self._meetings.create(meeting)

        logger.info(
            "meeting %s created by %s (%s, %d class(es), %d student(s))",
            created.meeting_id,
            viewer.user_id,
            mtype.value,
            len(ids),
            len(snapshot),
        )
        return created

    def update_meeting(
        self,
        viewer: ViewerProfile,
        meeting_id: str,
        *,
        title: Optional[str] = None,
        date: Optional[str | date] = None,
        topic: Optional[str] = None,
        description: Optional[str] = None,
        student_ids: Optional[Iterable[str]] = None,
    ) -> Meeting:
        """Edit title/date/topic/description; the snapshot changes only when student_ids is given."""

        with wrap_errors("update_meeting"):
            meeting = self._require_meeting(meeting_id)
            index = HierarchyIndex.load(self._directory, meeting.class_ids)
            if not self.can_edit_or_delete(viewer, meeting, index):
                raise AuthorizationError("Anda tidak memiliki izin untuk mengubah pertemuan ini")

            snapshot = self._require_students(student_ids) if student_ids is not None else None
            updated = replace(
                meeting,
                title=require_non_empty(title, "Judul") if title is not None else meeting.title,
                date=parse_iso_date(date) if date is not None else meeting.date,
                topic=optional_text(topic) if topic is not None else meeting.topic,
                description=optional_text(description) if description is not None else meeting.description,
                student_snapshot=snapshot if snapshot is not None else meeting.student_snapshot,
                updated_at=self._now(),
            )
            self._meetings.update(
                meeting_id=meeting.meeting_id,
                title=updated.title,
                date=updated.date,
                topic=updated.topic,
                description=updated.description,
                student_snapshot=snapshot,
                updated_at=updated.updated_at,
            )
        return updated

    def delete_meeting(self, viewer: ViewerProfile, meeting_id: str) -> None:
        """Delete attendance logs first, then the meeting row.

        If the log delete fails the meeting is left in place.
        """

        with wrap_errors("delete_meeting"):
            meeting = self._require_meeting(meeting_id)
            index = HierarchyIndex.load(self._directory, meeting.class_ids)
            if not self.can_edit_or_delete(viewer, meeting, index):
                raise AuthorizationError("Anda tidak memiliki izin untuk menghapus pertemuan ini")

        with wrap_errors("delete_attendance_logs"):
            removed = self._logs.delete_for_meeting(meeting.meeting_id)

        with wrap_errors("delete_meeting"):
            try:
                deleted = self._meetings.delete(meeting.meeting_id)
            except Exception as e:
                if getattr(e, "errno", None) == MYSQL_FK_VIOLATION_ERRNO:
                    raise ReferentialIntegrityError(
                        "Pertemuan masih direferensikan data lain; hapus data terkait terlebih dahulu"
                    ) from e
                raise
        if not deleted:
            raise NotFoundError("Pertemuan", meeting.meeting_id)

        logger.info("meeting %s deleted by %s (%d log(s) removed)", meeting.meeting_id, viewer.user_id, removed)

    # -------------------------------------------------------------- permission

    def can_edit_or_delete(self, viewer: ViewerProfile, meeting: Meeting, index: HierarchyIndex) -> bool:
        """Superadmin, the meeting's creator, or an admin whose node holds the primary class."""

        if viewer.role == Role.SUPERADMIN:
            return True
        if meeting.teacher_id == viewer.user_id:
            return True
        if viewer.role == Role.ADMIN:
            scope = derive_scope(viewer)
            if isinstance(scope, HierarchyScoped):
                return index.node_of(meeting.primary_class_id, scope.level) == scope.node_id
        return False

    # ---------------------------------------------------------------- helpers

    def _require_meeting(self, meeting_id: str) -> Meeting:
        if not meeting_id or not str(meeting_id).strip():
            raise ValidationError("Pertemuan tidak valid")
        meeting = self._meetings.get_by_id(str(meeting_id).strip())
        if not meeting:
            raise NotFoundError("Pertemuan", str(meeting_id))
        return meeting

    def _require_students(self, student_ids: Iterable[str]) -> tuple[str, ...]:
        ids = require_ids(student_ids, "Siswa")
        existing = self._students.get_existing_ids(ids)
        for s in ids:
            if s not in existing:
                raise NotFoundError("Siswa", s)
        return tuple(ids)

    def _visible_for(
        self, viewer: ViewerProfile, meeting: Meeting
    ) -> tuple[ViewerScope, VisibleMeeting, HierarchyIndex]:
        scope = self._scopes.for_viewer(viewer)
        strategy = self._factory.for_scope(scope)
        index = HierarchyIndex.load(self._directory, (*strategy.scope_class_ids(scope), *meeting.class_ids))
        decision = strategy.decide(meeting, scope, index)
        if not decision.visible:
            raise AuthorizationError("Anda tidak memiliki akses ke pertemuan ini")
        return scope, VisibleMeeting(meeting=meeting, decision=decision), index

    def _authorize_classes(self, viewer: ViewerProfile, class_ids: Sequence[str], index: HierarchyIndex) -> None:
        scope = derive_scope(viewer)
        if isinstance(scope, ClassScoped):
            if any(c not in scope.class_ids for c in class_ids):
                raise AuthorizationError("Anda hanya dapat membuat pertemuan untuk kelas Anda sendiri")
        elif isinstance(scope, HierarchyScoped):
            if any(index.node_of(c, scope.level) != scope.node_id for c in class_ids):
                raise AuthorizationError(f"Kelas berada di luar {scope.level.value} Anda")

    @staticmethod
    def _available_types(class_ids: Sequence[str], index: HierarchyIndex) -> list[MeetingType]:
        if any(index.category_of(c).is_sambung_capable for c in class_ids):
            return list(MeetingType)
        return [MeetingType.PEMBINAAN]

    def _build_stats(
        self, visible: Sequence[VisibleMeeting], scope: ViewerScope, index: HierarchyIndex
    ) -> list[MeetingWithStats]:
        if not visible:
            return []

        rosters = self._roster.resolve(visible, scope)
        logs = self._fetcher.fetch_logs(rosters.keys())
        stats = self._aggregator.aggregate(rosters, logs)
        return [
            _with_stats(
                v.meeting,
                stats[v.meeting.meeting_id],
                [index.name_of(c) for c in v.meeting.class_ids],
            )
            for v in visible
        ]
