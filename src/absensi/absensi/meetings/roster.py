from __future__ import annotations

from typing import Optional, Sequence

from ..access.factory import ScopeStrategyFactory
from ..access.scope import ViewerScope
from ..students.repository import StudentRepository
from .visibility import VisibleMeeting


class RosterSnapshotResolver:
    """Relevant roster (statistics denominator) per visible meeting.

    Always a subset of the meeting's student_snapshot. Class memberships are
    looked up once for every student that needs per-class filtering.
    """

    def __init__(self, students: StudentRepository, factory: Optional[ScopeStrategyFactory] = None):
        self._students = students
        self._factory = factory or ScopeStrategyFactory()

    def resolve(self, visible: Sequence[VisibleMeeting], scope: ViewerScope) -> dict[str, frozenset[str]]:
        strategy = self._factory.for_scope(scope)

        needed: set[str] = set()
        for v in visible:
            if strategy.needs_memberships(v.decision):
                needed.update(v.meeting.student_snapshot)
        memberships = self._students.get_class_ids_for_students(needed) if needed else {}

        return {
            v.meeting.meeting_id: strategy.relevant_roster(v.meeting, scope, v.decision, memberships)
            for v in visible
        }
