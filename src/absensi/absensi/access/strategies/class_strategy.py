from __future__ import annotations

from typing import Mapping, Optional

from ...meetings.model import Meeting
from ...organization.hierarchy import HierarchyIndex
from ...organization.repository import OrganizationRepository
from ..scope import ClassScoped
from .base import HIDDEN, VISIBLE, ScopeStrategy, VisibilityDecision

VISIBLE_VIA_PENGAJAR = VisibilityDecision(visible=True, via_pengajar=True)


class ClassStrategy(ScopeStrategy):
    """Teacher: meetings of taught classes, plus Pengajar meetings of their Kelompok
    when at least one taught class is Caberawit.
    """

    def scope_class_ids(self, scope: ClassScoped) -> frozenset[str]:
        return scope.class_ids | scope.taught_class_ids

    @staticmethod
    def _pengajar_kelompok(scope: ClassScoped, index: HierarchyIndex) -> frozenset[str]:
        """Kelompok whose Pengajar meetings open up to this teacher (empty without Caberawit).

        Caberawit is checked on the full taught set; the Kelompok come from
        the effective (possibly filtered) classes.
        """

        taught = scope.taught_class_ids or scope.class_ids
        if not any(index.category_of(c).is_caberawit for c in taught):
            return frozenset()
        return index.kelompok_ids_of(scope.class_ids)

    def neighborhood(
        self, scope: ClassScoped, index: HierarchyIndex, directory: OrganizationRepository
    ) -> Optional[frozenset[str]]:
        kelompok = self._pengajar_kelompok(scope, index)
        if not kelompok:
            return scope.class_ids
        return scope.class_ids | frozenset(directory.list_teacher_class_ids_in_kelompok(kelompok))

    def decide(self, meeting: Meeting, scope: ClassScoped, index: HierarchyIndex) -> VisibilityDecision:
        if scope.class_ids.intersection(meeting.class_ids):
            return VISIBLE

        kelompok = self._pengajar_kelompok(scope, index)
        if kelompok and any(
            index.category_of(c).is_teacher_class and index.ancestors_of(c).kelompok_id in kelompok
            for c in meeting.class_ids
        ):
            return VISIBLE_VIA_PENGAJAR
        return HIDDEN

    def needs_memberships(self, decision: VisibilityDecision) -> bool:
        return decision.visible and not decision.via_pengajar

    def relevant_roster(
        self,
        meeting: Meeting,
        scope: ClassScoped,
        decision: VisibilityDecision,
        memberships: Mapping[str, frozenset[str]],
    ) -> frozenset[str]:
        if decision.via_pengajar:
            return frozenset(meeting.student_snapshot)
        return frozenset(
            s for s in meeting.student_snapshot if scope.class_ids.intersection(memberships.get(s, ()))
        )
