from __future__ import annotations

from typing import Optional

from ...meetings.model import Meeting
from ...organization.hierarchy import HierarchyIndex
from ...organization.repository import OrganizationRepository
from ..scope import HierarchyScoped
from .base import HIDDEN, VISIBLE, ScopeStrategy, VisibilityDecision


class HierarchyStrategy(ScopeStrategy):
    """Admin Kelompok/Desa/Daerah: any class of the meeting under the node; full roster."""

    def neighborhood(
        self, scope: HierarchyScoped, index: HierarchyIndex, directory: OrganizationRepository
    ) -> Optional[frozenset[str]]:
        under = frozenset(directory.list_class_ids_under(scope.level, scope.node_id))
        if scope.class_filter:
            return under & scope.class_filter
        return under

    def decide(self, meeting: Meeting, scope: HierarchyScoped, index: HierarchyIndex) -> VisibilityDecision:
        if scope.class_filter and not scope.class_filter.intersection(meeting.class_ids):
            return HIDDEN
        if any(index.node_of(c, scope.level) == scope.node_id for c in meeting.class_ids):
            return VISIBLE
        return HIDDEN
