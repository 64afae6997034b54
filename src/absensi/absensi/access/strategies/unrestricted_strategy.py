from __future__ import annotations

from typing import Optional

from ...meetings.model import Meeting
from ...organization.hierarchy import HierarchyIndex
from ...organization.repository import OrganizationRepository
from ..scope import Unrestricted
from .base import HIDDEN, VISIBLE, ScopeStrategy, VisibilityDecision


class UnrestrictedStrategy(ScopeStrategy):
    """Superadmin: everything, full roster."""

    def neighborhood(
        self, scope: Unrestricted, index: HierarchyIndex, directory: OrganizationRepository
    ) -> Optional[frozenset[str]]:
        return scope.class_filter or None

    def decide(self, meeting: Meeting, scope: Unrestricted, index: HierarchyIndex) -> VisibilityDecision:
        if scope.class_filter and not scope.class_filter.intersection(meeting.class_ids):
            return HIDDEN
        return VISIBLE
