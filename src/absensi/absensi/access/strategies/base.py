from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

from ...meetings.model import Meeting
from ...organization.hierarchy import HierarchyIndex
from ...organization.repository import OrganizationRepository


@dataclass(frozen=True)
class VisibilityDecision:
    visible: bool
    # Granted through the Pengajar/Caberawit exception rather than a direct class match.
    via_pengajar: bool = False


HIDDEN = VisibilityDecision(visible=False)
VISIBLE = VisibilityDecision(visible=True)


class ScopeStrategy(ABC):
    """Strategy Pattern: one visibility/roster policy per scope variant."""

    def scope_class_ids(self, scope) -> frozenset[str]:
        """Classes the hierarchy index must know before candidates are fetched."""
        return frozenset()

    @abstractmethod
    def neighborhood(
        self, scope, index: HierarchyIndex, directory: OrganizationRepository
    ) -> Optional[frozenset[str]]:
        """Class ids a candidate meeting must touch, or None for no restriction."""
        raise NotImplementedError

    @abstractmethod
    def decide(self, meeting: Meeting, scope, index: HierarchyIndex) -> VisibilityDecision:
        raise NotImplementedError

    def needs_memberships(self, decision: VisibilityDecision) -> bool:
        return False

    def relevant_roster(
        self,
        meeting: Meeting,
        scope,
        decision: VisibilityDecision,
        memberships: Mapping[str, frozenset[str]],
    ) -> frozenset[str]:
        return frozenset(meeting.student_snapshot)
