from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..access.factory import ScopeStrategyFactory
from ..access.scope import ViewerScope
from ..access.strategies.base import VisibilityDecision
from ..organization.hierarchy import HierarchyIndex
from .model import Meeting


@dataclass(frozen=True)
class VisibleMeeting:
    meeting: Meeting
    decision: VisibilityDecision


class MeetingVisibilityFilter:
    """Reduce candidate meetings to the ones a scope may see, keeping input order."""

    def __init__(self, factory: Optional[ScopeStrategyFactory] = None):
        self._factory = factory or ScopeStrategyFactory()

    def decide(self, meeting: Meeting, scope: ViewerScope, index: HierarchyIndex) -> VisibilityDecision:
        return self._factory.for_scope(scope).decide(meeting, scope, index)

    def apply(self, meetings: Iterable[Meeting], scope: ViewerScope, index: HierarchyIndex) -> list[VisibleMeeting]:
        strategy = self._factory.for_scope(scope)
        out: list[VisibleMeeting] = []
        for m in meetings:
            decision = strategy.decide(m, scope, index)
            if decision.visible:
                out.append(VisibleMeeting(meeting=m, decision=decision))
        return out
