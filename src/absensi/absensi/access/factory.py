from __future__ import annotations

from dataclasses import dataclass

from .scope import ClassScoped, HierarchyScoped, Unrestricted, ViewerScope
from .strategies.base import ScopeStrategy
from .strategies.class_strategy import ClassStrategy
from .strategies.hierarchy_strategy import HierarchyStrategy
from .strategies.unrestricted_strategy import UnrestrictedStrategy

_STRATEGIES: dict[type, ScopeStrategy] = {
    Unrestricted: UnrestrictedStrategy(),
    HierarchyScoped: HierarchyStrategy(),
    ClassScoped: ClassStrategy(),
}


@dataclass
class ScopeStrategyFactory:
    """Factory Pattern: pick the strategy for a scope variant."""

    def for_scope(self, scope: ViewerScope) -> ScopeStrategy:
        strategy = _STRATEGIES.get(type(scope))
        if strategy is None:
            raise TypeError(f"Unsupported scope: {type(scope)!r}")
        return strategy
