from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from ..core.exceptions import AuthorizationError, NotFoundError
from ..organization.repository import OrganizationRepository
from ..users.model import ViewerProfile
from .scope import ClassScoped, HierarchyScoped, Unrestricted, ViewerScope, derive_scope


class ScopeResolver:
    """Derive a viewer's scope once per request and apply an optional class filter.

    The filter must be a subset of the classes the viewer may see; anything
    else is rejected, never silently narrowed.
    """

    def __init__(self, directory: OrganizationRepository):
        self._directory = directory

    def for_viewer(self, profile: ViewerProfile, class_filter: Optional[Iterable[str]] = None) -> ViewerScope:
        scope = derive_scope(profile)
        wanted = frozenset(str(c).strip() for c in (class_filter or []) if c and str(c).strip())
        if not wanted:
            return scope
        return self.narrow(scope, wanted)

    def narrow(self, scope: ViewerScope, wanted: frozenset[str]) -> ViewerScope:
        if isinstance(scope, ClassScoped):
            outside = wanted - scope.class_ids
            if outside:
                raise AuthorizationError("Anda hanya dapat melihat kelas yang Anda ajar")
            return replace(scope, class_ids=wanted)

        if isinstance(scope, HierarchyScoped):
            allowed = set(self._directory.list_class_ids_under(scope.level, scope.node_id))
            if wanted - allowed:
                raise AuthorizationError(f"Kelas berada di luar {scope.level.value} Anda")
            return replace(scope, class_filter=wanted)

        if isinstance(scope, Unrestricted):
            found = {r.class_id for r in self._directory.get_classes_by_ids(wanted)}
            missing = sorted(wanted - found)
            if missing:
                raise NotFoundError("Kelas", missing[0])
            return replace(scope, class_filter=wanted)

        raise TypeError(f"Unsupported scope: {type(scope)!r}")
