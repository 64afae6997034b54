from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..core.enums import OrgLevel, Role
from ..core.exceptions import AuthorizationError
from ..users.model import ViewerProfile


@dataclass(frozen=True)
class Unrestricted:
    """Superadmin: every meeting, optionally narrowed to a class filter."""

    class_filter: frozenset[str] = frozenset()


@dataclass(frozen=True)
class HierarchyScoped:
    """Admin fixed to one Kelompok, Desa or Daerah node."""

    level: OrgLevel
    node_id: str
    class_filter: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ClassScoped:
    """Teacher: the effective classes (taught set or narrowed filter), possibly across Kelompok.

    taught_class_ids keeps the full taught set; the Caberawit check of the
    Pengajar exception is made against it even when class_ids is a filter.
    """

    class_ids: frozenset[str]
    taught_class_ids: frozenset[str] = frozenset()


ViewerScope = Union[Unrestricted, HierarchyScoped, ClassScoped]


def derive_scope(profile: ViewerProfile) -> ViewerScope:
    if profile.role == Role.SUPERADMIN:
        return Unrestricted()

    if profile.role == Role.ADMIN:
        # Most specific level wins; an admin scope is exactly one node.
        if profile.kelompok_id:
            return HierarchyScoped(level=OrgLevel.KELOMPOK, node_id=str(profile.kelompok_id))
        if profile.desa_id:
            return HierarchyScoped(level=OrgLevel.DESA, node_id=str(profile.desa_id))
        if profile.daerah_id:
            return HierarchyScoped(level=OrgLevel.DAERAH, node_id=str(profile.daerah_id))
        raise AuthorizationError("Admin belum ditempatkan pada Daerah/Desa/Kelompok")

    if profile.role == Role.TEACHER:
        taught = frozenset(str(c) for c in profile.taught_class_ids)
        return ClassScoped(class_ids=taught, taught_class_ids=taught)

    raise AuthorizationError(f"Peran tidak dikenal: {profile.role}")
