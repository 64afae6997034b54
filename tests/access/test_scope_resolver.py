from __future__ import annotations

import pytest

from src.absensi.absensi.access.factory import ScopeStrategyFactory
from src.absensi.absensi.access.resolver import ScopeResolver
from src.absensi.absensi.access.scope import ClassScoped, HierarchyScoped, Unrestricted, derive_scope
from src.absensi.absensi.access.strategies.class_strategy import ClassStrategy
from src.absensi.absensi.access.strategies.hierarchy_strategy import HierarchyStrategy
from src.absensi.absensi.access.strategies.unrestricted_strategy import UnrestrictedStrategy
from src.absensi.absensi.core.enums import OrgLevel, Role
from src.absensi.absensi.core.exceptions import AuthorizationError, NotFoundError
from src.absensi.absensi.users.model import ViewerProfile


def test_admin_scope_uses_most_specific_level(admin_desa_d1, admin_kelompok_k2):
    assert derive_scope(admin_desa_d1) == HierarchyScoped(level=OrgLevel.DESA, node_id="D1")
    assert derive_scope(admin_kelompok_k2) == HierarchyScoped(level=OrgLevel.KELOMPOK, node_id="K2")


def test_admin_without_any_node_is_rejected():
    with pytest.raises(AuthorizationError):
        derive_scope(ViewerProfile(user_id="u-x", role=Role.ADMIN))


def test_teacher_and_superadmin_scopes(teacher_c1, superadmin):
    assert derive_scope(teacher_c1) == ClassScoped(class_ids=frozenset({"C1"}), taught_class_ids=frozenset({"C1"}))
    assert derive_scope(superadmin) == Unrestricted()


def test_factory_maps_each_scope_to_its_strategy():
    factory = ScopeStrategyFactory()
    assert isinstance(factory.for_scope(Unrestricted()), UnrestrictedStrategy)
    assert isinstance(factory.for_scope(HierarchyScoped(OrgLevel.DESA, "D1")), HierarchyStrategy)
    assert isinstance(factory.for_scope(ClassScoped(frozenset({"C1"}))), ClassStrategy)


def test_teacher_filter_must_be_taught(org_repo):
    resolver = ScopeResolver(org_repo)
    teacher = ViewerProfile(user_id="u", role=Role.TEACHER, taught_class_ids=("C1", "C3"))

    assert resolver.for_viewer(teacher, ["C3"]) == ClassScoped(
        class_ids=frozenset({"C3"}), taught_class_ids=frozenset({"C1", "C3"})
    )
    with pytest.raises(AuthorizationError):
        resolver.for_viewer(teacher, ["C2"])


def test_admin_filter_must_lie_under_node(org_repo, admin_desa_d1):
    resolver = ScopeResolver(org_repo)

    scope = resolver.for_viewer(admin_desa_d1, ["C3", " C1 "])
    assert scope.class_filter == frozenset({"C1", "C3"})
    with pytest.raises(AuthorizationError):
        resolver.for_viewer(admin_desa_d1, ["C2"])


def test_superadmin_filter_on_unknown_class_is_not_found(org_repo, superadmin):
    resolver = ScopeResolver(org_repo)

    assert resolver.for_viewer(superadmin, ["C2"]) == Unrestricted(class_filter=frozenset({"C2"}))
    with pytest.raises(NotFoundError):
        resolver.for_viewer(superadmin, ["NOPE"])


def test_blank_filter_keeps_full_scope(org_repo, teacher_c1):
    assert ScopeResolver(org_repo).for_viewer(teacher_c1, ["", "  "]) == derive_scope(teacher_c1)
