from __future__ import annotations

from src.absensi.absensi.access.resolver import ScopeResolver
from src.absensi.absensi.access.scope import derive_scope
from src.absensi.absensi.access.strategies.class_strategy import ClassStrategy
from src.absensi.absensi.core.enums import Role
from src.absensi.absensi.meetings.roster import RosterSnapshotResolver
from src.absensi.absensi.meetings.visibility import MeetingVisibilityFilter
from src.absensi.absensi.organization.hierarchy import HierarchyIndex
from src.absensi.absensi.users.model import ViewerProfile


def _index(org_repo, *class_ids):
    return HierarchyIndex.load(org_repo, class_ids)


def test_teacher_does_not_see_meeting_of_other_kelompok(org_repo, make_meeting, teacher_c2):
    # Teacher of C2 (K2, no Caberawit); meeting held for C3 in K3.
    meeting = make_meeting("m1", ["C3"], ["s7"])
    scope = derive_scope(teacher_c2)

    decision = MeetingVisibilityFilter().decide(meeting, scope, _index(org_repo, "C2", "C3"))
    assert not decision.visible


def test_caberawit_teacher_sees_pengajar_meeting_of_own_kelompok(org_repo, student_repo, make_meeting, teacher_c1):
    meeting = make_meeting("m-pengajar", ["CP"], ["t1", "t2"])
    scope = derive_scope(teacher_c1)
    index = _index(org_repo, "C1", "CP")

    visible = MeetingVisibilityFilter().apply([meeting], scope, index)
    assert [v.meeting.meeting_id for v in visible] == ["m-pengajar"]
    assert visible[0].decision.via_pengajar

    rosters = RosterSnapshotResolver(student_repo).resolve(visible, scope)
    assert rosters["m-pengajar"] == frozenset({"t1", "t2"})
    assert student_repo.membership_calls == 0


def test_pengajar_exception_needs_caberawit_and_same_kelompok(org_repo, make_meeting, teacher_c1, teacher_c2):
    other_kelompok = make_meeting("m-cp2", ["CP2"], ["t1"])
    own_kelompok = make_meeting("m-cp", ["CP"], ["t1"])

    flt = MeetingVisibilityFilter()
    assert not flt.decide(other_kelompok, derive_scope(teacher_c1), _index(org_repo, "C1", "CP2")).visible
    # C2 is in K2 too but is not Caberawit.
    assert not flt.decide(other_kelompok, derive_scope(teacher_c2), _index(org_repo, "C2", "CP2")).visible
    assert not flt.decide(own_kelompok, derive_scope(teacher_c2), _index(org_repo, "C2", "CP")).visible


def test_pengajar_neighborhood_adds_teacher_classes_of_kelompok(org_repo, teacher_c1, teacher_c2):
    strategy = ClassStrategy()

    scope = derive_scope(teacher_c1)
    assert strategy.neighborhood(scope, _index(org_repo, "C1"), org_repo) == frozenset({"C1", "CP"})

    scope = derive_scope(teacher_c2)
    assert strategy.neighborhood(scope, _index(org_repo, "C2"), org_repo) == frozenset({"C2"})


def test_admin_sees_meeting_when_any_class_is_under_node(org_repo, student_repo, make_meeting, admin_desa_d1):
    # C1 resolves to Desa D1, C2 to Desa D2.
    meeting = make_meeting("m-mixed", ["C1", "C2"], ["s1", "s2", "s5", "s6"])
    scope = derive_scope(admin_desa_d1)

    visible = MeetingVisibilityFilter().apply([meeting], scope, _index(org_repo, "C1", "C2"))
    assert len(visible) == 1

    rosters = RosterSnapshotResolver(student_repo).resolve(visible, scope)
    assert rosters["m-mixed"] == frozenset({"s1", "s2", "s5", "s6"})


def test_admin_does_not_see_meeting_outside_node(org_repo, make_meeting, admin_desa_d1):
    meeting = make_meeting("m-d2", ["C2", "C4"], ["s5"])
    assert not MeetingVisibilityFilter().decide(meeting, derive_scope(admin_desa_d1), _index(org_repo, "C2", "C4")).visible


def test_superadmin_sees_meeting_with_unresolved_class(org_repo, make_meeting, superadmin, admin_desa_d1):
    meeting = make_meeting("m-gone", ["GONE"], ["s1"])
    index = _index(org_repo, "GONE")

    assert MeetingVisibilityFilter().decide(meeting, derive_scope(superadmin), index).visible
    assert not MeetingVisibilityFilter().decide(meeting, derive_scope(admin_desa_d1), index).visible


def test_filter_preserves_candidate_order(org_repo, make_meeting, superadmin):
    meetings = [make_meeting(f"m{i}", ["C1"], ["s1"]) for i in (3, 1, 2)]
    visible = MeetingVisibilityFilter().apply(meetings, derive_scope(superadmin), _index(org_repo, "C1"))
    assert [v.meeting.meeting_id for v in visible] == ["m3", "m1", "m2"]


def test_filtered_teacher_keeps_pengajar_exception_from_taught_caberawit(org_repo, make_meeting):
    # Teaches C1 (Caberawit) and CX, both in K1; the request is filtered to CX alone.
    teacher = ViewerProfile(user_id="u-guru-x", role=Role.TEACHER, taught_class_ids=("C1", "CX"))
    scope = ScopeResolver(org_repo).for_viewer(teacher, ["CX"])
    strategy = ClassStrategy()
    index = _index(org_repo, *strategy.scope_class_ids(scope), "CP", "CP2")

    assert strategy.neighborhood(scope, index, org_repo) == frozenset({"CX", "CP"})
    assert MeetingVisibilityFilter().decide(make_meeting("m-cp", ["CP"], ["t1"]), scope, index).via_pengajar
    assert not MeetingVisibilityFilter().decide(make_meeting("m-c1", ["C1"], ["s1"]), scope, index).visible
    assert not MeetingVisibilityFilter().decide(make_meeting("m-cp2", ["CP2"], ["t1"]), scope, index).visible


def test_filter_without_taught_caberawit_gets_no_pengajar_meetings(org_repo, make_meeting):
    teacher = ViewerProfile(user_id="u-guru-y", role=Role.TEACHER, taught_class_ids=("CX", "C2"))
    scope = ScopeResolver(org_repo).for_viewer(teacher, ["CX"])
    strategy = ClassStrategy()
    index = _index(org_repo, *strategy.scope_class_ids(scope), "CP")

    assert strategy.neighborhood(scope, index, org_repo) == frozenset({"CX"})
    assert not MeetingVisibilityFilter().decide(make_meeting("m-cp", ["CP"], ["t1"]), scope, index).visible
