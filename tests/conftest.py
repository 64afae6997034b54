from __future__ import annotations

import threading
from datetime import date, datetime

import pytest

from src.absensi.absensi.attendance.batch_fetcher import BatchedLogFetcher
from src.absensi.absensi.attendance.model import AttendanceLog
from src.absensi.absensi.attendance.service import AttendanceService
from src.absensi.absensi.core.enums import AttendanceStatus, MeetingType, OrgLevel, Role
from src.absensi.absensi.meetings.model import Meeting
from src.absensi.absensi.meetings.service import MeetingService
from src.absensi.absensi.organization.model import ClassRecord
from src.absensi.absensi.users.model import ViewerProfile


# Daerah DA1
# ├── Desa D1: Kelompok K1 (C1 Kelas 1 [CABERAWIT], CX Tahfidz, CP Pengajar K1), Kelompok K3 (C3 Pra Nikah)
# └── Desa D2: Kelompok K2 (C2 Remaja, C4 Kelas 2 [PAUD], CP2 Pengajar K2)
# Daerah DA2
# └── Desa D5: Kelompok K5 (C5 Remaja DA2)
CLASS_RECORDS = [
    ClassRecord("C1", "Kelas 1", "K1", "D1", "DA1", category_codes=("CABERAWIT",), category_names=("Caberawit",)),
    ClassRecord("CX", "Tahfidz", "K1", "D1", "DA1", category_codes=("TAHFIDZ",)),
    ClassRecord("CP", "Pengajar K1", "K1", "D1", "DA1"),
    ClassRecord("C3", "Pra Nikah", "K3", "D1", "DA1", category_codes=("PRANIKAH",), sambung_capable=True),
    ClassRecord("C2", "Remaja", "K2", "D2", "DA1", category_codes=("REMAJA",), sambung_capable=True),
    ClassRecord("C4", "Kelas 2", "K2", "D2", "DA1", category_names=("PAUD",)),
    ClassRecord("CP2", "Pengajar K2", "K2", "D2", "DA1"),
    ClassRecord("C5", "Remaja DA2", "K5", "D5", "DA2", category_codes=("REMAJA",), sambung_capable=True),
]

STUDENT_CLASSES = {
    "s1": {"C1"},
    "s2": {"C1"},
    "s3": {"C1"},
    "s4": {"C1", "C2"},
    "s5": {"C2"},
    "s6": {"C2"},
    "s7": {"C3"},
    "s8": {"C4"},
    "s9": {"C5"},
    "t1": {"CP"},
    "t2": {"CP"},
    "s-lulus": set(),
}


class InMemoryOrganizationRepo:
    _LEVEL_ATTR = {OrgLevel.KELOMPOK: "kelompok_id", OrgLevel.DESA: "desa_id", OrgLevel.DAERAH: "daerah_id"}

    def __init__(self, records):
        self._records = {r.class_id: r for r in records}
        self.lookups: list[tuple[str, ...]] = []

    def get_classes_by_ids(self, class_ids):
        ids = tuple(class_ids)
        self.lookups.append(ids)
        return [self._records[c] for c in ids if c in self._records]

    def list_class_ids_under(self, level, node_id):
        attr = self._LEVEL_ATTR[OrgLevel(level)]
        return sorted(c for c, r in self._records.items() if getattr(r, attr) == node_id)

    def list_teacher_class_ids_in_kelompok(self, kelompok_ids):
        wanted = set(kelompok_ids)
        return sorted(
            c for c, r in self._records.items() if r.kelompok_id in wanted and "pengajar" in r.name.lower()
        )


class InMemoryStudentRepo:
    def __init__(self, memberships):
        self._memberships = {s: frozenset(c) for s, c in memberships.items()}
        self.membership_calls = 0

    def list_ids_in_classes(self, class_ids):
        wanted = set(class_ids)
        return sorted(s for s, classes in self._memberships.items() if classes & wanted)

    def get_existing_ids(self, student_ids):
        return {s for s in student_ids if s in self._memberships}

    def get_class_ids_for_students(self, student_ids):
        self.membership_calls += 1
        return {s: self._memberships[s] for s in student_ids if s in self._memberships}


class InMemoryMeetingRepo:
    def __init__(self, events: list[str]):
        self._items: dict[str, Meeting] = {}
        self._events = events
        self.candidate_calls: list[tuple] = []
        self.delete_error: Exception | None = None

    def add(self, meeting: Meeting) -> Meeting:
        self._items[meeting.meeting_id] = meeting
        return meeting

    def list_candidates(self, *, class_ids, before, limit):
        wanted = None if class_ids is None else frozenset(class_ids)
        self.candidate_calls.append((wanted, before, limit))
        rows = [
            m
            for m in self._items.values()
            if (wanted is None or wanted.intersection(m.class_ids)) and (before is None or m.date < before)
        ]
        rows.sort(key=lambda m: m.meeting_id)
        rows.sort(key=lambda m: (m.date, m.sequence_number), reverse=True)
        return rows[:limit]

    def get_by_id(self, meeting_id):
        return self._items.get(meeting_id)

    def create(self, meeting):
        return self.add(meeting)

    def update(self, *, meeting_id, title, date, topic, description, student_snapshot, updated_at):
        m = self._items[meeting_id]
        self._items[meeting_id] = Meeting(
            meeting_id=m.meeting_id,
            primary_class_id=m.primary_class_id,
            class_ids=m.class_ids,
            kelompok_ids=m.kelompok_ids,
            teacher_id=m.teacher_id,
            title=title,
            date=date,
            meeting_type=m.meeting_type,
            student_snapshot=tuple(student_snapshot) if student_snapshot is not None else m.student_snapshot,
            sequence_number=m.sequence_number,
            topic=topic,
            description=description,
            created_at=m.created_at,
            updated_at=updated_at,
        )
        return True

    def delete(self, meeting_id):
        self._events.append(f"delete_meeting:{meeting_id}")
        if self.delete_error is not None:
            raise self.delete_error
        return self._items.pop(meeting_id, None) is not None

    def max_sequence_number(self, class_ids):
        wanted = set(class_ids)
        return max((m.sequence_number for m in self._items.values() if wanted.intersection(m.class_ids)), default=0)


class InMemoryAttendanceRepo:
    def __init__(self, events: list[str]):
        self.rows: dict[tuple[str, str], AttendanceLog] = {}
        self.dates: dict[str, date] = {}
        self.fetch_calls: list[tuple[str, ...]] = []
        self.fail_fetch_for: set[str] = set()
        self.fail_delete = False
        self._events = events
        self._lock = threading.Lock()

    def add(self, meeting_id, student_id, status, reason=None):
        self.rows[(student_id, meeting_id)] = AttendanceLog(meeting_id, student_id, AttendanceStatus(status), reason)

    def _ordered(self):
        return sorted(self.rows.values(), key=lambda log: (log.meeting_id, log.student_id))

    def fetch_for_meetings(self, meeting_ids):
        ids = tuple(meeting_ids)
        with self._lock:
            self.fetch_calls.append(ids)
        if self.fail_fetch_for.intersection(ids):
            raise RuntimeError("connection reset by peer")
        return [log for log in self._ordered() if log.meeting_id in ids]

    def list_for_meeting(self, meeting_id):
        return [log for log in self._ordered() if log.meeting_id == meeting_id]

    def upsert_many(self, *, meeting_id, meeting_date, entries, recorded_by):
        for e in entries:
            self.rows[(e.student_id, meeting_id)] = AttendanceLog(meeting_id, e.student_id, e.status, e.reason, recorded_by)
        self.dates[meeting_id] = meeting_date
        return len(entries)

    def delete_for_meeting(self, meeting_id):
        self._events.append(f"delete_logs:{meeting_id}")
        if self.fail_delete:
            raise RuntimeError("lock wait timeout exceeded")
        keys = [k for k in self.rows if k[1] == meeting_id]
        for k in keys:
            del self.rows[k]
        return len(keys)


class InMemoryProfileRepo:
    def __init__(self, profiles):
        self._profiles = {p.user_id: p for p in profiles}

    def get_viewer_profile(self, user_id):
        return self._profiles.get(user_id)


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 10, 19, 30, 0)


@pytest.fixture
def events():
    return []


@pytest.fixture
def org_repo():
    return InMemoryOrganizationRepo(CLASS_RECORDS)


@pytest.fixture
def student_repo():
    return InMemoryStudentRepo(STUDENT_CLASSES)


@pytest.fixture
def meeting_repo(events):
    return InMemoryMeetingRepo(events)


@pytest.fixture
def attendance_repo(events):
    return InMemoryAttendanceRepo(events)


@pytest.fixture
def make_meeting(meeting_repo):
    def _make(
        meeting_id,
        class_ids,
        snapshot,
        *,
        day=date(2026, 3, 1),
        teacher_id="u-guru-a",
        sequence_number=1,
        meeting_type=MeetingType.PEMBINAAN,
    ):
        return meeting_repo.add(
            Meeting(
                meeting_id=meeting_id,
                primary_class_id=class_ids[0],
                class_ids=tuple(class_ids),
                teacher_id=teacher_id,
                title=f"Pertemuan {meeting_id}",
                date=day,
                meeting_type=meeting_type,
                student_snapshot=tuple(snapshot),
                sequence_number=sequence_number,
            )
        )

    return _make


@pytest.fixture
def teacher_c1():
    """Teaches Caberawit class C1 in Kelompok K1."""
    return ViewerProfile(user_id="u-guru-a", role=Role.TEACHER, taught_class_ids=("C1",))


@pytest.fixture
def teacher_c2():
    """Teaches Remaja class C2 in Kelompok K2 (no Caberawit)."""
    return ViewerProfile(user_id="u-guru-b", role=Role.TEACHER, taught_class_ids=("C2",))


@pytest.fixture
def admin_desa_d1():
    return ViewerProfile(user_id="u-admin-d1", role=Role.ADMIN, daerah_id="DA1", desa_id="D1")


@pytest.fixture
def admin_kelompok_k2():
    return ViewerProfile(user_id="u-admin-k2", role=Role.ADMIN, daerah_id="DA1", desa_id="D2", kelompok_id="K2")


@pytest.fixture
def superadmin():
    return ViewerProfile(user_id="u-super", role=Role.SUPERADMIN)


@pytest.fixture
def profile_repo(teacher_c1, teacher_c2, admin_desa_d1, admin_kelompok_k2, superadmin):
    return InMemoryProfileRepo([teacher_c1, teacher_c2, admin_desa_d1, admin_kelompok_k2, superadmin])


@pytest.fixture
def meeting_service(meeting_repo, attendance_repo, org_repo, student_repo, fixed_now):
    ids = iter(f"m-new-{i}" for i in range(1, 100))
    return MeetingService(
        meeting_repo,
        attendance_repo,
        org_repo,
        student_repo,
        fetcher=BatchedLogFetcher(attendance_repo, chunk_size=2, max_workers=1),
        id_factory=lambda: next(ids),
        clock=lambda: fixed_now,
    )


@pytest.fixture
def attendance_service(attendance_repo, meeting_service):
    return AttendanceService(attendance_repo, meeting_service)
