from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Peran pengguna untuk penentuan cakupan data."""

    TEACHER = "teacher"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class OrgLevel(str, Enum):
    """Tingkat organisasi di atas kelas (Daerah > Desa > Kelompok)."""

    DAERAH = "daerah"
    DESA = "desa"
    KELOMPOK = "kelompok"


class MeetingType(str, Enum):
    PEMBINAAN = "PEMBINAAN"
    SAMBUNG_KELOMPOK = "SAMBUNG_KELOMPOK"
    SAMBUNG_DESA = "SAMBUNG_DESA"
    SAMBUNG_DAERAH = "SAMBUNG_DAERAH"
    SAMBUNG_PUSAT = "SAMBUNG_PUSAT"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class AttendanceStatus(str, Enum):
    """Status kehadiran yang disimpan di attendance_logs."""

    PRESENT = "H"
    EXCUSED = "I"
    SICK = "S"
    ABSENT = "A"
