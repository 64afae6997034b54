from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClassRecord:
    """Baris kelas dari direktori organisasi (sudah dinormalisasi sampai Daerah)."""

    class_id: str
    name: str
    kelompok_id: Optional[str]
    desa_id: Optional[str]
    daerah_id: Optional[str]
    category_codes: tuple[str, ...] = ()
    category_names: tuple[str, ...] = ()
    sambung_capable: bool = False
    master_class_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassAncestry:
    kelompok_id: Optional[str] = None
    desa_id: Optional[str] = None
    daerah_id: Optional[str] = None


@dataclass(frozen=True)
class ClassCategory:
    is_teacher_class: bool = False
    is_caberawit: bool = False
    is_sambung_eligible: bool = False
    is_sambung_capable: bool = False


UNRESOLVED_ANCESTRY = ClassAncestry()
DEFAULT_CATEGORY = ClassCategory()
