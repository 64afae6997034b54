from __future__ import annotations

from ..core.constants import CABERAWIT_CATEGORY_CODES, TEACHER_CLASS_KEYWORD
from .model import ClassCategory, ClassRecord


def is_teacher_class(record: ClassRecord) -> bool:
    """Pengajar class: name contains 'pengajar' (case-insensitive)."""
    return TEACHER_CLASS_KEYWORD in (record.name or "").lower()


def is_caberawit_class(record: ClassRecord) -> bool:
    """PAUD / kelas 1-6, by class-master category code or name."""
    labels = {c.strip().upper() for c in (*record.category_codes, *record.category_names) if c}
    return bool(labels & CABERAWIT_CATEGORY_CODES)


def classify(record: ClassRecord) -> ClassCategory:
    teacher = is_teacher_class(record)
    caberawit = is_caberawit_class(record)
    return ClassCategory(
        is_teacher_class=teacher,
        is_caberawit=caberawit,
        is_sambung_eligible=not teacher and not caberawit,
        is_sambung_capable=bool(record.sambung_capable),
    )
