from __future__ import annotations

from typing import Iterable, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} tidak valid")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None


def require_ids(values: Optional[Iterable[str]], field_name: str) -> list[str]:
    """Normalize an id list: strip blanks, keep first-seen order, reject empty."""

    out: list[str] = []
    seen: set[str] = set()
    for v in values or []:
        s = str(v).strip() if v is not None else ""
        if s and s not in seen:
            seen.add(s)
            out.append(s)
    if not out:
        raise ValidationError(f"{field_name} wajib diisi")
    return out


def require_limit(value: int, *, maximum: int) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationError("limit tidak valid")
    if limit <= 0 or limit > maximum:
        raise ValidationError(f"limit harus antara 1 dan {maximum}")
    return limit
