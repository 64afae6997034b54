from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class ViewerProfile:
    """Profil pengguna yang sedang melihat data.

    Admin yang dibatasi memiliki tepat satu dari kelompok_id/desa_id/daerah_id
    (yang paling spesifik menang); superadmin tidak memiliki satupun.
    """

    user_id: str
    role: Role
    full_name: str = ""
    daerah_id: Optional[str] = None
    desa_id: Optional[str] = None
    kelompok_id: Optional[str] = None
    taught_class_ids: tuple[str, ...] = ()
