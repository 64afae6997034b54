from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from ..core.enums import OrgLevel
from .model import ClassRecord


class OrganizationRepository(Protocol):
    """Class/Org directory.

    Every lookup is batched by id set; callers never query per meeting.
    """

    def get_classes_by_ids(self, class_ids: Iterable[str]) -> Sequence[ClassRecord]:
        raise NotImplementedError

    def list_class_ids_under(self, level: OrgLevel, node_id: str) -> Sequence[str]:
        """All class ids whose Kelompok/Desa/Daerah (per level) equals node_id."""

        raise NotImplementedError

    def list_teacher_class_ids_in_kelompok(self, kelompok_ids: Iterable[str]) -> Sequence[str]:
        """Pengajar class ids located in any of the given Kelompok."""

        raise NotImplementedError
