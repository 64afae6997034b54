from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..core.constants import UNKNOWN_CLASS_NAME
from ..core.enums import OrgLevel
from .classification import classify
from .model import DEFAULT_CATEGORY, UNRESOLVED_ANCESTRY, ClassAncestry, ClassCategory, ClassRecord
from .repository import OrganizationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    name: str
    ancestry: ClassAncestry
    category: ClassCategory


@dataclass(frozen=True)
class HierarchyIndex:
    """Per-request lookup Class -> Kelompok -> Desa -> Daerah plus category flags.

    Built from one batched directory call. Unknown class ids resolve to empty
    ancestry and default flags instead of raising.
    """

    _entries: Mapping[str, _Entry] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[ClassRecord]) -> "HierarchyIndex":
        entries = {
            r.class_id: _Entry(
                name=r.name,
                ancestry=ClassAncestry(kelompok_id=r.kelompok_id, desa_id=r.desa_id, daerah_id=r.daerah_id),
                category=classify(r),
            )
            for r in records
        }
        return cls(entries)

    @classmethod
    def load(cls, directory: OrganizationRepository, class_ids: Iterable[str]) -> "HierarchyIndex":
        return cls().extend(directory, class_ids)

    def extend(self, directory: OrganizationRepository, class_ids: Iterable[str]) -> "HierarchyIndex":
        """Return an index that also covers class_ids, fetching only unknown ids in one batch."""

        missing = sorted({c for c in class_ids if c} - set(self._entries))
        if not missing:
            return self

        records = directory.get_classes_by_ids(missing)
        merged = dict(self._entries)
        merged.update(HierarchyIndex.from_records(records)._entries)

        unresolved = len(missing) - len({r.class_id for r in records})
        if unresolved:
            logger.debug("hierarchy: %d class id(s) unresolved", unresolved)
        return HierarchyIndex(merged)

    def __contains__(self, class_id: object) -> bool:
        return class_id in self._entries

    def ancestors_of(self, class_id: str) -> ClassAncestry:
        entry = self._entries.get(class_id)
        return entry.ancestry if entry else UNRESOLVED_ANCESTRY

    def category_of(self, class_id: str) -> ClassCategory:
        entry = self._entries.get(class_id)
        return entry.category if entry else DEFAULT_CATEGORY

    def name_of(self, class_id: str) -> str:
        entry = self._entries.get(class_id)
        return entry.name if entry else UNKNOWN_CLASS_NAME

    def node_of(self, class_id: str, level: OrgLevel) -> Optional[str]:
        ancestry = self.ancestors_of(class_id)
        if level == OrgLevel.KELOMPOK:
            return ancestry.kelompok_id
        if level == OrgLevel.DESA:
            return ancestry.desa_id
        return ancestry.daerah_id

    def kelompok_ids_of(self, class_ids: Iterable[str]) -> frozenset[str]:
        return frozenset(k for k in (self.ancestors_of(c).kelompok_id for c in class_ids) if k)
