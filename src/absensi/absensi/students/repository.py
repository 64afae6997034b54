from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Sequence


class StudentRepository(Protocol):
    def list_ids_in_classes(self, class_ids: Iterable[str]) -> Sequence[str]:
        """Current members of any of the given classes, ordered by name then id."""

        raise NotImplementedError

    def get_existing_ids(self, student_ids: Iterable[str]) -> set[str]:
        raise NotImplementedError

    def get_class_ids_for_students(self, student_ids: Iterable[str]) -> Mapping[str, frozenset[str]]:
        """student_id -> set of class ids the student currently belongs to."""

        raise NotImplementedError
