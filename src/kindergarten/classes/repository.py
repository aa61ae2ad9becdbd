from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolClass, TeacherOption


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def list_all(self) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_by_school(self, school_id: int) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_by_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def search(self, term: str) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def create_class(
        self,
        *,
        name: str,
        school_id: int,
        grade_level: str,
        capacity: int,
        teacher_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_class(
        self,
        *,
        class_id: int,
        name: str,
        grade_level: str,
        capacity: int,
        teacher_id: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, class_id: int) -> bool:
        raise NotImplementedError

    def set_teacher(self, class_id: int, teacher_id: Optional[int]) -> bool:
        raise NotImplementedError

    def list_teachers(self) -> Sequence[TeacherOption]:
        raise NotImplementedError
