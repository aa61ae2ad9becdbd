from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_max_length, require_non_empty, require_positive_id
from ..core.constants import (
    DEFAULT_CLASS_CAPACITY,
    GRADE_LEVELS,
    MAX_CLASS_CAPACITY,
    MAX_CLASS_NAME_LENGTH,
    MIN_CLASS_CAPACITY,
)
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import ClassStatistics, SchoolClass, TeacherOption
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    """Use case: quản lý lớp học, sĩ số và phân công giáo viên."""

    def __init__(self, classes: ClassRepository, users: UserRepository):
        self._classes = classes
        self._users = users

    @staticmethod
    def grade_levels() -> tuple[str, ...]:
        return GRADE_LEVELS

    def _validate(self, *, name: str, grade_level: str, capacity: int, school_id: int) -> tuple[str, str]:
        name = require_non_empty(name, "Tên lớp")
        require_max_length(name, "Tên lớp", MAX_CLASS_NAME_LENGTH)
        grade_level = require_non_empty(grade_level, "Khối lớp")
        if not MIN_CLASS_CAPACITY <= int(capacity) <= MAX_CLASS_CAPACITY:
            raise ValidationError(
                f"Sĩ số lớp phải từ {MIN_CLASS_CAPACITY} đến {MAX_CLASS_CAPACITY} học sinh"
            )
        require_positive_id(school_id, "Mã trường")
        return name, grade_level

    def _check_teacher(self, teacher_id: Optional[int]) -> Optional[int]:
        if teacher_id is None:
            return None
        teacher = self._users.get_by_id(int(teacher_id))
        if not teacher or teacher.role != Role.TEACHER:
            raise ValidationError(f"Giáo viên không hợp lệ: {teacher_id}")
        return teacher.id

    def _require_class(self, class_id: int) -> SchoolClass:
        class_id = require_positive_id(class_id, "Mã lớp")
        existing = self._classes.get_by_id(class_id)
        if not existing:
            raise NotFoundError(f"Không tìm thấy lớp với ID: {class_id}")
        return existing

    def add_class(
        self,
        *,
        name: str,
        grade_level: str,
        school_id: int,
        capacity: Optional[int] = None,
        teacher_id: Optional[int] = None,
    ) -> int:
        capacity = DEFAULT_CLASS_CAPACITY if capacity is None else int(capacity)
        name, grade_level = self._validate(name=name, grade_level=grade_level, capacity=capacity, school_id=school_id)
        teacher_id = self._check_teacher(teacher_id)
        if teacher_id is not None:
            self._ensure_teacher_free(teacher_id, except_class_id=None)

        class_id = self._classes.create_class(
            name=name,
            school_id=int(school_id),
            grade_level=grade_level,
            capacity=capacity,
            teacher_id=teacher_id,
        )
        logger.info("Created class %s (id=%s, capacity=%s)", name, class_id, capacity)
        return class_id

    def update_class(
        self,
        *,
        class_id: int,
        name: str,
        grade_level: str,
        capacity: int,
        teacher_id: Optional[int] = None,
    ) -> None:
        existing = self._require_class(class_id)
        name, grade_level = self._validate(
            name=name, grade_level=grade_level, capacity=capacity, school_id=existing.school_id
        )

        if int(capacity) < existing.current_enrollment:
            raise ValidationError(
                f"Không thể giảm sĩ số xuống {int(capacity)}. "
                f"Lớp hiện có {existing.current_enrollment} học sinh."
            )

        teacher_id = self._check_teacher(teacher_id)
        if teacher_id is not None and teacher_id != existing.teacher_id:
            self._ensure_teacher_free(teacher_id, except_class_id=existing.id)

        self._classes.update_class(
            class_id=existing.id,
            name=name,
            grade_level=grade_level,
            capacity=int(capacity),
            teacher_id=teacher_id,
        )

    def delete_class(self, class_id: int) -> None:
        existing = self._require_class(class_id)
        if existing.current_enrollment > 0:
            raise ValidationError(
                f"Không thể xóa lớp. Còn {existing.current_enrollment} học sinh trong lớp. "
                "Vui lòng chuyển học sinh sang lớp khác trước."
            )
        self._classes.delete_by_id(existing.id)
        logger.info("Deleted class %s (id=%s)", existing.name, existing.id)

    def get_class_by_id(self, class_id: int) -> Optional[SchoolClass]:
        return self._classes.get_by_id(class_id)

    def get_all_classes(self) -> Sequence[SchoolClass]:
        return self._classes.list_all()

    def get_classes_by_school(self, school_id: int) -> Sequence[SchoolClass]:
        return self._classes.list_by_school(school_id)

    def get_classes_by_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        return self._classes.list_by_teacher(teacher_id)

    def _scoped(self, school_id: Optional[int]) -> Sequence[SchoolClass]:
        return self._classes.list_all() if school_id is None else self._classes.list_by_school(school_id)

    def search_classes(self, term: Optional[str], *, school_id: Optional[int] = None) -> Sequence[SchoolClass]:
        """Name, grade level or teacher username; a blank term lists every class."""

        if not term or not term.strip():
            return self._scoped(school_id)
        found = self._classes.search(term.strip())
        if school_id is None:
            return found
        return [c for c in found if c.school_id == school_id]

    def _ensure_teacher_free(self, teacher_id: int, *, except_class_id: Optional[int]) -> None:
        for assigned in self._classes.list_by_teacher(teacher_id):
            if assigned.id != except_class_id:
                raise ValidationError(f"Giáo viên đã được phân công lớp: {assigned.name}")

    def assign_teacher(self, *, class_id: int, teacher_id: int) -> None:
        existing = self._require_class(class_id)
        teacher_id = self._check_teacher(require_positive_id(teacher_id, "Mã giáo viên"))
        self._ensure_teacher_free(teacher_id, except_class_id=existing.id)
        self._classes.set_teacher(existing.id, teacher_id)
        logger.info("Assigned teacher %s to class %s", teacher_id, existing.id)

    def remove_teacher(self, class_id: int) -> None:
        existing = self._require_class(class_id)
        self._classes.set_teacher(existing.id, None)

    def get_all_teachers(self) -> Sequence[TeacherOption]:
        return self._classes.list_teachers()

    def get_available_teachers(self) -> Sequence[TeacherOption]:
        return [t for t in self._classes.list_teachers() if t.class_id is None]

    def get_class_statistics(self, school_id: Optional[int] = None) -> ClassStatistics:
        classes = self._scoped(school_id)
        return ClassStatistics(
            total_classes=len(classes),
            classes_with_teachers=sum(1 for c in classes if c.has_teacher),
            total_capacity=sum(c.capacity for c in classes),
            total_enrollment=sum(c.current_enrollment for c in classes),
        )

    def can_accommodate_students(self, class_id: int, additional: int) -> bool:
        existing = self._classes.get_by_id(class_id)
        return existing is not None and existing.current_enrollment + int(additional) <= existing.capacity

    def get_classes_with_available_spots(self, *, school_id: Optional[int] = None) -> Sequence[SchoolClass]:
        return [c for c in self._scoped(school_id) if not c.is_full]

    def get_classes_by_grade_level(self, grade_level: str, *, school_id: Optional[int] = None) -> Sequence[SchoolClass]:
        return [c for c in self._scoped(school_id) if c.grade_level == grade_level]
