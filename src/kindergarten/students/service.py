from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_non_empty, require_positive_id, require_present
from ..core.enums import Gender
from ..core.exceptions import NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


def _parse_gender(value) -> Optional[Gender]:
    if value is None or isinstance(value, Gender):
        return value
    if not str(value).strip():
        return None
    try:
        return Gender(str(value).strip().upper())
    except ValueError:
        raise ValidationError("Giới tính không hợp lệ")


class StudentService:
    def __init__(self, students: StudentRepository):
        self._students = students

    def add_student(
        self,
        *,
        name: str,
        dob: Optional[date],
        class_id: Optional[int] = None,
        gender=None,
        address: Optional[str] = None,
    ) -> int:
        name = require_non_empty(name, "Tên học sinh")
        dob = require_present(dob, "Ngày sinh")
        if class_id is not None:
            class_id = require_positive_id(class_id, "Mã lớp")

        student_id = self._students.create_student(
            name=name,
            dob=dob,
            class_id=class_id,
            gender=_parse_gender(gender),
            address=(address or "").strip() or None,
        )
        logger.info("Added student %s (id=%s)", name, student_id)
        return student_id

    def update_student(
        self,
        *,
        student_id: int,
        name: str,
        dob: Optional[date],
        class_id: Optional[int] = None,
        gender=None,
        address: Optional[str] = None,
    ) -> None:
        student_id = require_positive_id(student_id, "Mã học sinh")
        name = require_non_empty(name, "Tên học sinh")
        dob = require_present(dob, "Ngày sinh")
        if class_id is not None:
            class_id = require_positive_id(class_id, "Mã lớp")

        if not self._students.update_student(
            student_id=student_id,
            name=name,
            dob=dob,
            class_id=class_id,
            gender=_parse_gender(gender),
            address=(address or "").strip() or None,
        ):
            raise NotFoundError(f"Không tìm thấy học sinh với ID: {student_id}")

    def set_profile_image(self, student_id: int, image: Optional[bytes]) -> None:
        student_id = require_positive_id(student_id, "Mã học sinh")
        if not self._students.update_profile_image(student_id, image):
            raise NotFoundError(f"Không tìm thấy học sinh với ID: {student_id}")

    def delete_student(self, student_id: int) -> None:
        student_id = require_positive_id(student_id, "Mã học sinh")
        if not self._students.delete_by_id(student_id):
            raise NotFoundError(f"Không tìm thấy học sinh với ID: {student_id}")
        logger.info("Deleted student id=%s", student_id)

    def get_student_by_id(self, student_id: int) -> Optional[Student]:
        return self._students.get_by_id(student_id)

    def get_all_students(self) -> Sequence[Student]:
        return self._students.list_all()

    def get_students_by_class(self, class_id: int) -> Sequence[Student]:
        return self._students.list_by_class(class_id)

    def search_students(self, name: Optional[str]) -> Sequence[Student]:
        if not name or not name.strip():
            return self._students.list_all()
        return self._students.search_by_name(name.strip())

    def get_student_count(self, class_id: int) -> int:
        return self._students.count_in_class(class_id)
