from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import Gender
from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_class(self, class_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def search_by_name(self, term: str) -> Sequence[Student]:
        raise NotImplementedError

    def count_in_class(self, class_id: int) -> int:
        raise NotImplementedError

    def create_student(
        self,
        *,
        name: str,
        dob: date,
        class_id: Optional[int],
        gender: Optional[Gender],
        address: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_student(
        self,
        *,
        student_id: int,
        name: str,
        dob: date,
        class_id: Optional[int],
        gender: Optional[Gender],
        address: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def update_profile_image(self, student_id: int, image: Optional[bytes]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError
