from __future__ import annotations

from typing import Optional, Protocol, Sequence


class AuthorizationRepository(Protocol):
    """Ownership facts used by the access checks (one small query each)."""

    def get_class_school_id(self, class_id: int) -> Optional[int]:
        raise NotImplementedError

    def get_user_school_id(self, user_id: int) -> Optional[int]:
        raise NotImplementedError

    def get_student_class_id(self, student_id: int) -> Optional[int]:
        raise NotImplementedError

    def is_teacher_assigned_to_class(self, teacher_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def is_parent_child_in_class(self, parent_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def principal_can_access_post(self, principal_id: int, post_id: int) -> bool:
        raise NotImplementedError

    def teacher_can_access_post(self, teacher_id: int, post_id: int) -> bool:
        raise NotImplementedError

    def parent_can_access_post(self, parent_id: int, post_id: int) -> bool:
        raise NotImplementedError

    def list_class_ids_for_school(self, school_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_class_ids_for_teacher(self, teacher_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_class_ids_for_parent(self, parent_id: int) -> Sequence[int]:
        raise NotImplementedError
