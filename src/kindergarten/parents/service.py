from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_positive_id
from ..core.constants import DEFAULT_PARENT_RELATIONSHIP
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from ..users.repository import UserRepository
from .model import Parent, ParentChild
from .repository import ParentRepository

logger = logging.getLogger(__name__)


class ParentService:
    def __init__(self, parents: ParentRepository, users: UserRepository, students: StudentRepository):
        self._parents = parents
        self._users = users
        self._students = students

    def get_parent_children(self, user_id: int) -> Sequence[ParentChild]:
        return self._parents.list_children(user_id)

    def get_first_child(self, user_id: int) -> Optional[ParentChild]:
        children = self._parents.list_children(user_id)
        return children[0] if children else None

    def has_children(self, user_id: int) -> bool:
        return bool(self._parents.list_children(user_id))

    def get_profile(self, user_id: int) -> Optional[Parent]:
        return self._parents.get_profile(user_id)

    def link_child(self, *, parent_user_id: int, student_id: int, relationship: Optional[str] = None) -> int:
        parent_user_id = require_positive_id(parent_user_id, "Mã phụ huynh")
        student_id = require_positive_id(student_id, "Mã học sinh")
        relationship = (relationship or "").strip() or DEFAULT_PARENT_RELATIONSHIP

        user = self._users.get_by_id(parent_user_id)
        if not user:
            raise NotFoundError(f"Không tìm thấy người dùng với ID: {parent_user_id}")
        if user.role != Role.PARENT:
            raise ValidationError("Chỉ tài khoản phụ huynh mới được liên kết với học sinh")

        if not self._students.get_by_id(student_id):
            raise NotFoundError(f"Không tìm thấy học sinh với ID: {student_id}")

        if self._parents.link_exists(parent_user_id, student_id):
            raise ValidationError("Phụ huynh đã được liên kết với học sinh này")

        profile = self._parents.get_profile(parent_user_id)
        name = profile.name if profile else user.username
        link_id = self._parents.add_link(
            user_id=parent_user_id,
            name=name,
            student_id=student_id,
            relationship=relationship,
        )
        logger.info("Linked parent %s to student %s", parent_user_id, student_id)
        return link_id

    def unlink_child(self, *, parent_user_id: int, student_id: int) -> None:
        if not self._parents.remove_link(parent_user_id, student_id):
            raise NotFoundError("Liên kết phụ huynh - học sinh không tồn tại")

    def get_student_parents(self, student_id: int) -> Sequence[Parent]:
        return self._parents.list_for_student(student_id)

    def update_contact(self, *, user_id: int, phone: Optional[str], email: Optional[str]) -> None:
        phone = (phone or "").strip() or None
        email = (email or "").strip() or None
        if email is not None and "@" not in email:
            raise ValidationError("Email không hợp lệ")
        if not self._parents.update_contact(user_id=user_id, phone=phone, email=email):
            raise NotFoundError("Không tìm thấy hồ sơ phụ huynh")
