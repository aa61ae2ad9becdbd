from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Permission, Role
from ..core.exceptions import AuthorizationError
from ..users.model import User
from ..users.service import AuthService
from .permissions import permissions_for
from .repository import AuthorizationRepository


class AuthorizationService:
    """Role permissions plus resource-scoped checks for the logged-in user.

    Every check answers False when nobody is logged in.
    """

    def __init__(self, auth: AuthService, repo: AuthorizationRepository):
        self._auth = auth
        self._repo = repo

    @property
    def _user(self) -> Optional[User]:
        return self._auth.current_user

    def has_permission(self, permission: Permission) -> bool:
        user = self._user
        if user is None:
            return False
        return permission in permissions_for(user.role)

    def current_permissions(self) -> frozenset[Permission]:
        user = self._user
        return permissions_for(user.role) if user else frozenset()

    def can_access_school(self, school_id: int) -> bool:
        user = self._user
        return user is not None and user.school_id == school_id

    def can_access_class(self, class_id: int) -> bool:
        user = self._user
        if user is None:
            return False

        if user.role == Role.PRINCIPAL:
            school_id = self._repo.get_class_school_id(class_id)
            return school_id is not None and self.can_access_school(school_id)
        if user.role == Role.TEACHER:
            return self._repo.is_teacher_assigned_to_class(user.id, class_id)
        if user.role == Role.PARENT:
            return self._repo.is_parent_child_in_class(user.id, class_id)
        return False

    def can_manage_user(self, target_user_id: int) -> bool:
        if not self.has_permission(Permission.CREATE_USERS):
            return False
        school_id = self._repo.get_user_school_id(target_user_id)
        return school_id is not None and self.can_access_school(school_id)

    def can_create_post_for_class(self, class_id: int) -> bool:
        return self.has_permission(Permission.CREATE_POSTS) and self.can_access_class(class_id)

    def can_view_class_posts(self, class_id: int) -> bool:
        if self.has_permission(Permission.VIEW_ALL_POSTS):
            school_id = self._repo.get_class_school_id(class_id)
            return school_id is not None and self.can_access_school(school_id)
        return self.has_permission(Permission.VIEW_CLASS_POSTS) and self.can_access_class(class_id)

    def can_update_student(self, student_id: int) -> bool:
        if not self.has_permission(Permission.UPDATE_STUDENTS):
            return False
        class_id = self._repo.get_student_class_id(student_id)
        if class_id is None:
            # Unassigned students are school-wide records.
            return self.has_permission(Permission.MANAGE_SCHOOL)
        return self.can_access_class(class_id)

    def can_view_student(self, student_id: int) -> bool:
        if self._user is None:
            return False
        class_id = self._repo.get_student_class_id(student_id)
        if class_id is None:
            return self.has_permission(Permission.MANAGE_SCHOOL)
        return self.can_access_class(class_id)

    def can_access_post(self, post_id: int) -> bool:
        user = self._user
        if user is None:
            return False

        if user.role == Role.PRINCIPAL:
            return self._repo.principal_can_access_post(user.id, post_id)
        if user.role == Role.TEACHER:
            return self._repo.teacher_can_access_post(user.id, post_id)
        if user.role == Role.PARENT:
            return self._repo.parent_can_access_post(user.id, post_id)
        return False

    def get_accessible_class_ids(self) -> Sequence[int]:
        user = self._user
        if user is None:
            return []

        if user.role == Role.PRINCIPAL:
            return list(self._repo.list_class_ids_for_school(user.school_id))
        if user.role == Role.TEACHER:
            return list(self._repo.list_class_ids_for_teacher(user.id))
        if user.role == Role.PARENT:
            return list(self._repo.list_class_ids_for_parent(user.id))
        return []

    def get_unauthorized_message(self, action: str) -> str:
        user = self._user
        if user is None:
            return "Bạn cần đăng nhập để thực hiện hành động này."
        return f"Bạn ({user.role.display_name}) không có quyền {action}."

    def require_permission(self, permission: Permission, action: str) -> None:
        if not self.has_permission(permission):
            raise AuthorizationError(self.get_unauthorized_message(action))

    def require_class_access(self, class_id: int, action: str) -> None:
        if not self.can_access_class(class_id):
            raise AuthorizationError(self.get_unauthorized_message(action))

    def require(self, allowed: bool, action: str) -> None:
        if not allowed:
            raise AuthorizationError(self.get_unauthorized_message(action))
