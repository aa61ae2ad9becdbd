from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty, require_positive_id
from ..core.constants import DEFAULT_PARENT_RELATIONSHIP, MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..parents.repository import ParentRepository
from .model import School, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: đăng nhập và giữ người dùng hiện tại.

    Ứng dụng chạy một người dùng cho mỗi tiến trình, nên `current_user`
    được giữ ngay trên service.
    """

    def __init__(self, users: UserRepository):
        self._users = users
        self._current_user: Optional[User] = None

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    def login(self, username: str, password: str) -> User:
        username = (username or "").strip()
        if not username or not password:
            raise AuthenticationError("Vui lòng nhập tên đăng nhập và mật khẩu")

        user = self._users.get_by_username(username)
        if not user:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder / corrupted hash values
            ok = False

        if not ok:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")

        self._current_user = user
        logger.info("User %s logged in as %s", user.username, user.role.value)
        return user

    def restore(self, user_id: Optional[int]) -> Optional[User]:
        """Re-attach the user remembered in the web session, if it still exists."""

        self._current_user = self._users.get_by_id(user_id) if user_id else None
        return self._current_user

    def logout(self) -> None:
        if self._current_user:
            logger.info("User %s logged out", self._current_user.username)
        self._current_user = None

    def is_logged_in(self) -> bool:
        return self._current_user is not None

    def has_role(self, role: Role) -> bool:
        return self._current_user is not None and self._current_user.role == role

    def is_principal(self) -> bool:
        return self.has_role(Role.PRINCIPAL)

    def is_teacher(self) -> bool:
        return self.has_role(Role.TEACHER)

    def is_parent(self) -> bool:
        return self.has_role(Role.PARENT)


class UserService:
    """Use case: quản lý tài khoản (hiệu trưởng)."""

    def __init__(self, users: UserRepository, parents: ParentRepository):
        self._users = users
        self._parents = parents

    @staticmethod
    def valid_roles() -> list[str]:
        return [r.value for r in Role]

    @staticmethod
    def is_valid_role(value: Optional[str]) -> bool:
        if not value:
            return False
        try:
            Role(value.strip().upper())
        except ValueError:
            return False
        return True

    @staticmethod
    def parse_role(value) -> Role:
        if isinstance(value, Role):
            return value
        if not UserService.is_valid_role(value):
            raise ValidationError(f"Vai trò không hợp lệ: {value}")
        return Role(value.strip().upper())

    def _validate(self, *, username: str, password: Optional[str], school_id: int, password_required: bool) -> str:
        username = require_non_empty(username, "Tên đăng nhập")
        require_min_length(username, "Tên đăng nhập", MIN_USERNAME_LENGTH)
        if password_required or password:
            require_min_length(password, "Mật khẩu", MIN_PASSWORD_LENGTH)
        require_positive_id(school_id, "Mã trường")
        return username

    def create_user(self, *, username: str, password: str, role, school_id: int) -> int:
        role = self.parse_role(role)
        username = self._validate(username=username, password=password, school_id=school_id, password_required=True)

        if self._users.get_by_username(username):
            raise ValidationError(f"Tên đăng nhập đã tồn tại: {username}")

        user_id = self._users.create_user(
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            school_id=int(school_id),
        )

        if role == Role.PARENT:
            self._parents.create_profile(user_id=user_id, name=username, relationship=DEFAULT_PARENT_RELATIONSHIP)

        logger.info("Created %s account %s (id=%s)", role.value, username, user_id)
        return user_id

    def update_user(
        self,
        *,
        user_id: int,
        username: str,
        role,
        school_id: int,
        password: Optional[str] = None,
    ) -> None:
        role = self.parse_role(role)
        existing = self._users.get_by_id(user_id)
        if not existing:
            raise NotFoundError(f"Không tìm thấy người dùng với ID: {user_id}")

        if role != existing.role:
            raise ValidationError(f"Không được đổi vai trò. Vai trò hiện tại: {existing.role.value}")

        username = self._validate(username=username, password=password, school_id=school_id, password_required=False)

        other = self._users.get_by_username(username)
        if other and other.id != existing.id:
            raise ValidationError(f"Tên đăng nhập đã tồn tại: {username}")

        # Blank password keeps the current one.
        password_hash = generate_password_hash(password) if password else existing.password_hash

        self._users.update_user(
            user_id=existing.id,
            username=username,
            password_hash=password_hash,
            role=role,
            school_id=int(school_id),
        )

    def delete_user(self, user_id: int) -> None:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"Không tìm thấy người dùng với ID: {user_id}")
        if user.role == Role.PRINCIPAL:
            raise ValidationError("Không thể xóa tài khoản hiệu trưởng")

        if not self._users.delete_by_id(user_id):
            raise ValidationError("Xóa người dùng thất bại")
        logger.info("Deleted %s account %s", user.role.value, user.username)

    def get_all_users(self) -> Sequence[User]:
        return self._users.list_all()

    def get_users_by_role(self, role) -> Sequence[User]:
        return self._users.list_by_role(self.parse_role(role))

    def search_users(self, term: Optional[str]) -> Sequence[User]:
        if not term or not term.strip():
            return self._users.list_all()
        return self._users.search(term.strip())

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get_by_id(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._users.get_by_username(username)

    def list_schools(self) -> Sequence[School]:
        return self._users.list_schools()
