from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import School, User


class UserRepository(Protocol):
    """Giao diện repository cho User.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        raise NotImplementedError

    def search(self, term: str) -> Sequence[User]:
        raise NotImplementedError

    def create_user(self, *, username: str, password_hash: str, role: Role, school_id: int) -> int:
        raise NotImplementedError

    def update_user(self, *, user_id: int, username: str, password_hash: str, role: Role, school_id: int) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        """Delete the user together with class assignments and parent links."""

        raise NotImplementedError

    def list_schools(self) -> Sequence[School]:
        raise NotImplementedError
