from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): User.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    id: int
    username: str
    password_hash: str
    role: Role
    school_id: int
    created_at: Optional[datetime] = None

    @property
    def is_principal(self) -> bool:
        return self.role == Role.PRINCIPAL

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_parent(self) -> bool:
        return self.role == Role.PARENT


@dataclass(frozen=True)
class School:
    id: int
    name: str
