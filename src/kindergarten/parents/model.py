from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Gender


@dataclass(frozen=True)
class Parent:
    """Hồ sơ phụ huynh; mỗi dòng gắn một tài khoản với (tối đa) một học sinh."""

    id: int
    user_id: int
    name: str
    student_id: Optional[int] = None
    relationship: str = "Parent"
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ParentChild:
    """Read-model: học sinh của một phụ huynh, kèm tên lớp và quan hệ."""

    student_id: int
    name: str
    dob: date
    gender: Optional[Gender]
    class_id: Optional[int]
    class_name: Optional[str]
    relationship: str
