from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import age_in_years
from ..core.enums import Gender


@dataclass(frozen=True)
class Student:
    """Thực thể miền (domain): Học sinh."""

    id: int
    name: str
    dob: date
    class_id: Optional[int] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None
    profile_image: Optional[bytes] = None
    created_at: Optional[datetime] = None
    class_name: Optional[str] = None

    @property
    def age(self) -> int:
        return age_in_years(self.dob)

    @property
    def has_profile_image(self) -> bool:
        return bool(self.profile_image)
