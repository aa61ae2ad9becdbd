from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


def parse_status(value) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    if value is None or not str(value).strip():
        raise ValidationError("Trạng thái điểm danh là bắt buộc")
    try:
        return AttendanceStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError("Trạng thái không hợp lệ. Chỉ chấp nhận PRESENT, ABSENT hoặc LATE")


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the normalization strategy for a status."""

    def for_status(self, status: Optional[str | AttendanceStatus]) -> AttendanceStrategy:
        parsed = parse_status(status)
        if parsed == AttendanceStatus.PRESENT:
            return PresentStrategy()
        if parsed == AttendanceStatus.LATE:
            return LateStrategy()
        return AbsentStrategy()
