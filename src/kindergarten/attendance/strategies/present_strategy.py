from __future__ import annotations

from datetime import time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, AttendanceTimes


class PresentStrategy(AttendanceStrategy):
    """On time: check-in defaults to now, no late arrival."""

    status = AttendanceStatus.PRESENT

    def normalize(self, *, check_in_time: Optional[time], late_arrival_time: Optional[time], now: time) -> AttendanceTimes:
        return AttendanceTimes(status=self.status, check_in_time=check_in_time or now, late_arrival_time=None)
