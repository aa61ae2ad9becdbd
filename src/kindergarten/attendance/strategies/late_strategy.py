from __future__ import annotations

from datetime import time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, AttendanceTimes


class LateStrategy(AttendanceStrategy):
    """Late arrival; check-in falls back to the arrival time."""

    status = AttendanceStatus.LATE

    def normalize(self, *, check_in_time: Optional[time], late_arrival_time: Optional[time], now: time) -> AttendanceTimes:
        arrival = late_arrival_time or now
        return AttendanceTimes(status=self.status, check_in_time=check_in_time or arrival, late_arrival_time=arrival)
