from __future__ import annotations

from datetime import time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, AttendanceTimes


class AbsentStrategy(AttendanceStrategy):
    status = AttendanceStatus.ABSENT

    def normalize(self, *, check_in_time: Optional[time], late_arrival_time: Optional[time], now: time) -> AttendanceTimes:
        return AttendanceTimes(status=self.status)
