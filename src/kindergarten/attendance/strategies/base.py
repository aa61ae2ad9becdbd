from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceTimes:
    status: AttendanceStatus
    check_in_time: Optional[time] = None
    late_arrival_time: Optional[time] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: fill in / clear the times that go with a status.

    Implementations must be idempotent: normalizing an already normalized
    value returns it unchanged.
    """

    status: AttendanceStatus

    @abstractmethod
    def normalize(self, *, check_in_time: Optional[time], late_arrival_time: Optional[time], now: time) -> AttendanceTimes:
        raise NotImplementedError
