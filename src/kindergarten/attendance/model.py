from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi điểm danh của một học sinh trong một ngày.

    `id == 0` nghĩa là chưa có dòng trong CSDL (mặc định vắng).
    """

    id: int
    student_id: int
    attendance_date: date
    status: AttendanceStatus
    check_in_time: Optional[time] = None
    late_arrival_time: Optional[time] = None
    excuse_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    student_name: Optional[str] = None

    @property
    def is_persisted(self) -> bool:
        return self.id > 0


@dataclass(frozen=True)
class AttendanceEntry:
    """Input for marking one student; fields as typed by the user."""

    student_id: int
    attendance_date: Optional[date]
    status: Optional[str]
    check_in_time: Optional[time] = None
    late_arrival_time: Optional[time] = None
    excuse_reason: Optional[str] = None


@dataclass(frozen=True)
class AttendanceStats:
    total_days: int
    present_days: int
    absent_days: int
    late_days: int

    @property
    def attendance_rate(self) -> float:
        return self.present_days * 100.0 / self.total_days if self.total_days else 0.0

    @property
    def late_rate(self) -> float:
        return self.late_days * 100.0 / self.total_days if self.total_days else 0.0


@dataclass(frozen=True)
class ClassAttendanceSummary:
    total_students: int
    present_count: int
    absent_count: int
    late_count: int

    def _rate(self, count: int) -> float:
        return count * 100.0 / self.total_students if self.total_students else 0.0

    @property
    def attendance_rate(self) -> float:
        return self._rate(self.present_count)

    @property
    def absence_rate(self) -> float:
        return self._rate(self.absent_count)

    @property
    def late_rate(self) -> float:
        return self._rate(self.late_count)
