from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        check_in_time: Optional[time],
        late_arrival_time: Optional[time],
        excuse_reason: Optional[str],
    ) -> int:
        """Insert or replace the row for (student_id, attendance_date)."""

        raise NotImplementedError

    def update_by_id(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        check_in_time: Optional[time],
        late_arrival_time: Optional[time],
        excuse_reason: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_class_and_date(self, class_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        """One row per student of the class; students without a record come back ABSENT with id 0."""

        raise NotImplementedError

    def list_history(self, student_id: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def delete_by_id(self, attendance_id: int) -> bool:
        raise NotImplementedError
