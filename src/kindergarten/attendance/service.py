from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id, require_present
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceEntry, AttendanceRecord, AttendanceStats, ClassAttendanceSummary
from .repository import AttendanceRepository
from .strategies.base import AttendanceTimes

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock

    def normalize(
        self,
        status,
        *,
        check_in_time: Optional[time] = None,
        late_arrival_time: Optional[time] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceTimes:
        """Validate the status and fill in the times that go with it."""

        now = now or self._clock()
        strategy = self._factory.for_status(status)
        return strategy.normalize(
            check_in_time=check_in_time,
            late_arrival_time=late_arrival_time,
            now=now.time().replace(microsecond=0),
        )

    def can_mark_attendance(self, attendance_date: date, *, now: Optional[datetime] = None) -> bool:
        now = now or self._clock()
        return attendance_date <= now.date()

    def _validated(self, entry: AttendanceEntry, now: datetime) -> tuple[int, date, AttendanceTimes]:
        student_id = require_positive_id(entry.student_id, "Mã học sinh")
        attendance_date = require_present(entry.attendance_date, "Ngày điểm danh")
        if not self.can_mark_attendance(attendance_date, now=now):
            raise ValidationError("Không thể điểm danh cho ngày trong tương lai")
        times = self.normalize(
            entry.status,
            check_in_time=entry.check_in_time,
            late_arrival_time=entry.late_arrival_time,
            now=now,
        )
        return student_id, attendance_date, times

    def mark_attendance(self, entry: AttendanceEntry, *, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        student_id, attendance_date, times = self._validated(entry, now)
        return self._attendance.upsert(
            student_id=student_id,
            attendance_date=attendance_date,
            status=times.status,
            check_in_time=times.check_in_time,
            late_arrival_time=times.late_arrival_time,
            excuse_reason=(entry.excuse_reason or "").strip() or None,
        )

    def update_attendance(self, attendance_id: int, entry: AttendanceEntry, *, now: Optional[datetime] = None) -> None:
        attendance_id = require_positive_id(attendance_id, "Mã điểm danh")
        now = now or self._clock()
        _, _, times = self._validated(entry, now)
        if not self._attendance.update_by_id(
            attendance_id=attendance_id,
            status=times.status,
            check_in_time=times.check_in_time,
            late_arrival_time=times.late_arrival_time,
            excuse_reason=(entry.excuse_reason or "").strip() or None,
        ):
            raise NotFoundError(f"Không tìm thấy bản ghi điểm danh với ID: {attendance_id}")

    def mark_bulk_attendance(self, entries: Sequence[AttendanceEntry], *, now: Optional[datetime] = None) -> bool:
        """Mark every entry; failures are logged and skipped. True only if all succeeded."""

        if not entries:
            raise ValidationError("Danh sách điểm danh không được để trống")

        now = now or self._clock()
        all_ok = True
        for entry in entries:
            try:
                self.mark_attendance(entry, now=now)
            except Exception:
                all_ok = False
                logger.exception("Failed to mark attendance for student %s", entry.student_id)
        return all_ok

    def get_attendance(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_student_and_date(student_id, attendance_date)

    def get_attendance_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._attendance.get_by_id(attendance_id)

    def get_attendance_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        return self._attendance.list_by_date(attendance_date)

    def get_class_attendance(self, class_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_class_and_date(class_id, attendance_date)

    def _check_range(self, start_date: date, end_date: date) -> None:
        require_present(start_date, "Ngày bắt đầu")
        require_present(end_date, "Ngày kết thúc")
        if start_date > end_date:
            raise ValidationError("Ngày bắt đầu không được sau ngày kết thúc")

    def get_attendance_history(self, student_id: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        self._check_range(start_date, end_date)
        return self._attendance.list_history(student_id, start_date, end_date)

    def get_attendance_stats(self, student_id: int, start_date: date, end_date: date) -> AttendanceStats:
        history = self.get_attendance_history(student_id, start_date, end_date)
        return AttendanceStats(
            total_days=len(history),
            present_days=sum(1 for r in history if r.status == AttendanceStatus.PRESENT),
            absent_days=sum(1 for r in history if r.status == AttendanceStatus.ABSENT),
            late_days=sum(1 for r in history if r.status == AttendanceStatus.LATE),
        )

    def delete_attendance(self, attendance_id: int) -> None:
        attendance_id = require_positive_id(attendance_id, "Mã điểm danh")
        if not self._attendance.delete_by_id(attendance_id):
            raise NotFoundError(f"Không tìm thấy bản ghi điểm danh với ID: {attendance_id}")

    def get_absent_students_today(self, class_id: int, *, now: Optional[datetime] = None) -> Sequence[AttendanceRecord]:
        today = (now or self._clock()).date()
        return [
            r
            for r in self._attendance.list_for_class_and_date(class_id, today)
            if r.status == AttendanceStatus.ABSENT
        ]

    def generate_default_attendance(self, class_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        """Existing sheet for the day, or an all-ABSENT draft when nothing was marked yet."""

        existing = self._attendance.list_for_class_and_date(class_id, attendance_date)
        if any(r.is_persisted for r in existing):
            return existing
        return [
            AttendanceRecord(
                id=0,
                student_id=s.id,
                attendance_date=attendance_date,
                status=AttendanceStatus.ABSENT,
                student_name=s.name,
            )
            for s in self._students.list_by_class(class_id)
        ]

    def get_class_attendance_summary(self, class_id: int, attendance_date: date) -> ClassAttendanceSummary:
        sheet = self._attendance.list_for_class_and_date(class_id, attendance_date)
        return ClassAttendanceSummary(
            total_students=len(sheet),
            present_count=sum(1 for r in sheet if r.status == AttendanceStatus.PRESENT),
            absent_count=sum(1 for r in sheet if r.status == AttendanceStatus.ABSENT),
            late_count=sum(1 for r in sheet if r.status == AttendanceStatus.LATE),
        )
