from __future__ import annotations

from datetime import date, datetime, time

import pytest

from kindergarten.attendance.model import AttendanceEntry, AttendanceRecord
from kindergarten.attendance.service import AttendanceService
from kindergarten.core.enums import AttendanceStatus
from kindergarten.core.exceptions import NotFoundError, ValidationError
from kindergarten.students.model import Student

NOW = datetime(2026, 3, 10, 8, 20, 0)
TODAY = NOW.date()


class FakeAttendanceRepo:
    def __init__(self, students):
        self._students = students
        self._next_id = 1
        self.rows: dict[tuple[int, date], AttendanceRecord] = {}

    def upsert(self, *, student_id, attendance_date, status, check_in_time, late_arrival_time, excuse_reason):
        key = (student_id, attendance_date)
        existing = self.rows.get(key)
        record_id = existing.id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self.rows[key] = AttendanceRecord(
            id=record_id,
            student_id=student_id,
            attendance_date=attendance_date,
            status=status,
            check_in_time=check_in_time,
            late_arrival_time=late_arrival_time,
            excuse_reason=excuse_reason,
        )
        return record_id

    def update_by_id(self, *, attendance_id, status, check_in_time, late_arrival_time, excuse_reason):
        for key, r in self.rows.items():
            if r.id == attendance_id:
                self.rows[key] = AttendanceRecord(
                    id=r.id,
                    student_id=r.student_id,
                    attendance_date=r.attendance_date,
                    status=status,
                    check_in_time=check_in_time,
                    late_arrival_time=late_arrival_time,
                    excuse_reason=excuse_reason,
                )
                return True
        return False

    def get_by_id(self, attendance_id):
        return next((r for r in self.rows.values() if r.id == attendance_id), None)

    def get_for_student_and_date(self, student_id, attendance_date):
        return self.rows.get((student_id, attendance_date))

    def list_by_date(self, attendance_date):
        return [r for (_, d), r in self.rows.items() if d == attendance_date]

    def list_for_class_and_date(self, class_id, attendance_date):
        out = []
        for s in self._students.list_by_class(class_id):
            row = self.rows.get((s.id, attendance_date))
            out.append(
                row
                or AttendanceRecord(
                    id=0,
                    student_id=s.id,
                    attendance_date=attendance_date,
                    status=AttendanceStatus.ABSENT,
                    student_name=s.name,
                )
            )
        return out

    def list_history(self, student_id, start_date, end_date):
        found = [r for (sid, d), r in self.rows.items() if sid == student_id and start_date <= d <= end_date]
        return sorted(found, key=lambda r: r.attendance_date, reverse=True)

    def delete_by_id(self, attendance_id):
        for key, r in list(self.rows.items()):
            if r.id == attendance_id:
                del self.rows[key]
                return True
        return False


class FakeStudentsRepo:
    def __init__(self):
        self.students = [
            Student(id=1, name="An", dob=date(2021, 5, 1), class_id=10),
            Student(id=2, name="Bình", dob=date(2021, 6, 1), class_id=10),
            Student(id=3, name="Chi", dob=date(2021, 7, 1), class_id=10),
            Student(id=4, name="Dũng", dob=date(2020, 1, 1), class_id=11),
        ]

    def list_by_class(self, class_id):
        return [s for s in self.students if s.class_id == class_id]


@pytest.fixture
def service():
    students = FakeStudentsRepo()
    repo = FakeAttendanceRepo(students)
    svc = AttendanceService(repo, students, clock=lambda: NOW)
    svc.repo = repo
    return svc


def test_mark_present_fills_check_in_with_now(service):
    service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"))

    record = service.get_attendance(1, TODAY)
    assert record.status == AttendanceStatus.PRESENT
    assert record.check_in_time == time(8, 20)
    assert record.late_arrival_time is None


def test_marking_twice_keeps_a_single_identical_row(service):
    entry = AttendanceEntry(student_id=2, attendance_date=TODAY, status="LATE", late_arrival_time=time(8, 5))

    first_id = service.mark_attendance(entry)
    first = service.get_attendance(2, TODAY)
    second_id = service.mark_attendance(entry, now=datetime(2026, 3, 10, 11, 0))

    assert first_id == second_id
    assert len(service.repo.rows) == 1
    assert service.get_attendance(2, TODAY) == first


def test_future_date_is_rejected(service):
    with pytest.raises(ValidationError, match="tương lai"):
        service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=date(2026, 3, 11), status="PRESENT"))


def test_can_mark_attendance_for_today_and_past(service):
    assert service.can_mark_attendance(TODAY) is True
    assert service.can_mark_attendance(date(2026, 3, 1)) is True
    assert service.can_mark_attendance(date(2026, 3, 11)) is False


def test_invalid_status_is_rejected(service):
    with pytest.raises(ValidationError):
        service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="SICK"))


def test_bulk_continues_past_failures(service):
    entries = [
        AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"),
        AttendanceEntry(student_id=2, attendance_date=TODAY, status="BOGUS"),
        AttendanceEntry(student_id=3, attendance_date=TODAY, status="ABSENT"),
    ]

    assert service.mark_bulk_attendance(entries) is False
    assert service.get_attendance(1, TODAY).status == AttendanceStatus.PRESENT
    assert service.get_attendance(2, TODAY) is None
    assert service.get_attendance(3, TODAY).status == AttendanceStatus.ABSENT


def test_bulk_all_ok(service):
    entries = [AttendanceEntry(student_id=i, attendance_date=TODAY, status="PRESENT") for i in (1, 2, 3)]

    assert service.mark_bulk_attendance(entries) is True


def test_bulk_rejects_empty_list(service):
    with pytest.raises(ValidationError, match="không được để trống"):
        service.mark_bulk_attendance([])


def test_update_attendance_renormalizes(service):
    attendance_id = service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="LATE"))

    service.update_attendance(
        attendance_id,
        AttendanceEntry(student_id=1, attendance_date=TODAY, status="ABSENT", excuse_reason=" Ốm "),
    )

    record = service.get_attendance(1, TODAY)
    assert record.status == AttendanceStatus.ABSENT
    assert record.check_in_time is None
    assert record.excuse_reason == "Ốm"


def test_update_missing_record_raises(service):
    with pytest.raises(NotFoundError):
        service.update_attendance(99, AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"))


def test_default_sheet_is_all_absent_until_something_is_marked(service):
    sheet = service.generate_default_attendance(10, TODAY)

    assert [r.status for r in sheet] == [AttendanceStatus.ABSENT] * 3
    assert not any(r.is_persisted for r in sheet)

    service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"))
    sheet = service.generate_default_attendance(10, TODAY)
    assert sheet[0].is_persisted


def test_class_summary_counts_unmarked_as_absent(service):
    service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"))
    service.mark_attendance(AttendanceEntry(student_id=2, attendance_date=TODAY, status="LATE"))

    summary = service.get_class_attendance_summary(10, TODAY)

    assert (summary.total_students, summary.present_count, summary.late_count, summary.absent_count) == (3, 1, 1, 1)
    assert summary.attendance_rate == pytest.approx(100 / 3)


def test_absent_students_today(service):
    service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"))

    absent = service.get_absent_students_today(10)

    assert [r.student_id for r in absent] == [2, 3]


def test_history_and_stats(service):
    for day, status in [(1, "PRESENT"), (2, "LATE"), (3, "ABSENT"), (4, "PRESENT")]:
        service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=date(2026, 3, day), status=status))

    history = service.get_attendance_history(1, date(2026, 3, 1), date(2026, 3, 31))
    stats = service.get_attendance_stats(1, date(2026, 3, 1), date(2026, 3, 31))

    assert [r.attendance_date.day for r in history] == [4, 3, 2, 1]
    assert (stats.total_days, stats.present_days, stats.late_days, stats.absent_days) == (4, 2, 1, 1)
    assert stats.attendance_rate == 50.0
    assert stats.late_rate == 25.0


def test_history_rejects_reversed_range(service):
    with pytest.raises(ValidationError, match="Ngày bắt đầu"):
        service.get_attendance_history(1, date(2026, 3, 5), date(2026, 3, 1))


def test_delete_attendance(service):
    attendance_id = service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"))

    service.delete_attendance(attendance_id)

    assert service.get_attendance(1, TODAY) is None
    with pytest.raises(NotFoundError):
        service.delete_attendance(attendance_id)


def test_attendance_by_date_only_returns_that_day(service):
    yesterday = date(2026, 3, 9)
    service.mark_attendance(AttendanceEntry(student_id=1, attendance_date=TODAY, status="PRESENT"))
    service.mark_attendance(AttendanceEntry(student_id=4, attendance_date=TODAY, status="ABSENT"))
    service.mark_attendance(AttendanceEntry(student_id=2, attendance_date=yesterday, status="LATE"))

    today_rows = service.get_attendance_by_date(TODAY)

    assert sorted(r.student_id for r in today_rows) == [1, 4]
    assert [r.student_id for r in service.get_attendance_by_date(yesterday)] == [2]
    assert service.get_attendance_by_date(date(2026, 3, 1)) == []
