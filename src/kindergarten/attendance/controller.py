from __future__ import annotations

from datetime import timedelta

from flask import Flask

from ..common.datetime_utils import parse_optional_date, parse_optional_time, today_local
from ..common.guards import login_required, permission_required
from ..common.responses import date_arg, json_body, ok, optional_int
from ..common.serializers import to_dict, to_list
from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import NotFoundError, ValidationError
from .model import AttendanceEntry

HISTORY_DEFAULT_DAYS = 30


def _entry_from(item: dict, default_date=None) -> AttendanceEntry:
    if not isinstance(item, dict):
        raise ValidationError("Mỗi dòng điểm danh phải là JSON object")
    return AttendanceEntry(
        student_id=optional_int(item.get("student_id"), "Mã học sinh") or 0,
        attendance_date=parse_optional_date(item.get("date"), "Ngày điểm danh") or default_date,
        status=item.get("status"),
        check_in_time=parse_optional_time(item.get("check_in_time"), "Giờ đến"),
        late_arrival_time=parse_optional_time(item.get("late_arrival_time"), "Giờ đến muộn"),
        excuse_reason=item.get("excuse_reason"),
    )


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    attendance = container.attendance_service
    students = container.student_service

    def _require_student_access(student_id: int, action: str) -> None:
        authz.require(authz.can_view_student(student_id), action)

    @app.route("/api/attendance/class/<int:class_id>", methods=["GET"], endpoint="class_attendance")
    @permission_required(auth, authz, Permission.MANAGE_ATTENDANCE, "điểm danh")
    def class_attendance(class_id: int):
        authz.require_class_access(class_id, "xem điểm danh của lớp này")
        day = date_arg("date", "Ngày điểm danh", default=today_local())
        sheet = attendance.generate_default_attendance(class_id, day)
        summary = attendance.get_class_attendance_summary(class_id, day)
        return ok(
            {
                "date": day.isoformat(),
                "records": to_list(sheet, extra=("is_persisted",)),
                "summary": to_dict(summary, extra=("attendance_rate", "absence_rate", "late_rate")),
            }
        )

    @app.route("/api/attendance/class/<int:class_id>/absent-today", methods=["GET"], endpoint="absent_today")
    @permission_required(auth, authz, Permission.MANAGE_ATTENDANCE, "xem học sinh vắng")
    def absent_today(class_id: int):
        authz.require_class_access(class_id, "xem điểm danh của lớp này")
        return ok(to_list(attendance.get_absent_students_today(class_id)))

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @permission_required(auth, authz, Permission.MANAGE_ATTENDANCE, "điểm danh")
    def mark_attendance():
        entry = _entry_from(json_body())
        _require_student_access(entry.student_id, "điểm danh cho học sinh này")
        attendance_id = attendance.mark_attendance(entry)
        return ok({"id": attendance_id}, message="Điểm danh thành công", status=201)

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="mark_bulk_attendance")
    @permission_required(auth, authz, Permission.MANAGE_ATTENDANCE, "điểm danh")
    def mark_bulk_attendance():
        body = json_body()
        class_id = optional_int(body.get("class_id"), "Mã lớp") or 0
        authz.require_class_access(class_id, "điểm danh cho lớp này")

        day = parse_optional_date(body.get("date"), "Ngày điểm danh")
        items = body.get("entries") or []
        if not isinstance(items, list):
            raise ValidationError("Danh sách điểm danh phải là mảng")
        entries = [_entry_from(item, day) for item in items]

        enrolled = {s.id for s in students.get_students_by_class(class_id)}
        outsiders = [e.student_id for e in entries if e.student_id not in enrolled]
        authz.require(not outsiders, "điểm danh cho học sinh ngoài lớp")

        all_ok = attendance.mark_bulk_attendance(entries)
        message = "Điểm danh thành công" if all_ok else "Một số học sinh chưa được điểm danh"
        return ok({"all_saved": all_ok}, message=message)

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="update_attendance")
    @permission_required(auth, authz, Permission.MANAGE_ATTENDANCE, "sửa điểm danh")
    def update_attendance(attendance_id: int):
        existing = attendance.get_attendance_by_id(attendance_id)
        if existing is None:
            raise NotFoundError(f"Không tìm thấy bản ghi điểm danh với ID: {attendance_id}")
        _require_student_access(existing.student_id, "sửa điểm danh của học sinh này")

        body = json_body()
        entry = _entry_from(
            {**body, "student_id": existing.student_id, "date": None},
            existing.attendance_date,
        )
        attendance.update_attendance(attendance_id, entry)
        return ok(message="Cập nhật điểm danh thành công")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="delete_attendance")
    @permission_required(auth, authz, Permission.MANAGE_ATTENDANCE, "xóa điểm danh")
    def delete_attendance(attendance_id: int):
        existing = attendance.get_attendance_by_id(attendance_id)
        if existing is None:
            raise NotFoundError(f"Không tìm thấy bản ghi điểm danh với ID: {attendance_id}")
        _require_student_access(existing.student_id, "xóa điểm danh của học sinh này")
        attendance.delete_attendance(attendance_id)
        return ok(message="Đã xóa bản ghi điểm danh")

    @app.route("/api/attendance/history/<int:student_id>", methods=["GET"], endpoint="attendance_history")
    @login_required(auth)
    def attendance_history(student_id: int):
        _require_student_access(student_id, "xem lịch sử điểm danh của học sinh này")
        end = date_arg("end", "Ngày kết thúc", default=today_local())
        start = date_arg("start", "Ngày bắt đầu", default=end - timedelta(days=HISTORY_DEFAULT_DAYS))

        history = attendance.get_attendance_history(student_id, start, end)
        stats = attendance.get_attendance_stats(student_id, start, end)
        return ok(
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "records": to_list(history),
                "stats": to_dict(stats, extra=("attendance_rate", "late_rate")),
            }
        )
