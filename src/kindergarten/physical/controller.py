from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_optional_date, today_local
from ..common.guards import login_required
from ..common.responses import date_arg, json_body, ok, optional_int
from ..common.serializers import to_dict, to_list
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError
from .model import PhysicalDevelopmentRecord

_RECORD_EXTRA = ("bmi", "prev_bmi", "height_change", "weight_change", "age_months", "age_display")


def _record_dict(record: PhysicalDevelopmentRecord, physical) -> dict:
    data = to_dict(record, extra=_RECORD_EXTRA)
    data["bmi_category"] = physical.get_bmi_category(record.bmi)
    return data


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    physical = container.physical_service

    def _require_record(record_id: int) -> PhysicalDevelopmentRecord:
        record = physical.get_physical_record(record_id)
        if record is None:
            raise NotFoundError(f"Không tìm thấy bản ghi với ID: {record_id}")
        authz.require(authz.can_update_student(record.student_id), "sửa số đo của học sinh này")
        return record

    @app.route("/api/physical", methods=["POST"], endpoint="record_physical")
    @login_required(auth)
    def record_physical():
        body = json_body()
        student_id = optional_int(body.get("student_id"), "Mã học sinh") or 0
        authz.require(authz.can_update_student(student_id), "ghi số đo cho học sinh này")
        record_id = physical.record_physical_data(
            student_id=student_id,
            height_cm=body.get("height_cm"),
            weight_kg=body.get("weight_kg"),
            measurement_date=parse_optional_date(body.get("measurement_date"), "Ngày đo") or today_local(),
            recorded_by=auth.current_user.id,
            notes=body.get("notes"),
        )
        return ok({"id": record_id}, message="Đã lưu số đo", status=201)

    @app.route("/api/physical/<int:record_id>", methods=["PUT"], endpoint="update_physical")
    @login_required(auth)
    def update_physical(record_id: int):
        existing = _require_record(record_id)
        body = json_body()
        physical.update_physical_record(
            record_id=record_id,
            height_cm=body.get("height_cm", existing.height_cm),
            weight_kg=body.get("weight_kg", existing.weight_kg),
            measurement_date=parse_optional_date(body.get("measurement_date"), "Ngày đo") or existing.measurement_date,
            notes=body.get("notes", existing.notes),
        )
        return ok(message="Cập nhật số đo thành công")

    @app.route("/api/physical/<int:record_id>", methods=["DELETE"], endpoint="delete_physical")
    @login_required(auth)
    def delete_physical(record_id: int):
        _require_record(record_id)
        physical.delete_physical_record(record_id)
        return ok(message="Đã xóa bản ghi")

    @app.route("/api/physical/student/<int:student_id>", methods=["GET"], endpoint="student_physical")
    @login_required(auth)
    def student_physical(student_id: int):
        authz.require(authz.can_view_student(student_id), "xem sự phát triển của học sinh này")
        start = date_arg("start", "Ngày bắt đầu")
        end = date_arg("end", "Ngày kết thúc")
        if start or end:
            if not (start and end):
                raise ValidationError("Cần cả ngày bắt đầu và ngày kết thúc")
            history = physical.get_physical_data_by_date_range(student_id, start, end)
        else:
            history = physical.get_student_physical_history(student_id)

        latest = history[0] if history else None
        return ok(
            {
                "records": [_record_dict(r, physical) for r in history],
                "latest": _record_dict(latest, physical) if latest else None,
                "growth_trend": physical.get_growth_trend(history),
                "measurement_due": physical.is_measurement_due(student_id),
            }
        )

    @app.route("/api/physical/class/<int:class_id>", methods=["GET"], endpoint="class_physical")
    @login_required(auth)
    def class_physical(class_id: int):
        authz.require_class_access(class_id, "xem số đo của lớp này")
        return ok(to_list(physical.get_class_physical_data(class_id), extra=_RECORD_EXTRA))
