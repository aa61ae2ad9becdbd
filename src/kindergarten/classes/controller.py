from __future__ import annotations

from flask import Flask, request

from ..common.guards import login_required, permission_required
from ..common.responses import json_body, ok, optional_int
from ..common.serializers import to_dict, to_list
from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import NotFoundError

_CLASS_EXTRA = ("available_spots", "is_full", "capacity_utilization", "has_teacher")
_STATS_EXTRA = ("classes_without_teachers", "available_spots", "utilization_rate", "teacher_assignment_rate")


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    classes = container.class_service

    def _require_school_class(class_id: int, action: str):
        existing = classes.get_class_by_id(class_id)
        if existing is None:
            raise NotFoundError(f"Không tìm thấy lớp với ID: {class_id}")
        authz.require(authz.can_access_school(existing.school_id), action)
        return existing

    @app.route("/api/classes", methods=["GET"], endpoint="list_classes")
    @login_required(auth)
    def list_classes():
        user = auth.current_user
        if not authz.has_permission(Permission.MANAGE_SCHOOL):
            if auth.is_teacher():
                found = classes.get_classes_by_teacher(user.id)
            else:
                allowed = set(authz.get_accessible_class_ids())
                found = [c for c in classes.get_classes_by_school(user.school_id) if c.id in allowed]
            return ok(to_list(found, extra=_CLASS_EXTRA))

        found = classes.search_classes(request.args.get("q"), school_id=user.school_id)
        narrowing = []
        if request.args.get("grade_level"):
            narrowing.append(classes.get_classes_by_grade_level(request.args["grade_level"], school_id=user.school_id))
        if request.args.get("available"):
            narrowing.append(classes.get_classes_with_available_spots(school_id=user.school_id))
        for subset in narrowing:
            keep = {c.id for c in subset}
            found = [c for c in found if c.id in keep]
        return ok(to_list(found, extra=_CLASS_EXTRA))

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="get_class")
    @login_required(auth)
    def get_class(class_id: int):
        authz.require_class_access(class_id, "xem lớp này")
        existing = classes.get_class_by_id(class_id)
        if existing is None:
            raise NotFoundError(f"Không tìm thấy lớp với ID: {class_id}")
        return ok(to_dict(existing, extra=_CLASS_EXTRA))

    @app.route("/api/classes", methods=["POST"], endpoint="create_class")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "tạo lớp học")
    def create_class():
        body = json_body()
        class_id = classes.add_class(
            name=body.get("name", ""),
            grade_level=body.get("grade_level", ""),
            school_id=auth.current_user.school_id,
            capacity=optional_int(body.get("capacity"), "Sĩ số"),
            teacher_id=optional_int(body.get("teacher_id"), "Mã giáo viên"),
        )
        return ok({"id": class_id}, message="Tạo lớp học thành công", status=201)

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="update_class")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "sửa lớp học")
    def update_class(class_id: int):
        existing = _require_school_class(class_id, "sửa lớp của trường khác")
        body = json_body()
        capacity = optional_int(body.get("capacity"), "Sĩ số")
        teacher_id = optional_int(body.get("teacher_id"), "Mã giáo viên")
        classes.update_class(
            class_id=class_id,
            name=body.get("name", ""),
            grade_level=body.get("grade_level", ""),
            capacity=existing.capacity if capacity is None else capacity,
            teacher_id=existing.teacher_id if teacher_id is None else teacher_id,
        )
        return ok(message="Cập nhật lớp học thành công")

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="delete_class")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "xóa lớp học")
    def delete_class(class_id: int):
        _require_school_class(class_id, "xóa lớp của trường khác")
        classes.delete_class(class_id)
        return ok(message="Đã xóa lớp học")

    @app.route("/api/classes/<int:class_id>/teacher", methods=["PUT"], endpoint="assign_class_teacher")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "phân công giáo viên")
    def assign_class_teacher(class_id: int):
        _require_school_class(class_id, "phân công giáo viên cho lớp của trường khác")
        teacher_id = optional_int(json_body().get("teacher_id"), "Mã giáo viên") or 0
        classes.assign_teacher(class_id=class_id, teacher_id=teacher_id)
        return ok(message="Phân công giáo viên thành công")

    @app.route("/api/classes/<int:class_id>/teacher", methods=["DELETE"], endpoint="remove_class_teacher")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "hủy phân công giáo viên")
    def remove_class_teacher(class_id: int):
        _require_school_class(class_id, "hủy phân công giáo viên của trường khác")
        classes.remove_teacher(class_id)
        return ok(message="Đã hủy phân công giáo viên")

    @app.route("/api/classes/<int:class_id>/capacity", methods=["GET"], endpoint="class_capacity_check")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "kiểm tra sĩ số")
    def class_capacity_check(class_id: int):
        _require_school_class(class_id, "xem lớp của trường khác")
        additional = optional_int(request.args.get("additional"), "Số học sinh thêm") or 1
        return ok({"class_id": class_id, "can_accommodate": classes.can_accommodate_students(class_id, additional)})

    @app.route("/api/classes/statistics", methods=["GET"], endpoint="class_statistics")
    @permission_required(auth, authz, Permission.VIEW_REPORTS, "xem báo cáo")
    def class_statistics():
        stats = classes.get_class_statistics(auth.current_user.school_id)
        return ok(to_dict(stats, extra=_STATS_EXTRA))

    @app.route("/api/classes/grade-levels", methods=["GET"], endpoint="grade_levels")
    @login_required(auth)
    def grade_levels():
        return ok(list(classes.grade_levels()))

    @app.route("/api/teachers", methods=["GET"], endpoint="list_teachers")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "xem danh sách giáo viên")
    def list_teachers():
        if request.args.get("available"):
            found = classes.get_available_teachers()
        else:
            found = classes.get_all_teachers()
        return ok(to_list(found))
