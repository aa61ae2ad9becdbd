from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.guards import login_required, permission_required
from ..common.responses import decode_base64, json_body, ok, optional_int
from ..common.serializers import to_dict, to_list
from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import NotFoundError
from .model import Student


def _student_summary(student: Student) -> dict:
    data = to_dict(student, extra=("age", "has_profile_image"))
    data.pop("profile_image", None)
    return data


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    students = container.student_service
    parents = container.parent_service

    def _require_student(student_id: int) -> Student:
        student = students.get_student_by_id(student_id)
        if student is None:
            raise NotFoundError(f"Không tìm thấy học sinh với ID: {student_id}")
        return student

    def _check_target_class(class_id) -> None:
        if class_id is not None and not authz.has_permission(Permission.MANAGE_SCHOOL):
            authz.require_class_access(class_id, "chuyển học sinh sang lớp này")

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @login_required(auth)
    def list_students():
        class_id = optional_int(request.args.get("class_id"), "Mã lớp")
        if class_id is not None:
            authz.require_class_access(class_id, "xem học sinh của lớp này")
            found = students.get_students_by_class(class_id)
        else:
            authz.require_permission(Permission.CREATE_STUDENTS, "xem toàn bộ học sinh")
            found = students.search_students(request.args.get("q"))
        return ok([_student_summary(s) for s in found])

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="get_student")
    @login_required(auth)
    def get_student(student_id: int):
        authz.require(authz.can_view_student(student_id), "xem hồ sơ học sinh này")
        student = _require_student(student_id)
        return ok(to_dict(student, extra=("age", "has_profile_image")))

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @permission_required(auth, authz, Permission.CREATE_STUDENTS, "thêm học sinh")
    def create_student():
        body = json_body()
        class_id = optional_int(body.get("class_id"), "Mã lớp")
        _check_target_class(class_id)
        student_id = students.add_student(
            name=body.get("name", ""),
            dob=parse_optional_date(body.get("dob"), "Ngày sinh"),
            class_id=class_id,
            gender=body.get("gender"),
            address=body.get("address"),
        )
        return ok({"id": student_id}, message="Thêm học sinh thành công", status=201)

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="update_student")
    @login_required(auth)
    def update_student(student_id: int):
        authz.require(authz.can_update_student(student_id), "cập nhật học sinh này")
        body = json_body()
        class_id = optional_int(body.get("class_id"), "Mã lớp")
        _check_target_class(class_id)
        students.update_student(
            student_id=student_id,
            name=body.get("name", ""),
            dob=parse_optional_date(body.get("dob"), "Ngày sinh"),
            class_id=class_id,
            gender=body.get("gender"),
            address=body.get("address"),
        )
        return ok(message="Cập nhật học sinh thành công")

    @app.route("/api/students/<int:student_id>/photo", methods=["PUT"], endpoint="update_student_photo")
    @login_required(auth)
    def update_student_photo(student_id: int):
        authz.require(authz.can_update_student(student_id), "cập nhật ảnh học sinh này")
        image = decode_base64(json_body().get("image_base64"), "Ảnh")
        students.set_profile_image(student_id, image)
        return ok(message="Đã cập nhật ảnh" if image else "Đã xóa ảnh")

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="delete_student")
    @permission_required(auth, authz, Permission.CREATE_STUDENTS, "xóa học sinh")
    def delete_student(student_id: int):
        authz.require(authz.can_view_student(student_id), "xóa học sinh này")
        students.delete_student(student_id)
        return ok(message="Đã xóa học sinh")

    @app.route("/api/students/<int:student_id>/parents", methods=["GET"], endpoint="list_student_parents")
    @login_required(auth)
    def list_student_parents(student_id: int):
        authz.require(authz.can_view_student(student_id), "xem phụ huynh của học sinh này")
        return ok(to_list(parents.get_student_parents(student_id)))

    @app.route("/api/students/<int:student_id>/parents", methods=["POST"], endpoint="link_student_parent")
    @permission_required(auth, authz, Permission.CREATE_USERS, "liên kết phụ huynh")
    def link_student_parent(student_id: int):
        body = json_body()
        link_id = parents.link_child(
            parent_user_id=optional_int(body.get("parent_user_id"), "Mã phụ huynh") or 0,
            student_id=student_id,
            relationship=body.get("relationship"),
        )
        return ok({"id": link_id}, message="Đã liên kết phụ huynh", status=201)

    @app.route(
        "/api/students/<int:student_id>/parents/<int:parent_user_id>",
        methods=["DELETE"],
        endpoint="unlink_student_parent",
    )
    @permission_required(auth, authz, Permission.CREATE_USERS, "hủy liên kết phụ huynh")
    def unlink_student_parent(student_id: int, parent_user_id: int):
        parents.unlink_child(parent_user_id=parent_user_id, student_id=student_id)
        return ok(message="Đã hủy liên kết phụ huynh")
