from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.guards import login_required, permission_required
from ..common.responses import json_body, ok, optional_int
from ..common.serializers import to_dict, to_list
from ..container import Container
from ..core.enums import Permission
from ..pages.builder import build_page_for_user
from .model import User

logger = logging.getLogger(__name__)

_USER_FIELDS = ("id", "username", "role", "school_id", "created_at")


def user_to_dict(user: User) -> dict:
    data = to_dict(user)
    return {k: data[k] for k in _USER_FIELDS}


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    users = container.user_service

    @app.before_request
    def _restore_user():
        auth.restore(session.get("user_id"))

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        user = auth.login(body.get("username", ""), body.get("password", ""))

        session.clear()
        session["user_id"] = user.id
        session["role"] = user.role.value

        return ok(
            {"user": user_to_dict(user), "page": to_dict(build_page_for_user(user))},
            message="Đăng nhập thành công!",
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        auth.logout()
        session.clear()
        return ok(message="Đã đăng xuất hệ thống.")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required(auth)
    def me():
        return ok(
            {
                "user": user_to_dict(auth.current_user),
                "permissions": sorted(p.value for p in authz.current_permissions()),
            }
        )

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @permission_required(auth, authz, Permission.CREATE_USERS, "xem danh sách tài khoản")
    def list_users():
        role = request.args.get("role")
        if role:
            found = users.get_users_by_role(role)
        else:
            found = users.search_users(request.args.get("q"))
        return ok([user_to_dict(u) for u in found])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @permission_required(auth, authz, Permission.CREATE_USERS, "tạo tài khoản")
    def create_user():
        body = json_body()
        school_id = optional_int(body.get("school_id"), "Mã trường") or auth.current_user.school_id
        authz.require(authz.can_access_school(school_id), "tạo tài khoản cho trường khác")

        user_id = users.create_user(
            username=body.get("username", ""),
            password=body.get("password", ""),
            role=body.get("role"),
            school_id=school_id,
        )
        return ok({"id": user_id}, message="Tạo tài khoản thành công", status=201)

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    @login_required(auth)
    def get_user(user_id: int):
        authz.require(authz.can_manage_user(user_id), "xem tài khoản này")
        user = users.get_user_by_id(user_id)
        return ok(user_to_dict(user))

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @login_required(auth)
    def update_user(user_id: int):
        authz.require(authz.can_manage_user(user_id), "sửa tài khoản này")
        body = json_body()
        school_id = optional_int(body.get("school_id"), "Mã trường") or auth.current_user.school_id
        authz.require(authz.can_access_school(school_id), "chuyển tài khoản sang trường khác")

        users.update_user(
            user_id=user_id,
            username=body.get("username", ""),
            role=body.get("role"),
            school_id=school_id,
            password=body.get("password"),
        )
        return ok(message="Cập nhật tài khoản thành công")

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @login_required(auth)
    def delete_user(user_id: int):
        authz.require(authz.can_manage_user(user_id), "xóa tài khoản này")
        users.delete_user(user_id)
        return ok(message="Đã xóa tài khoản")

    @app.route("/api/roles", methods=["GET"], endpoint="list_roles")
    @login_required(auth)
    def list_roles():
        return ok(users.valid_roles())

    @app.route("/api/schools", methods=["GET"], endpoint="list_schools")
    @permission_required(auth, authz, Permission.MANAGE_SCHOOL, "xem danh sách trường")
    def list_schools():
        return ok(to_list(users.list_schools()))
