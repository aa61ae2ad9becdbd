from __future__ import annotations

from flask import Flask

from ..common.guards import login_required
from ..common.responses import json_body, ok
from ..common.serializers import to_dict, to_list
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    parents = container.parent_service

    def _require_parent() -> int:
        authz.require(auth.is_parent(), "xem thông tin dành cho phụ huynh")
        return auth.current_user.id

    @app.route("/api/parents/me", methods=["GET"], endpoint="my_parent_profile")
    @login_required(auth)
    def my_parent_profile():
        user_id = _require_parent()
        profile = parents.get_profile(user_id)
        return ok(
            {
                "profile": to_dict(profile) if profile else None,
                "has_children": parents.has_children(user_id),
            }
        )

    @app.route("/api/parents/me/children", methods=["GET"], endpoint="my_children")
    @login_required(auth)
    def my_children():
        user_id = _require_parent()
        return ok(to_list(parents.get_parent_children(user_id)))

    @app.route("/api/parents/me/contact", methods=["PUT"], endpoint="update_my_contact")
    @login_required(auth)
    def update_my_contact():
        user_id = _require_parent()
        body = json_body()
        parents.update_contact(user_id=user_id, phone=body.get("phone"), email=body.get("email"))
        return ok(message="Cập nhật thông tin liên hệ thành công")

    @app.route("/api/parents/<int:user_id>/children", methods=["GET"], endpoint="parent_children")
    @login_required(auth)
    def parent_children(user_id: int):
        authz.require(auth.has_role(Role.PRINCIPAL) and authz.can_manage_user(user_id), "xem con của phụ huynh này")
        return ok(to_list(parents.get_parent_children(user_id)))
