from __future__ import annotations

from flask import Flask

from ..common.guards import login_required
from ..common.responses import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service

    @app.route("/api/permissions", methods=["GET"], endpoint="my_permissions")
    @login_required(auth)
    def my_permissions():
        return ok(
            {
                "role": auth.current_user.role.value,
                "permissions": sorted(p.value for p in authz.current_permissions()),
                "class_ids": list(authz.get_accessible_class_ids()),
            }
        )

    @app.route("/api/permissions/classes/<int:class_id>", methods=["GET"], endpoint="check_class_access")
    @login_required(auth)
    def check_class_access(class_id: int):
        return ok(
            {
                "class_id": class_id,
                "can_access": authz.can_access_class(class_id),
                "can_view_posts": authz.can_view_class_posts(class_id),
                "can_create_post": authz.can_create_post_for_class(class_id),
            }
        )
