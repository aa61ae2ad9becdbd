from __future__ import annotations

from flask import Flask

from ..common.guards import login_required
from ..common.responses import ok
from ..common.serializers import to_dict
from ..container import Container
from .builder import build_page_for_user


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required(auth)
    def dashboard():
        page = build_page_for_user(auth.current_user)
        return ok(to_dict(page))
