"""View decorators shared by the controllers."""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING

from ..core.enums import Permission
from ..core.exceptions import AuthenticationError

if TYPE_CHECKING:
    from ..authorization.service import AuthorizationService
    from ..users.service import AuthService


def login_required(auth: "AuthService"):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not auth.is_logged_in():
                raise AuthenticationError("Vui lòng đăng nhập để tiếp tục!")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def permission_required(auth: "AuthService", authz: "AuthorizationService", permission: Permission, action: str):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not auth.is_logged_in():
                raise AuthenticationError("Vui lòng đăng nhập để tiếp tục!")
            authz.require_permission(permission, action)
            return view(*args, **kwargs)

        return wrapper

    return decorator
