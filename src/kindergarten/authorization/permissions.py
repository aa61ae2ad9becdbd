"""Static role -> permission table."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..core.enums import Permission, Role

ROLE_PERMISSIONS: Mapping[Role, frozenset[Permission]] = MappingProxyType(
    {
        Role.PRINCIPAL: frozenset(Permission),
        Role.TEACHER: frozenset(
            {
                Permission.CREATE_POSTS,
                Permission.COMMENT_POSTS,
                Permission.UPDATE_STUDENTS,
                Permission.VIEW_CLASS_POSTS,
                Permission.MANAGE_ATTENDANCE,
                Permission.SEND_MESSAGES,
                Permission.LIKE_POSTS,
            }
        ),
        Role.PARENT: frozenset(
            {
                Permission.COMMENT_POSTS,
                Permission.LIKE_POSTS,
                Permission.VIEW_CLASS_POSTS,
                Permission.SEND_MESSAGES,
            }
        ),
    }
)


def permissions_for(role: Role) -> frozenset[Permission]:
    return ROLE_PERMISSIONS.get(role, frozenset())
