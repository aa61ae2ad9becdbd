"""Role landing pages.

One builder parameterized by role: the tabs a user sees are the tabs of
their role whose permission they hold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from ..authorization.permissions import permissions_for
from ..core.enums import Permission, Role
from ..core.exceptions import AuthenticationError
from ..users.model import User


@dataclass(frozen=True)
class PageTab:
    key: str
    title: str
    path: str
    permission: Optional[Permission] = None


@dataclass(frozen=True)
class RolePage:
    role: Role
    title: str
    header: str
    tabs: tuple[PageTab, ...]

    def tab_keys(self) -> list[str]:
        return [t.key for t in self.tabs]


PAGE_TITLES: Mapping[Role, str] = {
    Role.PRINCIPAL: "Quản lý trường mầm non - Hiệu trưởng",
    Role.TEACHER: "Quản lý trường mầm non - Giáo viên",
    Role.PARENT: "Quản lý trường mầm non - Phụ huynh",
}

PAGE_TABS: Mapping[Role, tuple[PageTab, ...]] = {
    Role.PRINCIPAL: (
        PageTab("students", "Quản lý học sinh", "/api/students", Permission.CREATE_STUDENTS),
        PageTab("classes", "Quản lý lớp học", "/api/classes", Permission.MANAGE_SCHOOL),
        PageTab("users", "Quản lý tài khoản", "/api/users", Permission.CREATE_USERS),
        PageTab("reports", "Báo cáo", "/api/classes/statistics", Permission.VIEW_REPORTS),
        PageTab("posts", "Bài đăng", "/api/posts/mine", Permission.VIEW_ALL_POSTS),
    ),
    Role.TEACHER: (
        PageTab("attendance", "Điểm danh", "/api/attendance/class", Permission.MANAGE_ATTENDANCE),
        PageTab("attendance_history", "Lịch sử điểm danh", "/api/attendance/history", Permission.MANAGE_ATTENDANCE),
        PageTab("posts", "Bài đăng", "/api/posts/mine", Permission.CREATE_POSTS),
        PageTab("messages", "Tin nhắn", "/api/chat/conversations", Permission.SEND_MESSAGES),
        PageTab("physical", "Phát triển thể chất", "/api/physical/class", Permission.UPDATE_STUDENTS),
    ),
    Role.PARENT: (
        PageTab("children", "Hồ sơ của con", "/api/parents/me/children"),
        PageTab("attendance_history", "Lịch sử điểm danh", "/api/attendance/history"),
        PageTab("posts", "Bài đăng của lớp", "/api/posts/class", Permission.VIEW_CLASS_POSTS),
        PageTab("messages", "Tin nhắn", "/api/chat/conversations", Permission.SEND_MESSAGES),
        PageTab("physical", "Sự phát triển của con", "/api/physical/student"),
    ),
}


def build_role_page(role: Role, *, username: str = "") -> RolePage:
    granted = permissions_for(role)
    tabs = tuple(t for t in PAGE_TABS.get(role, ()) if t.permission is None or t.permission in granted)
    header = f"{role.display_name}: {username}" if username else role.display_name
    return RolePage(role=role, title=PAGE_TITLES[role], header=header, tabs=tabs)


def build_page_for_user(user: Optional[User]) -> RolePage:
    if user is None:
        raise AuthenticationError("Vui lòng đăng nhập để tiếp tục!")
    return build_role_page(user.role, username=user.username)
