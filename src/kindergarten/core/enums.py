from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    PRINCIPAL = "PRINCIPAL"
    TEACHER = "TEACHER"
    PARENT = "PARENT"

    @property
    def display_name(self) -> str:
        return {
            Role.PRINCIPAL: "Hiệu trưởng",
            Role.TEACHER: "Giáo viên",
            Role.PARENT: "Phụ huynh",
        }[self]


class Permission(str, Enum):
    """Quyền hạn gắn với từng vai trò."""

    CREATE_USERS = "CREATE_USERS"
    CREATE_STUDENTS = "CREATE_STUDENTS"
    CREATE_POSTS = "CREATE_POSTS"
    COMMENT_POSTS = "COMMENT_POSTS"
    LIKE_POSTS = "LIKE_POSTS"
    UPDATE_STUDENTS = "UPDATE_STUDENTS"
    VIEW_ALL_POSTS = "VIEW_ALL_POSTS"
    VIEW_CLASS_POSTS = "VIEW_CLASS_POSTS"
    MANAGE_ATTENDANCE = "MANAGE_ATTENDANCE"
    VIEW_REPORTS = "VIEW_REPORTS"
    SEND_MESSAGES = "SEND_MESSAGES"
    MANAGE_SCHOOL = "MANAGE_SCHOOL"


class AttendanceStatus(str, Enum):
    """Trạng thái điểm danh lưu trong CSDL."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class PostVisibility(str, Enum):
    """Ai được xem bài đăng."""

    ALL = "ALL"
    PARENTS_ONLY = "PARENTS_ONLY"
    TEACHERS_ONLY = "TEACHERS_ONLY"


class PostType(str, Enum):
    CLASS_ACTIVITY = "CLASS_ACTIVITY"
    SCHOOL_ANNOUNCEMENT = "SCHOOL_ANNOUNCEMENT"


class AnnouncementCategory(str, Enum):
    EVENT = "EVENT"
    HOLIDAY = "HOLIDAY"
    SCHEDULE = "SCHEDULE"
    GENERAL = "GENERAL"
