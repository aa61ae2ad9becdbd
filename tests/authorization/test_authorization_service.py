from __future__ import annotations

import pytest

from kindergarten.authorization.permissions import ROLE_PERMISSIONS, permissions_for
from kindergarten.authorization.service import AuthorizationService
from kindergarten.core.enums import Permission, Role
from kindergarten.core.exceptions import AuthorizationError
from kindergarten.users.model import User


class FakeAuth:
    def __init__(self, user=None):
        self.current_user = user


class FakeAuthzRepo:
    """School 1 has classes 10 and 11; teacher 2 runs class 10; parent 3 has a child (student 100) in class 10."""

    def __init__(self):
        self.class_school = {10: 1, 11: 1, 20: 2}
        self.user_school = {1: 1, 2: 1, 3: 1, 9: 2}
        self.student_class = {100: 10, 101: 11, 102: None}
        self.teacher_classes = {2: {10}}
        self.parent_classes = {3: {10}}
        self.principal_posts = {500, 501}
        self.teacher_posts = {500}
        self.parent_posts = {500}

    def get_class_school_id(self, class_id):
        return self.class_school.get(class_id)

    def get_user_school_id(self, user_id):
        return self.user_school.get(user_id)

    def get_student_class_id(self, student_id):
        return self.student_class.get(student_id)

    def is_teacher_assigned_to_class(self, teacher_id, class_id):
        return class_id in self.teacher_classes.get(teacher_id, set())

    def is_parent_child_in_class(self, parent_id, class_id):
        return class_id in self.parent_classes.get(parent_id, set())

    def principal_can_access_post(self, principal_id, post_id):
        return post_id in self.principal_posts

    def teacher_can_access_post(self, teacher_id, post_id):
        return post_id in self.teacher_posts

    def parent_can_access_post(self, parent_id, post_id):
        return post_id in self.parent_posts

    def list_class_ids_for_school(self, school_id):
        return sorted(c for c, s in self.class_school.items() if s == school_id)

    def list_class_ids_for_teacher(self, teacher_id):
        return sorted(self.teacher_classes.get(teacher_id, set()))

    def list_class_ids_for_parent(self, parent_id):
        return sorted(self.parent_classes.get(parent_id, set()))


PRINCIPAL = User(id=1, username="admin", password_hash="x", role=Role.PRINCIPAL, school_id=1)
TEACHER = User(id=2, username="teacher1", password_hash="x", role=Role.TEACHER, school_id=1)
PARENT = User(id=3, username="parent1", password_hash="x", role=Role.PARENT, school_id=1)


def _authz(user):
    return AuthorizationService(FakeAuth(user), FakeAuthzRepo())


def test_principal_holds_every_permission():
    assert permissions_for(Role.PRINCIPAL) == frozenset(Permission)


def test_teacher_permissions_are_exact():
    assert ROLE_PERMISSIONS[Role.TEACHER] == {
        Permission.CREATE_POSTS,
        Permission.COMMENT_POSTS,
        Permission.UPDATE_STUDENTS,
        Permission.VIEW_CLASS_POSTS,
        Permission.MANAGE_ATTENDANCE,
        Permission.SEND_MESSAGES,
        Permission.LIKE_POSTS,
    }


def test_parent_permissions_are_exact():
    assert ROLE_PERMISSIONS[Role.PARENT] == {
        Permission.COMMENT_POSTS,
        Permission.LIKE_POSTS,
        Permission.VIEW_CLASS_POSTS,
        Permission.SEND_MESSAGES,
    }


def test_nobody_logged_in_gets_false_everywhere():
    authz = _authz(None)

    assert authz.has_permission(Permission.COMMENT_POSTS) is False
    assert authz.can_access_school(1) is False
    assert authz.can_access_class(10) is False
    assert authz.can_manage_user(2) is False
    assert authz.can_update_student(100) is False
    assert authz.can_access_post(500) is False
    assert authz.get_accessible_class_ids() == []
    assert authz.current_permissions() == frozenset()


def test_principal_class_access_is_scoped_to_own_school():
    authz = _authz(PRINCIPAL)

    assert authz.can_access_class(10) is True
    assert authz.can_access_class(20) is False
    assert authz.can_access_class(999) is False


def test_teacher_only_reaches_assigned_class():
    authz = _authz(TEACHER)

    assert authz.can_access_class(10) is True
    assert authz.can_access_class(11) is False
    assert authz.can_create_post_for_class(10) is True
    assert authz.can_create_post_for_class(11) is False


def test_parent_reaches_class_of_child_but_cannot_post():
    authz = _authz(PARENT)

    assert authz.can_access_class(10) is True
    assert authz.can_view_class_posts(10) is True
    assert authz.can_view_class_posts(11) is False
    assert authz.can_create_post_for_class(10) is False


def test_principal_views_posts_of_any_class_in_school():
    authz = _authz(PRINCIPAL)

    assert authz.can_view_class_posts(11) is True
    assert authz.can_view_class_posts(20) is False


def test_manage_user_requires_same_school():
    authz = _authz(PRINCIPAL)

    assert authz.can_manage_user(2) is True
    assert authz.can_manage_user(9) is False
    assert _authz(TEACHER).can_manage_user(3) is False


def test_update_student_follows_class_ownership():
    teacher = _authz(TEACHER)

    assert teacher.can_update_student(100) is True
    assert teacher.can_update_student(101) is False
    # Students without a class are school records.
    assert teacher.can_update_student(102) is False
    assert _authz(PRINCIPAL).can_update_student(102) is True
    assert _authz(PARENT).can_update_student(100) is False


def test_parent_can_view_own_child_only():
    authz = _authz(PARENT)

    assert authz.can_view_student(100) is True
    assert authz.can_view_student(101) is False


def test_post_access_is_per_role():
    assert _authz(PRINCIPAL).can_access_post(501) is True
    assert _authz(TEACHER).can_access_post(501) is False
    assert _authz(PARENT).can_access_post(500) is True


def test_accessible_class_ids_per_role():
    assert _authz(PRINCIPAL).get_accessible_class_ids() == [10, 11]
    assert _authz(TEACHER).get_accessible_class_ids() == [10]
    assert _authz(PARENT).get_accessible_class_ids() == [10]


def test_unauthorized_messages():
    assert _authz(None).get_unauthorized_message("xem") == "Bạn cần đăng nhập để thực hiện hành động này."
    assert _authz(TEACHER).get_unauthorized_message("tạo tài khoản") == "Bạn (Giáo viên) không có quyền tạo tài khoản."


def test_require_permission_raises_with_message():
    with pytest.raises(AuthorizationError, match="Phụ huynh"):
        _authz(PARENT).require_permission(Permission.CREATE_POSTS, "đăng bài")

    _authz(TEACHER).require_permission(Permission.CREATE_POSTS, "đăng bài")


def test_require_class_access():
    with pytest.raises(AuthorizationError):
        _authz(TEACHER).require_class_access(11, "điểm danh")
