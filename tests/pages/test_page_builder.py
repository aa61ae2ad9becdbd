import pytest

from kindergarten.core.enums import Role
from kindergarten.core.exceptions import AuthenticationError
from kindergarten.pages.builder import build_page_for_user, build_role_page
from kindergarten.users.model import User


def test_principal_page_tabs():
    page = build_role_page(Role.PRINCIPAL, username="admin")

    assert page.tab_keys() == ["students", "classes", "users", "reports", "posts"]
    assert page.header == "Hiệu trưởng: admin"
    assert "Hiệu trưởng" in page.title


def test_teacher_page_tabs():
    page = build_role_page(Role.TEACHER)

    assert page.tab_keys() == ["attendance", "attendance_history", "posts", "messages", "physical"]
    assert page.header == "Giáo viên"


def test_parent_page_tabs():
    page = build_role_page(Role.PARENT, username="parent1")

    assert page.tab_keys() == ["children", "attendance_history", "posts", "messages", "physical"]


def test_page_for_user():
    user = User(id=2, username="teacher1", password_hash="x", role=Role.TEACHER, school_id=1)

    assert build_page_for_user(user).role == Role.TEACHER


def test_page_requires_login():
    with pytest.raises(AuthenticationError):
        build_page_for_user(None)
