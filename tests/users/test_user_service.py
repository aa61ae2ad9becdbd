from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash, generate_password_hash

from kindergarten.core.enums import Role
from kindergarten.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from kindergarten.users.model import School, User
from kindergarten.users.service import AuthService, UserService


class FakeUsersRepo:
    def __init__(self, users=()):
        self.users: dict[int, User] = {u.id: u for u in users}
        self._next_id = max(self.users, default=0) + 1

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def get_by_username(self, username):
        return next((u for u in self.users.values() if u.username == username), None)

    def list_all(self):
        return list(self.users.values())

    def list_by_role(self, role):
        return [u for u in self.users.values() if u.role == role]

    def search(self, term):
        return [u for u in self.users.values() if term.lower() in u.username.lower()]

    def create_user(self, *, username, password_hash, role, school_id):
        user_id = self._next_id
        self._next_id += 1
        self.users[user_id] = User(id=user_id, username=username, password_hash=password_hash, role=role, school_id=school_id)
        return user_id

    def update_user(self, *, user_id, username, password_hash, role, school_id):
        self.users[user_id] = User(id=user_id, username=username, password_hash=password_hash, role=role, school_id=school_id)
        return True

    def delete_by_id(self, user_id):
        return self.users.pop(user_id, None) is not None

    def list_schools(self):
        return [School(id=1, name="Mầm non Hoa Sen")]


class FakeParentsRepo:
    def __init__(self):
        self.profiles = []

    def create_profile(self, *, user_id, name, relationship):
        self.profiles.append((user_id, name, relationship))
        return len(self.profiles)


def _user(user_id, username, role, password="secret1"):
    return User(
        id=user_id,
        username=username,
        password_hash=generate_password_hash(password),
        role=role,
        school_id=1,
    )


@pytest.fixture
def users_repo():
    return FakeUsersRepo(
        [
            _user(1, "admin", Role.PRINCIPAL, "admin123"),
            _user(2, "teacher1", Role.TEACHER, "teacher123"),
            _user(3, "parent1", Role.PARENT, "parent123"),
        ]
    )


def test_login_sets_current_user(users_repo):
    auth = AuthService(users_repo)

    user = auth.login("teacher1", "teacher123")

    assert user.id == 2
    assert auth.is_logged_in()
    assert auth.is_teacher()
    assert not auth.is_principal()


def test_login_with_wrong_password_fails(users_repo):
    auth = AuthService(users_repo)

    with pytest.raises(AuthenticationError, match="Sai tài khoản hoặc mật khẩu"):
        auth.login("teacher1", "nope")
    assert auth.current_user is None


def test_login_unknown_user_gives_same_message(users_repo):
    with pytest.raises(AuthenticationError, match="Sai tài khoản hoặc mật khẩu"):
        AuthService(users_repo).login("ghost", "teacher123")


def test_login_blank_input(users_repo):
    with pytest.raises(AuthenticationError, match="Vui lòng nhập"):
        AuthService(users_repo).login("  ", "")


def test_login_with_unusable_hash_fails(users_repo):
    users_repo.users[4] = User(id=4, username="legacy", password_hash="plaintext", role=Role.TEACHER, school_id=1)

    with pytest.raises(AuthenticationError):
        AuthService(users_repo).login("legacy", "plaintext")


def test_logout_and_restore(users_repo):
    auth = AuthService(users_repo)
    auth.login("admin", "admin123")
    auth.logout()
    assert auth.current_user is None

    assert auth.restore(3).username == "parent1"
    assert auth.is_parent()
    assert auth.restore(None) is None


def test_create_parent_also_creates_profile(users_repo):
    parents = FakeParentsRepo()
    service = UserService(users_repo, parents)

    user_id = service.create_user(username="parent2", password="parent123", role="parent", school_id=1)

    created = users_repo.get_by_id(user_id)
    assert created.role == Role.PARENT
    assert check_password_hash(created.password_hash, "parent123")
    assert parents.profiles == [(user_id, "parent2", "Parent")]


def test_create_teacher_has_no_parent_profile(users_repo):
    parents = FakeParentsRepo()
    UserService(users_repo, parents).create_user(username="teacher2", password="teacher123", role="TEACHER", school_id=1)

    assert parents.profiles == []


def test_duplicate_username_rejected(users_repo):
    with pytest.raises(ValidationError, match="đã tồn tại"):
        UserService(users_repo, FakeParentsRepo()).create_user(
            username="teacher1", password="teacher123", role="TEACHER", school_id=1
        )


@pytest.mark.parametrize(
    "username, password, match",
    [
        ("", "secret12", "không được để trống"),
        ("ab", "secret12", "tối thiểu 3"),
        ("teacher9", "123", "tối thiểu 6"),
    ],
)
def test_create_user_validation(users_repo, username, password, match):
    with pytest.raises(ValidationError, match=match):
        UserService(users_repo, FakeParentsRepo()).create_user(
            username=username, password=password, role="TEACHER", school_id=1
        )


def test_invalid_role_rejected(users_repo):
    with pytest.raises(ValidationError, match="Vai trò không hợp lệ"):
        UserService(users_repo, FakeParentsRepo()).create_user(
            username="janitor", password="secret12", role="JANITOR", school_id=1
        )


def test_role_cannot_change_on_update(users_repo):
    with pytest.raises(ValidationError, match="Không được đổi vai trò"):
        UserService(users_repo, FakeParentsRepo()).update_user(
            user_id=2, username="teacher1", role="PRINCIPAL", school_id=1
        )


def test_blank_password_keeps_hash(users_repo):
    before = users_repo.get_by_id(2).password_hash

    UserService(users_repo, FakeParentsRepo()).update_user(
        user_id=2, username="teacher_one", role="TEACHER", school_id=1, password=""
    )

    after = users_repo.get_by_id(2)
    assert after.username == "teacher_one"
    assert after.password_hash == before


def test_update_missing_user(users_repo):
    with pytest.raises(NotFoundError):
        UserService(users_repo, FakeParentsRepo()).update_user(
            user_id=42, username="nobody", role="TEACHER", school_id=1
        )


def test_principal_cannot_be_deleted(users_repo):
    with pytest.raises(ValidationError, match="hiệu trưởng"):
        UserService(users_repo, FakeParentsRepo()).delete_user(1)


def test_delete_teacher(users_repo):
    UserService(users_repo, FakeParentsRepo()).delete_user(2)

    assert users_repo.get_by_id(2) is None


def test_search_blank_returns_everyone(users_repo):
    service = UserService(users_repo, FakeParentsRepo())

    assert len(service.search_users("  ")) == 3
    assert [u.username for u in service.search_users("PAR")] == ["parent1"]
    assert [u.username for u in service.get_users_by_role("teacher")] == ["teacher1"]


def test_valid_roles():
    assert UserService.valid_roles() == ["PRINCIPAL", "TEACHER", "PARENT"]
    assert UserService.is_valid_role(" parent ")
    assert not UserService.is_valid_role(None)
