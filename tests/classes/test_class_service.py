from __future__ import annotations

from dataclasses import replace

import pytest

from kindergarten.classes.model import SchoolClass, TeacherOption
from kindergarten.classes.service import ClassService
from kindergarten.core.enums import Role
from kindergarten.core.exceptions import NotFoundError, ValidationError
from kindergarten.users.model import User


class FakeClassesRepo:
    def __init__(self, classes=()):
        self.classes: dict[int, SchoolClass] = {c.id: c for c in classes}
        self._next_id = max(self.classes, default=0) + 1

    def get_by_id(self, class_id):
        return self.classes.get(class_id)

    def list_all(self):
        return list(self.classes.values())

    def list_by_school(self, school_id):
        return [c for c in self.classes.values() if c.school_id == school_id]

    def list_by_teacher(self, teacher_id):
        return [c for c in self.classes.values() if c.teacher_id == teacher_id]

    def search(self, term):
        return [c for c in self.classes.values() if term.lower() in c.name.lower()]

    def create_class(self, *, name, school_id, grade_level, capacity, teacher_id):
        class_id = self._next_id
        self._next_id += 1
        self.classes[class_id] = SchoolClass(
            id=class_id, name=name, school_id=school_id, grade_level=grade_level, capacity=capacity, teacher_id=teacher_id
        )
        return class_id

    def update_class(self, *, class_id, name, grade_level, capacity, teacher_id):
        self.classes[class_id] = replace(
            self.classes[class_id], name=name, grade_level=grade_level, capacity=capacity, teacher_id=teacher_id
        )
        return True

    def delete_by_id(self, class_id):
        return self.classes.pop(class_id, None) is not None

    def set_teacher(self, class_id, teacher_id):
        self.classes[class_id] = replace(self.classes[class_id], teacher_id=teacher_id)
        return True

    def list_teachers(self):
        out = []
        for t in (7, 8):
            assigned = next((c for c in self.classes.values() if c.teacher_id == t), None)
            out.append(
                TeacherOption(
                    id=t,
                    username=f"teacher{t}",
                    class_id=assigned.id if assigned else None,
                    class_name=assigned.name if assigned else None,
                )
            )
        return out


class FakeUsersRepo:
    def __init__(self):
        self.users = {
            7: User(id=7, username="teacher7", password_hash="x", role=Role.TEACHER, school_id=1),
            8: User(id=8, username="teacher8", password_hash="x", role=Role.TEACHER, school_id=1),
            9: User(id=9, username="parent9", password_hash="x", role=Role.PARENT, school_id=1),
        }

    def get_by_id(self, user_id):
        return self.users.get(user_id)


@pytest.fixture
def repo():
    return FakeClassesRepo(
        [
            SchoolClass(id=1, name="Mầm 1", school_id=1, grade_level="Mầm", capacity=20, teacher_id=7, current_enrollment=12),
            SchoolClass(id=2, name="Chồi 1", school_id=1, grade_level="Chồi", capacity=10, current_enrollment=10),
            SchoolClass(id=3, name="Lá 1", school_id=1, grade_level="Lá", capacity=15),
        ]
    )


@pytest.fixture
def service(repo):
    return ClassService(repo, FakeUsersRepo())


def test_add_class_defaults_capacity(service, repo):
    class_id = service.add_class(name=" Lá 2 ", grade_level="Lá", school_id=1)

    assert repo.get_by_id(class_id).capacity == 20
    assert repo.get_by_id(class_id).name == "Lá 2"


@pytest.mark.parametrize("capacity", [4, 31])
def test_capacity_bounds(service, capacity):
    with pytest.raises(ValidationError, match="từ 5 đến 30"):
        service.add_class(name="Lá 2", grade_level="Lá", school_id=1, capacity=capacity)


def test_name_too_long(service):
    with pytest.raises(ValidationError, match="tối đa 50"):
        service.add_class(name="x" * 51, grade_level="Lá", school_id=1)


def test_capacity_below_enrollment_rejected(service):
    with pytest.raises(ValidationError, match="Không thể giảm sĩ số xuống 10. Lớp hiện có 12 học sinh."):
        service.update_class(class_id=1, name="Mầm 1", grade_level="Mầm", capacity=10, teacher_id=7)


def test_update_class_keeps_same_teacher(service, repo):
    service.update_class(class_id=1, name="Mầm 1A", grade_level="Mầm", capacity=25, teacher_id=7)

    assert repo.get_by_id(1).name == "Mầm 1A"
    assert repo.get_by_id(1).capacity == 25


def test_delete_blocked_while_students_enrolled(service):
    with pytest.raises(ValidationError, match="Còn 12 học sinh"):
        service.delete_class(1)


def test_delete_empty_class(service, repo):
    service.delete_class(3)

    assert repo.get_by_id(3) is None


def test_delete_missing_class(service):
    with pytest.raises(NotFoundError):
        service.delete_class(99)


def test_assign_teacher_already_assigned_elsewhere(service):
    with pytest.raises(ValidationError, match="Giáo viên đã được phân công lớp: Mầm 1"):
        service.assign_teacher(class_id=3, teacher_id=7)


def test_assign_non_teacher_rejected(service):
    with pytest.raises(ValidationError, match="Giáo viên không hợp lệ"):
        service.assign_teacher(class_id=3, teacher_id=9)


def test_assign_and_remove_teacher(service, repo):
    service.assign_teacher(class_id=3, teacher_id=8)
    assert repo.get_by_id(3).teacher_id == 8
    assert [t.id for t in service.get_available_teachers()] == []

    service.remove_teacher(3)
    assert repo.get_by_id(3).teacher_id is None
    assert [t.id for t in service.get_available_teachers()] == [8]


def test_statistics(service):
    stats = service.get_class_statistics(1)

    assert stats.total_classes == 3
    assert stats.classes_with_teachers == 1
    assert stats.classes_without_teachers == 2
    assert stats.total_capacity == 45
    assert stats.total_enrollment == 22
    assert stats.available_spots == 23
    assert stats.teacher_assignment_rate == pytest.approx(100 / 3)


def test_capacity_helpers(service):
    assert service.can_accommodate_students(1, 8) is True
    assert service.can_accommodate_students(1, 9) is False
    assert [c.id for c in service.get_classes_with_available_spots()] == [1, 3]
    assert [c.id for c in service.get_classes_by_grade_level("Chồi")] == [2]


def test_derived_class_properties(repo):
    full = repo.get_by_id(2)

    assert full.is_full
    assert full.available_spots == 0
    assert full.capacity_utilization == 100.0
    assert repo.get_by_id(1).has_teacher


def test_search_blank_term_lists_everything(service, repo):
    repo.classes[4] = SchoolClass(id=4, name="Lá 1", school_id=2, grade_level="Lá", capacity=20)

    assert [c.id for c in service.search_classes("  ")] == [1, 2, 3, 4]
    assert [c.id for c in service.search_classes(None, school_id=2)] == [4]
    assert service.search_classes("") == service.get_all_classes()


def test_search_matches_term_within_school(service, repo):
    repo.classes[4] = SchoolClass(id=4, name="Lá 1", school_id=2, grade_level="Lá", capacity=20)

    assert [c.id for c in service.search_classes(" lá ")] == [3, 4]
    assert [c.id for c in service.search_classes("lá", school_id=1)] == [3]
    assert service.search_classes("Hoa") == []


def test_grade_and_open_spot_lists_scoped_to_school(service, repo):
    repo.classes[4] = SchoolClass(id=4, name="Lá 1", school_id=2, grade_level="Lá", capacity=20)

    assert [c.id for c in service.get_classes_by_grade_level("Lá")] == [3, 4]
    assert [c.id for c in service.get_classes_by_grade_level("Lá", school_id=2)] == [4]
    assert [c.id for c in service.get_classes_with_available_spots(school_id=1)] == [1, 3]


def test_classes_by_teacher(service):
    assert [c.id for c in service.get_classes_by_teacher(7)] == [1]
    assert service.get_classes_by_teacher(8) == []
