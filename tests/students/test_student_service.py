from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from kindergarten.common.datetime_utils import age_in_years
from kindergarten.core.enums import Gender
from kindergarten.core.exceptions import NotFoundError, ValidationError
from kindergarten.students.model import Student
from kindergarten.students.service import StudentService


class FakeStudentsRepo:
    def __init__(self):
        self.students: dict[int, Student] = {}
        self._next_id = 1

    def get_by_id(self, student_id):
        return self.students.get(student_id)

    def list_all(self):
        return sorted(self.students.values(), key=lambda s: s.name)

    def list_by_class(self, class_id):
        return [s for s in self.list_all() if s.class_id == class_id]

    def search_by_name(self, term):
        return [s for s in self.list_all() if term.lower() in s.name.lower()]

    def count_in_class(self, class_id):
        return len(self.list_by_class(class_id))

    def create_student(self, *, name, dob, class_id, gender, address):
        student_id = self._next_id
        self._next_id += 1
        self.students[student_id] = Student(
            id=student_id, name=name, dob=dob, class_id=class_id, gender=gender, address=address
        )
        return student_id

    def update_student(self, *, student_id, name, dob, class_id, gender, address):
        if student_id not in self.students:
            return False
        self.students[student_id] = replace(
            self.students[student_id], name=name, dob=dob, class_id=class_id, gender=gender, address=address
        )
        return True

    def update_profile_image(self, student_id, image):
        if student_id not in self.students:
            return False
        self.students[student_id] = replace(self.students[student_id], profile_image=image)
        return True

    def delete_by_id(self, student_id):
        return self.students.pop(student_id, None) is not None


@pytest.fixture
def service():
    return StudentService(FakeStudentsRepo())


def test_add_student_normalizes_fields(service):
    student_id = service.add_student(name="  Nguyễn An ", dob=date(2021, 4, 2), class_id=1, gender="male", address="  ")

    student = service.get_student_by_id(student_id)
    assert student.name == "Nguyễn An"
    assert student.gender == Gender.MALE
    assert student.address is None


def test_add_student_requires_name_and_dob(service):
    with pytest.raises(ValidationError, match="Tên học sinh"):
        service.add_student(name=" ", dob=date(2021, 1, 1))
    with pytest.raises(ValidationError, match="Ngày sinh"):
        service.add_student(name="An", dob=None)


def test_invalid_gender(service):
    with pytest.raises(ValidationError, match="Giới tính"):
        service.add_student(name="An", dob=date(2021, 1, 1), gender="X")


def test_update_missing_student(service):
    with pytest.raises(NotFoundError):
        service.update_student(student_id=5, name="An", dob=date(2021, 1, 1))


def test_profile_image_set_and_cleared(service):
    student_id = service.add_student(name="An", dob=date(2021, 1, 1))

    service.set_profile_image(student_id, b"\x89PNG")
    assert service.get_student_by_id(student_id).has_profile_image

    service.set_profile_image(student_id, None)
    assert not service.get_student_by_id(student_id).has_profile_image


def test_search_and_count(service):
    service.add_student(name="An", dob=date(2021, 1, 1), class_id=1)
    service.add_student(name="Bình", dob=date(2021, 1, 1), class_id=1)
    service.add_student(name="Anh", dob=date(2021, 1, 1), class_id=2)

    assert [s.name for s in service.search_students("an")] == ["An", "Anh"]
    assert len(service.search_students("")) == 3
    assert service.get_student_count(1) == 2


def test_delete_student(service):
    student_id = service.add_student(name="An", dob=date(2021, 1, 1))

    service.delete_student(student_id)

    with pytest.raises(NotFoundError):
        service.delete_student(student_id)


def test_age_before_and_after_birthday():
    student = Student(id=1, name="An", dob=date(2021, 6, 15))

    assert age_in_years(student.dob, on=date(2026, 6, 14)) == 4
    assert age_in_years(student.dob, on=date(2026, 6, 15)) == 5
