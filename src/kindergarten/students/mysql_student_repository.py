from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Gender
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_bytes
from .model import Student
from .repository import StudentRepository

_SELECT = """
    SELECT s.id, s.name, s.dob, s.gender, s.class_id, s.address, s.profile_image, s.created_at,
           c.name AS class_name
    FROM students s
    LEFT JOIN classes c ON c.id = s.class_id
"""


def _to_student(row: Dict[str, Any]) -> Student:
    return Student(
        id=int(row["id"]),
        name=row["name"],
        dob=row["dob"],
        class_id=row.get("class_id"),
        gender=Gender(row["gender"]) if row.get("gender") else None,
        address=row.get("address"),
        profile_image=optional_bytes(row.get("profile_image")),
        created_at=row.get("created_at"),
        class_name=row.get("class_name"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.id=%s", (student_id,))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY s.name")
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_class(self, class_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.class_id=%s ORDER BY s.name", (class_id,))
            return [_to_student(r) for r in fetchall(cur)]

    def search_by_name(self, term: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE LOWER(s.name) LIKE %s ORDER BY s.name",
                (f"%{term.lower()}%",),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def count_in_class(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students WHERE class_id=%s", (class_id,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def create_student(
        self,
        *,
        name: str,
        dob: date,
        class_id: Optional[int],
        gender: Optional[Gender],
        address: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO students(name, dob, gender, class_id, address) VALUES(%s,%s,%s,%s,%s)",
                (name, dob, gender.value if gender else None, class_id, address),
            )
            return int(cur.lastrowid)

    def update_student(
        self,
        *,
        student_id: int,
        name: str,
        dob: date,
        class_id: Optional[int],
        gender: Optional[Gender],
        address: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET name=%s, dob=%s, gender=%s, class_id=%s, address=%s WHERE id=%s",
                (name, dob, gender.value if gender else None, class_id, address, student_id),
            )
            return cur.rowcount > 0

    def update_profile_image(self, student_id: int, image: Optional[bytes]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET profile_image=%s WHERE id=%s", (image, student_id))
            return cur.rowcount > 0

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE id=%s", (student_id,))
            return cur.rowcount > 0
