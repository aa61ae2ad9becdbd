from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SchoolClass, TeacherOption
from .repository import ClassRepository

_SELECT = """
    SELECT c.id, c.name, c.school_id, c.teacher_id, c.grade_level, c.capacity, c.created_at,
           u.username AS teacher_name,
           sc.name AS school_name,
           COALESCE(e.enrolled, 0) AS current_enrollment
    FROM classes c
    LEFT JOIN users u ON u.id = c.teacher_id
    LEFT JOIN schools sc ON sc.id = c.school_id
    LEFT JOIN (
        SELECT class_id, COUNT(*) AS enrolled
        FROM students
        WHERE class_id IS NOT NULL
        GROUP BY class_id
    ) e ON e.class_id = c.id
"""


def _to_class(row: Dict[str, Any]) -> SchoolClass:
    return SchoolClass(
        id=int(row["id"]),
        name=row["name"],
        school_id=int(row["school_id"]),
        grade_level=row["grade_level"],
        capacity=int(row["capacity"]),
        teacher_id=row.get("teacher_id"),
        created_at=row.get("created_at"),
        teacher_name=row.get("teacher_name"),
        school_name=row.get("school_name"),
        current_enrollment=int(row.get("current_enrollment") or 0),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _query(self, where: str = "", params: tuple = ()) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY c.name", params)
            return [_to_class(r) for r in fetchall(cur)]

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE c.id=%s", (class_id,))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def list_all(self) -> Sequence[SchoolClass]:
        return self._query()

    def list_by_school(self, school_id: int) -> Sequence[SchoolClass]:
        return self._query("WHERE c.school_id=%s", (school_id,))

    def list_by_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        return self._query("WHERE c.teacher_id=%s", (teacher_id,))

    def search(self, term: str) -> Sequence[SchoolClass]:
        pattern = f"%{term.lower()}%"
        return self._query(
            "WHERE LOWER(c.name) LIKE %s OR LOWER(c.grade_level) LIKE %s OR LOWER(COALESCE(u.username, '')) LIKE %s",
            (pattern, pattern, pattern),
        )

    def create_class(
        self,
        *,
        name: str,
        school_id: int,
        grade_level: str,
        capacity: int,
        teacher_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(name, school_id, teacher_id, grade_level, capacity) VALUES(%s,%s,%s,%s,%s)",
                (name, school_id, teacher_id, grade_level, capacity),
            )
            return int(cur.lastrowid)

    def update_class(
        self,
        *,
        class_id: int,
        name: str,
        grade_level: str,
        capacity: int,
        teacher_id: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET name=%s, teacher_id=%s, grade_level=%s, capacity=%s WHERE id=%s",
                (name, teacher_id, grade_level, capacity, class_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM classes WHERE id=%s", (class_id,))
            return cur.rowcount > 0

    def set_teacher(self, class_id: int, teacher_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE classes SET teacher_id=%s WHERE id=%s", (teacher_id, class_id))
            return cur.rowcount > 0

    def list_teachers(self) -> Sequence[TeacherOption]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.id, u.username, c.id AS class_id, c.name AS class_name
                FROM users u
                LEFT JOIN classes c ON c.teacher_id = u.id
                WHERE u.role='TEACHER'
                ORDER BY u.username
                """
            )
            return [
                TeacherOption(
                    id=int(r["id"]),
                    username=r["username"],
                    class_id=r.get("class_id"),
                    class_name=r.get("class_name"),
                )
                for r in fetchall(cur)
            ]
