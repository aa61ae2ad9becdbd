from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import AuthorizationRepository


class MySQLAuthorizationRepository(AuthorizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _scalar(self, sql: str, params: tuple) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            row = fetchone(cur)
            if not row or row.get("v") is None:
                return None
            return int(row["v"])

    def _exists(self, sql: str, params: tuple) -> bool:
        return (self._scalar(sql, params) or 0) > 0

    def _ids(self, sql: str, params: tuple) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [int(r["id"]) for r in fetchall(cur)]

    def get_class_school_id(self, class_id: int) -> Optional[int]:
        return self._scalar("SELECT school_id AS v FROM classes WHERE id=%s", (class_id,))

    def get_user_school_id(self, user_id: int) -> Optional[int]:
        return self._scalar("SELECT school_id AS v FROM users WHERE id=%s", (user_id,))

    def get_student_class_id(self, student_id: int) -> Optional[int]:
        return self._scalar("SELECT class_id AS v FROM students WHERE id=%s", (student_id,))

    def is_teacher_assigned_to_class(self, teacher_id: int, class_id: int) -> bool:
        return self._exists(
            "SELECT COUNT(*) AS v FROM classes WHERE teacher_id=%s AND id=%s",
            (teacher_id, class_id),
        )

    def is_parent_child_in_class(self, parent_id: int, class_id: int) -> bool:
        return self._exists(
            """
            SELECT COUNT(*) AS v
            FROM students s
            JOIN parents p ON s.id = p.student_id
            WHERE p.user_id=%s AND s.class_id=%s
            """,
            (parent_id, class_id),
        )

    def principal_can_access_post(self, principal_id: int, post_id: int) -> bool:
        # Announcements without a class belong to the author's school.
        return self._exists(
            """
            SELECT COUNT(*) AS v
            FROM posts p
            JOIN users me ON me.id=%s
            LEFT JOIN classes c ON c.id = p.class_id
            JOIN users author ON author.id = p.author_id
            WHERE p.id=%s AND COALESCE(c.school_id, author.school_id) = me.school_id
            """,
            (principal_id, post_id),
        )

    def teacher_can_access_post(self, teacher_id: int, post_id: int) -> bool:
        return self._exists(
            """
            SELECT COUNT(*) AS v
            FROM posts p
            JOIN classes c ON p.class_id = c.id
            WHERE p.id=%s AND c.teacher_id=%s
            """,
            (post_id, teacher_id),
        )

    def parent_can_access_post(self, parent_id: int, post_id: int) -> bool:
        return self._exists(
            """
            SELECT COUNT(*) AS v
            FROM posts p
            JOIN students s ON s.class_id = p.class_id
            JOIN parents pa ON pa.student_id = s.id
            WHERE p.id=%s AND pa.user_id=%s
            """,
            (post_id, parent_id),
        )

    def list_class_ids_for_school(self, school_id: int) -> Sequence[int]:
        return self._ids("SELECT id FROM classes WHERE school_id=%s ORDER BY id", (school_id,))

    def list_class_ids_for_teacher(self, teacher_id: int) -> Sequence[int]:
        return self._ids("SELECT id FROM classes WHERE teacher_id=%s ORDER BY id", (teacher_id,))

    def list_class_ids_for_parent(self, parent_id: int) -> Sequence[int]:
        return self._ids(
            """
            SELECT DISTINCT s.class_id AS id
            FROM students s
            JOIN parents p ON s.id = p.student_id
            WHERE p.user_id=%s AND s.class_id IS NOT NULL
            ORDER BY id
            """,
            (parent_id,),
        )
