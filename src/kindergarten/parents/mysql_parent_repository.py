from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Gender
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Parent, ParentChild
from .repository import ParentRepository

_PARENT_COLUMNS = "id, user_id, name, student_id, relationship, phone, email, created_at"


def _to_parent(row: Dict[str, Any]) -> Parent:
    return Parent(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        name=row["name"],
        student_id=row.get("student_id"),
        relationship=row.get("relationship") or "Parent",
        phone=row.get("phone"),
        email=row.get("email"),
        created_at=row.get("created_at"),
    )


class MySQLParentRepository(ParentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_profile(self, *, user_id: int, name: str, relationship: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO parents(user_id, name, relationship) VALUES(%s,%s,%s)",
                (user_id, name, relationship),
            )
            return int(cur.lastrowid)

    def get_profile(self, user_id: int) -> Optional[Parent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PARENT_COLUMNS} FROM parents WHERE user_id=%s ORDER BY id LIMIT 1",
                (user_id,),
            )
            row = fetchone(cur)
            return _to_parent(row) if row else None

    def list_children(self, user_id: int) -> Sequence[ParentChild]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.id AS student_id, s.name, s.dob, s.gender, s.class_id,
                       c.name AS class_name, p.relationship
                FROM students s
                JOIN parents p ON p.student_id = s.id
                LEFT JOIN classes c ON c.id = s.class_id
                WHERE p.user_id=%s
                ORDER BY s.name
                """,
                (user_id,),
            )
            return [
                ParentChild(
                    student_id=int(r["student_id"]),
                    name=r["name"],
                    dob=r["dob"],
                    gender=Gender(r["gender"]) if r.get("gender") else None,
                    class_id=r.get("class_id"),
                    class_name=r.get("class_name"),
                    relationship=r.get("relationship") or "Parent",
                )
                for r in fetchall(cur)
            ]

    def link_exists(self, user_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM parents WHERE user_id=%s AND student_id=%s",
                (user_id, student_id),
            )
            row = fetchone(cur)
            return bool(row and int(row["n"]) > 0)

    def add_link(self, *, user_id: int, name: str, student_id: int, relationship: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Reuse the empty profile row created with the account, if any.
            cur.execute(
                "UPDATE parents SET student_id=%s, relationship=%s WHERE user_id=%s AND student_id IS NULL LIMIT 1",
                (student_id, relationship, user_id),
            )
            if cur.rowcount > 0:
                cur.execute(
                    "SELECT id FROM parents WHERE user_id=%s AND student_id=%s",
                    (user_id, student_id),
                )
                return int(fetchone(cur)["id"])
            cur.execute(
                "INSERT INTO parents(user_id, name, student_id, relationship) VALUES(%s,%s,%s,%s)",
                (user_id, name, student_id, relationship),
            )
            return int(cur.lastrowid)

    def remove_link(self, user_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM parents WHERE user_id=%s AND student_id=%s",
                (user_id, student_id),
            )
            return cur.rowcount > 0

    def list_for_student(self, student_id: int) -> Sequence[Parent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PARENT_COLUMNS} FROM parents WHERE student_id=%s ORDER BY name",
                (student_id,),
            )
            return [_to_parent(r) for r in fetchall(cur)]

    def update_contact(self, *, user_id: int, phone: Optional[str], email: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE parents SET phone=%s, email=%s WHERE user_id=%s",
                (phone, email, user_id),
            )
            return cur.rowcount > 0
