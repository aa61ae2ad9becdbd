from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import School, User
from .repository import UserRepository

_USER_COLUMNS = "id, username, password_hash, role, school_id, created_at"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        id=int(row["id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        school_id=int(row["school_id"]),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY role, username")
            return [_to_user(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE role=%s ORDER BY username",
                (role.value,),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def search(self, term: str) -> Sequence[User]:
        pattern = f"%{term.lower()}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE LOWER(username) LIKE %s OR LOWER(role) LIKE %s
                ORDER BY role, username
                """,
                (pattern, pattern),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, username: str, password_hash: str, role: Role, school_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO users(username, password_hash, role, school_id) VALUES(%s,%s,%s,%s)",
                (username, password_hash, role.value, school_id),
            )
            return int(cur.lastrowid)

    def update_user(self, *, user_id: int, username: str, password_hash: str, role: Role, school_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET username=%s, password_hash=%s, role=%s, school_id=%s WHERE id=%s",
                (username, password_hash, role.value, school_id, user_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE classes SET teacher_id=NULL WHERE teacher_id=%s", (user_id,))
            cur.execute("DELETE FROM parents WHERE user_id=%s", (user_id,))
            cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
            return cur.rowcount > 0

    def list_schools(self) -> Sequence[School]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM schools ORDER BY name")
            return [School(id=int(r["id"]), name=r["name"]) for r in fetchall(cur)]
