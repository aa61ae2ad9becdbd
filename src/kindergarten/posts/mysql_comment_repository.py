from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Comment, CommentStatistics
from .repository import CommentRepository

_SELECT = """
    SELECT c.id, c.post_id, c.author_id, c.content, c.is_approved, c.created_at, c.updated_at,
           u.username AS author_name, u.role AS author_role
    FROM comments c
    JOIN users u ON u.id = c.author_id
"""


def _to_comment(row: Dict[str, Any]) -> Comment:
    return Comment(
        id=int(row["id"]),
        post_id=int(row["post_id"]),
        author_id=int(row["author_id"]),
        content=row["content"],
        is_approved=bool(row.get("is_approved")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        author_name=row.get("author_name"),
        author_role=row.get("author_role"),
    )


class MySQLCommentRepository(CommentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, comment_id: int) -> Optional[Comment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE c.id=%s", (comment_id,))
            row = fetchone(cur)
            return _to_comment(row) if row else None

    def create_comment(self, *, post_id: int, author_id: int, content: str, is_approved: bool) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO comments(post_id, author_id, content, is_approved) VALUES(%s,%s,%s,%s)",
                (post_id, author_id, content, int(is_approved)),
            )
            return int(cur.lastrowid)

    def list_for_post(self, post_id: int, *, approved_only: bool) -> Sequence[Comment]:
        where = " WHERE c.post_id=%s" + (" AND c.is_approved = 1" if approved_only else "")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + where + " ORDER BY c.created_at ASC", (post_id,))
            return [_to_comment(r) for r in fetchall(cur)]

    def list_pending_for_author(self, post_author_id: int) -> Sequence[Comment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                JOIN posts p ON p.id = c.post_id
                WHERE p.author_id=%s AND c.is_approved = 0
                ORDER BY c.created_at DESC
                """,
                (post_author_id,),
            )
            return [_to_comment(r) for r in fetchall(cur)]

    def set_approved(self, comment_id: int, approved: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE comments SET is_approved=%s WHERE id=%s", (int(approved), comment_id))
            return cur.rowcount > 0

    def delete_by_author(self, comment_id: int, author_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM comments WHERE id=%s AND author_id=%s", (comment_id, author_id))
            return cur.rowcount > 0

    def delete_on_posts_of(self, comment_id: int, post_author_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE c FROM comments c
                JOIN posts p ON p.id = c.post_id
                WHERE c.id=%s AND p.author_id=%s
                """,
                (comment_id, post_author_id),
            )
            return cur.rowcount > 0

    def statistics_for_post_author(self, post_author_id: int) -> CommentStatistics:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total_comments,
                       COALESCE(SUM(c.is_approved = 1), 0) AS approved_comments,
                       COALESCE(SUM(c.is_approved = 0), 0) AS pending_comments
                FROM comments c
                JOIN posts p ON p.id = c.post_id
                WHERE p.author_id=%s
                """,
                (post_author_id,),
            )
            row = fetchone(cur) or {}
            return CommentStatistics(
                total_comments=int(row.get("total_comments") or 0),
                approved_comments=int(row.get("approved_comments") or 0),
                pending_comments=int(row.get("pending_comments") or 0),
            )
