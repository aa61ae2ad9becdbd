from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AnnouncementCategory, PostType, PostVisibility
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_bytes
from .model import Post, PostDraft, PostStatistics
from .repository import PostRepository

_SELECT = """
    SELECT p.id, p.title, p.content, p.author_id, p.class_id, p.post_type, p.category,
           p.photo_attachment, p.photo_filename, p.scheduled_date, p.event_date,
           p.visibility, p.is_published, p.is_pinned, p.created_at, p.updated_at,
           u.username AS author_name, c.name AS class_name,
           (SELECT COUNT(*) FROM comments cm WHERE cm.post_id = p.id AND cm.is_approved = 1) AS comment_count
    FROM posts p
    JOIN users u ON u.id = p.author_id
    LEFT JOIN classes c ON c.id = p.class_id
"""


def _to_post(row: Dict[str, Any]) -> Post:
    return Post(
        id=int(row["id"]),
        title=row["title"],
        content=row["content"],
        author_id=int(row["author_id"]),
        class_id=row.get("class_id"),
        post_type=PostType(row.get("post_type") or PostType.CLASS_ACTIVITY.value),
        category=AnnouncementCategory(row["category"]) if row.get("category") else None,
        visibility=PostVisibility(row.get("visibility") or PostVisibility.ALL.value),
        photo_attachment=optional_bytes(row.get("photo_attachment")),
        photo_filename=row.get("photo_filename"),
        scheduled_date=row.get("scheduled_date"),
        event_date=row.get("event_date"),
        is_published=bool(row.get("is_published", True)),
        is_pinned=bool(row.get("is_pinned", False)),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        author_name=row.get("author_name"),
        class_name=row.get("class_name"),
        comment_count=int(row.get("comment_count") or 0),
    )


def _draft_params(draft: PostDraft) -> tuple:
    return (
        draft.title,
        draft.content,
        draft.class_id,
        draft.post_type.value,
        draft.category.value if draft.category else None,
        draft.photo_attachment,
        draft.photo_filename,
        draft.scheduled_date,
        draft.event_date,
        draft.visibility.value,
    )


class MySQLPostRepository(PostRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, post_id: int) -> Optional[Post]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.id=%s", (post_id,))
            row = fetchone(cur)
            return _to_post(row) if row else None

    def create_post(self, draft: PostDraft, *, is_published: bool) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO posts(title, content, class_id, post_type, category,
                                  photo_attachment, photo_filename, scheduled_date, event_date,
                                  visibility, author_id, is_published, is_pinned)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _draft_params(draft) + (draft.author_id, int(is_published), int(draft.is_pinned)),
            )
            return int(cur.lastrowid)

    def update_post(self, post_id: int, draft: PostDraft, *, is_published: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE posts
                SET title=%s, content=%s, class_id=%s, post_type=%s, category=%s,
                    photo_attachment=%s, photo_filename=%s, scheduled_date=%s, event_date=%s,
                    visibility=%s, is_published=%s, is_pinned=%s
                WHERE id=%s AND author_id=%s
                """,
                _draft_params(draft) + (int(is_published), int(draft.is_pinned), post_id, draft.author_id),
            )
            return cur.rowcount > 0

    def delete_post(self, post_id: int, author_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM posts WHERE id=%s AND author_id=%s", (post_id, author_id))
            return cur.rowcount > 0

    def list_by_author(self, author_id: int) -> Sequence[Post]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.author_id=%s ORDER BY p.created_at DESC", (author_id,))
            return [_to_post(r) for r in fetchall(cur)]

    def list_visible_for_class(
        self,
        class_id: int,
        *,
        today: date,
        visibilities: Sequence[PostVisibility] = tuple(PostVisibility),
    ) -> Sequence[Post]:
        values = [v.value for v in visibilities]
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + f"""
                WHERE p.class_id=%s AND p.is_published = 1
                  AND p.visibility IN ({placeholders})
                  AND (p.scheduled_date IS NULL OR p.scheduled_date <= %s)
                ORDER BY p.is_pinned DESC, p.created_at DESC
                """,
                (class_id, *values, today),
            )
            return [_to_post(r) for r in fetchall(cur)]

    def list_scheduled_for(self, day: date) -> Sequence[Post]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE p.scheduled_date=%s AND p.is_published = 1 ORDER BY p.created_at DESC",
                (day,),
            )
            return [_to_post(r) for r in fetchall(cur)]

    def set_scheduled_date(self, post_id: int, scheduled_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE posts SET scheduled_date=%s WHERE id=%s", (scheduled_date, post_id))
            return cur.rowcount > 0

    def statistics_for_author(self, author_id: int, *, today: date) -> PostStatistics:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total_posts,
                       COALESCE(SUM(is_published = 1), 0) AS published_posts,
                       COALESCE(SUM(scheduled_date > %s), 0) AS scheduled_posts,
                       COALESCE(SUM(photo_attachment IS NOT NULL), 0) AS posts_with_photos
                FROM posts
                WHERE author_id=%s
                """,
                (today, author_id),
            )
            row = fetchone(cur) or {}
            return PostStatistics(
                total_posts=int(row.get("total_posts") or 0),
                published_posts=int(row.get("published_posts") or 0),
                scheduled_posts=int(row.get("scheduled_posts") or 0),
                posts_with_photos=int(row.get("posts_with_photos") or 0),
            )
