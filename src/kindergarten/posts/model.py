from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AnnouncementCategory, PostType, PostVisibility


@dataclass(frozen=True)
class PostDraft:
    """Input for creating/updating a post."""

    title: str
    content: str
    author_id: int
    class_id: Optional[int] = None
    post_type: PostType = PostType.CLASS_ACTIVITY
    category: Optional[AnnouncementCategory] = None
    visibility: PostVisibility = PostVisibility.ALL
    photo_attachment: Optional[bytes] = None
    photo_filename: Optional[str] = None
    scheduled_date: Optional[date] = None
    event_date: Optional[date] = None
    is_pinned: bool = False


@dataclass(frozen=True)
class Post:
    """Thực thể miền (domain): Bài đăng của lớp / thông báo của trường."""

    id: int
    title: str
    content: str
    author_id: int
    class_id: Optional[int] = None
    post_type: PostType = PostType.CLASS_ACTIVITY
    category: Optional[AnnouncementCategory] = None
    visibility: PostVisibility = PostVisibility.ALL
    photo_attachment: Optional[bytes] = None
    photo_filename: Optional[str] = None
    scheduled_date: Optional[date] = None
    event_date: Optional[date] = None
    is_published: bool = True
    is_pinned: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None
    class_name: Optional[str] = None
    comment_count: int = 0

    @property
    def has_photo(self) -> bool:
        return bool(self.photo_attachment)

    def is_scheduled(self, today: date) -> bool:
        return self.scheduled_date is not None and self.scheduled_date > today

    def should_be_visible(self, today: date) -> bool:
        return self.is_published and not self.is_scheduled(today)

    def is_upcoming_event(self, today: date) -> bool:
        return self.event_date is not None and self.event_date >= today


@dataclass(frozen=True)
class Comment:
    id: int
    post_id: int
    author_id: int
    content: str
    is_approved: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None
    author_role: Optional[str] = None


@dataclass(frozen=True)
class PostStatistics:
    total_posts: int = 0
    published_posts: int = 0
    scheduled_posts: int = 0
    posts_with_photos: int = 0


@dataclass(frozen=True)
class CommentStatistics:
    total_comments: int = 0
    approved_comments: int = 0
    pending_comments: int = 0
