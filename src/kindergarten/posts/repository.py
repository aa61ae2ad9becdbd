from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PostVisibility
from .model import Comment, CommentStatistics, Post, PostDraft, PostStatistics


class PostRepository(Protocol):
    def get_by_id(self, post_id: int) -> Optional[Post]:
        raise NotImplementedError

    def create_post(self, draft: PostDraft, *, is_published: bool) -> int:
        raise NotImplementedError

    def update_post(self, post_id: int, draft: PostDraft, *, is_published: bool) -> bool:
        """Only the author's own post is updated."""

        raise NotImplementedError

    def delete_post(self, post_id: int, author_id: int) -> bool:
        raise NotImplementedError

    def list_by_author(self, author_id: int) -> Sequence[Post]:
        raise NotImplementedError

    def list_visible_for_class(
        self,
        class_id: int,
        *,
        today: date,
        visibilities: Sequence[PostVisibility] = tuple(PostVisibility),
    ) -> Sequence[Post]:
        """Published, not scheduled past `today`, newest first."""

        raise NotImplementedError

    def list_scheduled_for(self, day: date) -> Sequence[Post]:
        raise NotImplementedError

    def set_scheduled_date(self, post_id: int, scheduled_date: date) -> bool:
        raise NotImplementedError

    def statistics_for_author(self, author_id: int, *, today: date) -> PostStatistics:
        raise NotImplementedError


class CommentRepository(Protocol):
    def get_by_id(self, comment_id: int) -> Optional[Comment]:
        raise NotImplementedError

    def create_comment(self, *, post_id: int, author_id: int, content: str, is_approved: bool) -> int:
        raise NotImplementedError

    def list_for_post(self, post_id: int, *, approved_only: bool) -> Sequence[Comment]:
        raise NotImplementedError

    def list_pending_for_author(self, post_author_id: int) -> Sequence[Comment]:
        raise NotImplementedError

    def set_approved(self, comment_id: int, approved: bool) -> bool:
        raise NotImplementedError

    def delete_by_author(self, comment_id: int, author_id: int) -> bool:
        raise NotImplementedError

    def delete_on_posts_of(self, comment_id: int, post_author_id: int) -> bool:
        raise NotImplementedError

    def statistics_for_post_author(self, post_author_id: int) -> CommentStatistics:
        raise NotImplementedError
