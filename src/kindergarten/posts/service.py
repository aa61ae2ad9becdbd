from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import today_local
from ..common.validators import require_non_empty, require_positive_id, require_present
from ..core.enums import AnnouncementCategory, PostType, PostVisibility, Role
from ..core.exceptions import NotFoundError, ValidationError
from .model import Comment, CommentStatistics, Post, PostDraft, PostStatistics
from .repository import CommentRepository, PostRepository

logger = logging.getLogger(__name__)

PARENT_VISIBILITIES = (PostVisibility.ALL, PostVisibility.PARENTS_ONLY)


def _parse_enum(enum_cls, value, field_name: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"{field_name} không hợp lệ: {value}")


@dataclass(frozen=True)
class PostSummary:
    post_statistics: PostStatistics
    comment_statistics: CommentStatistics
    pending_comments: Sequence[Comment]


class PostService:
    """Use case: bài đăng, lịch đăng và kiểm duyệt bình luận."""

    def __init__(
        self,
        posts: PostRepository,
        comments: CommentRepository,
        classes: ClassRepository,
        *,
        today: Callable[[], date] = today_local,
    ):
        self._posts = posts
        self._comments = comments
        self._classes = classes
        self._today = today

    def _validated(self, draft: PostDraft) -> PostDraft:
        title = require_non_empty(draft.title, "Tiêu đề")
        content = require_non_empty(draft.content, "Nội dung")
        author_id = require_positive_id(draft.author_id, "Mã tác giả")
        visibility = _parse_enum(PostVisibility, draft.visibility, "Phạm vi hiển thị") or PostVisibility.ALL
        post_type = _parse_enum(PostType, draft.post_type, "Loại bài đăng") or PostType.CLASS_ACTIVITY
        category = _parse_enum(AnnouncementCategory, draft.category, "Danh mục")

        if draft.class_id is not None:
            class_id = require_positive_id(draft.class_id, "Mã lớp")
            if not self._classes.get_by_id(class_id):
                raise NotFoundError(f"Không tìm thấy lớp với ID: {class_id}")

        if draft.photo_attachment and not draft.photo_filename:
            raise ValidationError("Thiếu tên file ảnh đính kèm")

        return replace(
            draft,
            title=title,
            content=content,
            author_id=author_id,
            visibility=visibility,
            post_type=post_type,
            category=category,
        )

    def create_post(self, draft: PostDraft) -> int:
        draft = self._validated(draft)
        post_id = self._posts.create_post(draft, is_published=True)
        logger.info("Post %s created by user %s", post_id, draft.author_id)
        return post_id

    def update_post(self, post_id: int, draft: PostDraft) -> None:
        post_id = require_positive_id(post_id, "Mã bài đăng")
        draft = self._validated(draft)
        if not self._posts.update_post(post_id, draft, is_published=True):
            raise NotFoundError("Không tìm thấy bài đăng hoặc bạn không phải tác giả")

    def delete_post(self, post_id: int, author_id: int) -> None:
        if not self._posts.delete_post(post_id, author_id):
            raise NotFoundError("Không tìm thấy bài đăng hoặc bạn không phải tác giả")
        logger.info("Post %s deleted by user %s", post_id, author_id)

    def schedule_post(self, post_id: int, scheduled_date: Optional[date]) -> None:
        scheduled_date = require_present(scheduled_date, "Ngày đăng")
        if scheduled_date < self._today():
            raise ValidationError("Không thể lên lịch đăng vào ngày đã qua")
        if not self._posts.set_scheduled_date(post_id, scheduled_date):
            raise NotFoundError(f"Không tìm thấy bài đăng với ID: {post_id}")

    def get_visible_posts_for_parents(self, class_id: int) -> Sequence[Post]:
        return self._posts.list_visible_for_class(class_id, today=self._today(), visibilities=PARENT_VISIBILITIES)

    def get_posts_by_teacher(self, teacher_id: int) -> Sequence[Post]:
        return self._posts.list_by_author(teacher_id)

    def get_posts_by_class(self, class_id: int) -> Sequence[Post]:
        return self._posts.list_visible_for_class(class_id, today=self._today())

    def get_post_by_id(self, post_id: int) -> Optional[Post]:
        return self._posts.get_by_id(post_id)

    def get_scheduled_posts_for_today(self) -> Sequence[Post]:
        return self._posts.list_scheduled_for(self._today())

    # Comments

    def add_comment(self, *, post_id: int, author_id: int, content: str) -> int:
        content = require_non_empty(content, "Nội dung bình luận")
        post_id = require_positive_id(post_id, "Mã bài đăng")
        author_id = require_positive_id(author_id, "Mã người bình luận")
        if not self._posts.get_by_id(post_id):
            raise NotFoundError(f"Không tìm thấy bài đăng với ID: {post_id}")
        # New comments wait for the post author's approval.
        return self._comments.create_comment(post_id=post_id, author_id=author_id, content=content, is_approved=False)

    def get_approved_comments(self, post_id: int) -> Sequence[Comment]:
        return self._comments.list_for_post(post_id, approved_only=True)

    def get_all_comments(self, post_id: int) -> Sequence[Comment]:
        return self._comments.list_for_post(post_id, approved_only=False)

    def get_pending_comments(self, teacher_id: int) -> Sequence[Comment]:
        return self._comments.list_pending_for_author(teacher_id)

    def get_comment_by_id(self, comment_id: int) -> Optional[Comment]:
        return self._comments.get_by_id(comment_id)

    def approve_comment(self, comment_id: int) -> None:
        if not self._comments.set_approved(comment_id, True):
            raise NotFoundError(f"Không tìm thấy bình luận với ID: {comment_id}")

    def reject_comment(self, comment_id: int) -> None:
        if not self._comments.set_approved(comment_id, False):
            raise NotFoundError(f"Không tìm thấy bình luận với ID: {comment_id}")

    def delete_comment_by_teacher(self, comment_id: int, teacher_id: int) -> None:
        if not self._comments.delete_on_posts_of(comment_id, teacher_id):
            raise NotFoundError("Không tìm thấy bình luận trên bài đăng của bạn")

    def delete_comment(self, comment_id: int, author_id: int) -> None:
        if not self._comments.delete_by_author(comment_id, author_id):
            raise NotFoundError("Không tìm thấy bình luận của bạn")

    # Statistics / permissions

    def get_post_statistics(self, author_id: int) -> PostStatistics:
        return self._posts.statistics_for_author(author_id, today=self._today())

    def get_comment_statistics(self, teacher_id: int) -> CommentStatistics:
        return self._comments.statistics_for_post_author(teacher_id)

    def get_post_summary(self, teacher_id: int) -> PostSummary:
        return PostSummary(
            post_statistics=self.get_post_statistics(teacher_id),
            comment_statistics=self.get_comment_statistics(teacher_id),
            pending_comments=self.get_pending_comments(teacher_id),
        )

    def can_user_view_post(self, post: Post, role: Role, user_class_id: Optional[int]) -> bool:
        if not post.should_be_visible(self._today()):
            return False
        if post.class_id is not None and post.class_id != user_class_id:
            return False

        if post.visibility == PostVisibility.TEACHERS_ONLY:
            return role in (Role.TEACHER, Role.PRINCIPAL)
        if post.visibility == PostVisibility.PARENTS_ONLY:
            return role == Role.PARENT
        return True

    @staticmethod
    def can_user_edit_post(post: Post, user_id: int) -> bool:
        return post.author_id == user_id
