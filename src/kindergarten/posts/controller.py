from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_optional_date
from ..common.guards import login_required, permission_required
from ..common.responses import decode_base64, json_body, ok, optional_int
from ..common.serializers import to_dict, to_list
from ..container import Container
from ..core.enums import Permission, Role
from ..core.exceptions import NotFoundError
from .model import Post, PostDraft


def _post_summary(post: Post) -> dict:
    data = to_dict(post, extra=("has_photo",))
    data.pop("photo_attachment", None)
    return data


def _draft_from(body: dict, author_id: int) -> PostDraft:
    return PostDraft(
        title=body.get("title", ""),
        content=body.get("content", ""),
        author_id=author_id,
        class_id=optional_int(body.get("class_id"), "Mã lớp"),
        post_type=body.get("post_type"),
        category=body.get("category"),
        visibility=body.get("visibility"),
        photo_attachment=decode_base64(body.get("photo_base64"), "Ảnh đính kèm"),
        photo_filename=body.get("photo_filename"),
        scheduled_date=parse_optional_date(body.get("scheduled_date"), "Ngày đăng"),
        event_date=parse_optional_date(body.get("event_date"), "Ngày sự kiện"),
        is_pinned=bool(body.get("is_pinned", False)),
    )


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    posts = container.post_service

    def _require_post(post_id: int) -> Post:
        post = posts.get_post_by_id(post_id)
        if post is None:
            raise NotFoundError(f"Không tìm thấy bài đăng với ID: {post_id}")
        return post

    def _require_own_post(post_id: int, action: str) -> Post:
        post = _require_post(post_id)
        authz.require(posts.can_user_edit_post(post, auth.current_user.id), action)
        return post

    def _require_comment_on_own_post(comment_id: int, action: str):
        comment = posts.get_comment_by_id(comment_id)
        if comment is None:
            raise NotFoundError(f"Không tìm thấy bình luận với ID: {comment_id}")
        _require_own_post(comment.post_id, action)
        return comment

    def _check_class_target(class_id) -> None:
        if class_id is not None:
            authz.require(authz.can_create_post_for_class(class_id), "đăng bài cho lớp này")
        else:
            authz.require_permission(Permission.MANAGE_SCHOOL, "đăng thông báo toàn trường")

    @app.route("/api/posts/class/<int:class_id>", methods=["GET"], endpoint="class_posts")
    @login_required(auth)
    def class_posts(class_id: int):
        authz.require(authz.can_view_class_posts(class_id), "xem bài đăng của lớp này")
        user = auth.current_user
        if user.role == Role.PARENT:
            found = posts.get_visible_posts_for_parents(class_id)
        else:
            found = [p for p in posts.get_posts_by_class(class_id) if posts.can_user_view_post(p, user.role, class_id)]
        return ok([_post_summary(p) for p in found])

    @app.route("/api/posts/mine", methods=["GET"], endpoint="my_posts")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "xem bài đăng của mình")
    def my_posts():
        return ok([_post_summary(p) for p in posts.get_posts_by_teacher(auth.current_user.id)])

    @app.route("/api/posts/scheduled-today", methods=["GET"], endpoint="scheduled_posts_today")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "xem bài đăng theo lịch")
    def scheduled_posts_today():
        allowed = set(authz.get_accessible_class_ids())
        found = [p for p in posts.get_scheduled_posts_for_today() if p.class_id is None or p.class_id in allowed]
        return ok([_post_summary(p) for p in found])

    @app.route("/api/posts/summary", methods=["GET"], endpoint="post_summary")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "xem thống kê bài đăng")
    def post_summary():
        summary = posts.get_post_summary(auth.current_user.id)
        return ok(to_dict(summary))

    @app.route("/api/posts/<int:post_id>", methods=["GET"], endpoint="get_post")
    @login_required(auth)
    def get_post(post_id: int):
        authz.require(authz.can_access_post(post_id), "xem bài đăng này")
        return ok(to_dict(_require_post(post_id), extra=("has_photo",)))

    @app.route("/api/posts", methods=["POST"], endpoint="create_post")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "đăng bài")
    def create_post():
        draft = _draft_from(json_body(), auth.current_user.id)
        _check_class_target(draft.class_id)
        post_id = posts.create_post(draft)
        return ok({"id": post_id}, message="Đăng bài thành công", status=201)

    @app.route("/api/posts/<int:post_id>", methods=["PUT"], endpoint="update_post")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "sửa bài đăng")
    def update_post(post_id: int):
        _require_own_post(post_id, "sửa bài đăng của người khác")
        draft = _draft_from(json_body(), auth.current_user.id)
        _check_class_target(draft.class_id)
        posts.update_post(post_id, draft)
        return ok(message="Cập nhật bài đăng thành công")

    @app.route("/api/posts/<int:post_id>", methods=["DELETE"], endpoint="delete_post")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "xóa bài đăng")
    def delete_post(post_id: int):
        posts.delete_post(post_id, auth.current_user.id)
        return ok(message="Đã xóa bài đăng")

    @app.route("/api/posts/<int:post_id>/schedule", methods=["PUT"], endpoint="schedule_post")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "lên lịch bài đăng")
    def schedule_post(post_id: int):
        _require_own_post(post_id, "lên lịch bài đăng của người khác")
        scheduled = parse_optional_date(json_body().get("scheduled_date"), "Ngày đăng")
        posts.schedule_post(post_id, scheduled)
        return ok(message="Đã lên lịch đăng bài")

    @app.route("/api/posts/<int:post_id>/comments", methods=["GET"], endpoint="post_comments")
    @login_required(auth)
    def post_comments(post_id: int):
        authz.require(authz.can_access_post(post_id), "xem bình luận của bài đăng này")
        post = _require_post(post_id)
        if posts.can_user_edit_post(post, auth.current_user.id):
            found = posts.get_all_comments(post_id)
        else:
            found = posts.get_approved_comments(post_id)
        return ok(to_list(found))

    @app.route("/api/posts/<int:post_id>/comments", methods=["POST"], endpoint="add_comment")
    @permission_required(auth, authz, Permission.COMMENT_POSTS, "bình luận")
    def add_comment(post_id: int):
        authz.require(authz.can_access_post(post_id), "bình luận bài đăng này")
        comment_id = posts.add_comment(
            post_id=post_id,
            author_id=auth.current_user.id,
            content=json_body().get("content", ""),
        )
        return ok({"id": comment_id}, message="Bình luận đang chờ duyệt", status=201)

    @app.route("/api/comments/pending", methods=["GET"], endpoint="pending_comments")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "duyệt bình luận")
    def pending_comments():
        return ok(to_list(posts.get_pending_comments(auth.current_user.id)))

    @app.route("/api/comments/<int:comment_id>/approve", methods=["POST"], endpoint="approve_comment")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "duyệt bình luận")
    def approve_comment(comment_id: int):
        _require_comment_on_own_post(comment_id, "duyệt bình luận trên bài của người khác")
        posts.approve_comment(comment_id)
        return ok(message="Đã duyệt bình luận")

    @app.route("/api/comments/<int:comment_id>/reject", methods=["POST"], endpoint="reject_comment")
    @permission_required(auth, authz, Permission.CREATE_POSTS, "duyệt bình luận")
    def reject_comment(comment_id: int):
        _require_comment_on_own_post(comment_id, "duyệt bình luận trên bài của người khác")
        posts.reject_comment(comment_id)
        return ok(message="Đã ẩn bình luận")

    @app.route("/api/comments/<int:comment_id>", methods=["DELETE"], endpoint="delete_comment")
    @login_required(auth)
    def delete_comment(comment_id: int):
        comment = posts.get_comment_by_id(comment_id)
        if comment is None:
            raise NotFoundError(f"Không tìm thấy bình luận với ID: {comment_id}")
        user_id = auth.current_user.id
        if comment.author_id == user_id:
            posts.delete_comment(comment_id, user_id)
        else:
            authz.require_permission(Permission.CREATE_POSTS, "xóa bình luận của người khác")
            posts.delete_comment_by_teacher(comment_id, user_id)
        return ok(message="Đã xóa bình luận")
