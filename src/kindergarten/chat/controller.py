from __future__ import annotations

from flask import Flask, request

from ..common.guards import permission_required
from ..common.responses import decode_base64, json_body, ok, optional_int
from ..common.serializers import to_dict
from ..container import Container
from ..core.constants import DEFAULT_RECENT_MESSAGES
from ..core.enums import Permission
from .model import ChatMessage, Conversation


def _conversation_dict(conversation: Conversation, user_id: int) -> dict:
    data = to_dict(conversation)
    data["other_participant_id"] = conversation.other_participant_id(user_id)
    data["other_participant_name"] = conversation.other_participant_name(user_id)
    return data


def _message_dict(message: ChatMessage) -> dict:
    data = to_dict(message, extra=("has_attachment", "is_image"))
    # Non-image attachments are fetched on demand.
    if not message.is_image:
        data.pop("attachment", None)
    return data


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authz = container.authorization_service
    chat = container.chat_service

    @app.route("/api/chat/conversations", methods=["GET"], endpoint="list_conversations")
    @permission_required(auth, authz, Permission.SEND_MESSAGES, "nhắn tin")
    def list_conversations():
        user_id = auth.current_user.id
        return ok([_conversation_dict(c, user_id) for c in chat.get_user_conversations(user_id)])

    @app.route("/api/chat/conversations", methods=["POST"], endpoint="open_conversation")
    @permission_required(auth, authz, Permission.SEND_MESSAGES, "nhắn tin")
    def open_conversation():
        user_id = auth.current_user.id
        other_id = optional_int(json_body().get("user_id"), "Mã người nhận") or 0
        authz.require(chat.can_users_chat(user_id, other_id), "nhắn tin với người dùng này")
        conversation = chat.get_or_create_conversation(user_id, other_id)
        return ok(_conversation_dict(conversation, user_id), status=201)

    @app.route(
        "/api/chat/conversations/<int:conversation_id>/messages",
        methods=["GET"],
        endpoint="conversation_messages",
    )
    @permission_required(auth, authz, Permission.SEND_MESSAGES, "nhắn tin")
    def conversation_messages(conversation_id: int):
        user_id = auth.current_user.id
        if request.args.get("all"):
            found = chat.get_conversation_messages(conversation_id, user_id)
        else:
            limit = optional_int(request.args.get("limit"), "Số lượng") or DEFAULT_RECENT_MESSAGES
            found = chat.get_recent_messages(conversation_id, user_id, limit)
        return ok([_message_dict(m) for m in found])

    @app.route(
        "/api/chat/conversations/<int:conversation_id>/messages",
        methods=["POST"],
        endpoint="send_message",
    )
    @permission_required(auth, authz, Permission.SEND_MESSAGES, "nhắn tin")
    def send_message(conversation_id: int):
        body = json_body()
        message_id = chat.send_message(
            conversation_id=conversation_id,
            sender_id=auth.current_user.id,
            content=body.get("content"),
            attachment=decode_base64(body.get("attachment_base64"), "Tệp đính kèm"),
            attachment_filename=body.get("attachment_filename"),
            attachment_mime_type=body.get("attachment_mime_type"),
        )
        return ok({"id": message_id}, status=201)

    @app.route("/api/chat/conversations/<int:conversation_id>/read", methods=["POST"], endpoint="mark_read")
    @permission_required(auth, authz, Permission.SEND_MESSAGES, "nhắn tin")
    def mark_read(conversation_id: int):
        updated = chat.mark_messages_as_read(conversation_id, auth.current_user.id)
        return ok({"updated": updated})

    @app.route("/api/chat/conversations/<int:conversation_id>/unread", methods=["GET"], endpoint="unread_count")
    @permission_required(auth, authz, Permission.SEND_MESSAGES, "nhắn tin")
    def unread_count(conversation_id: int):
        return ok({"unread": chat.get_unread_count(conversation_id, auth.current_user.id)})

    @app.route("/api/chat/recipients", methods=["GET"], endpoint="chat_recipients")
    @permission_required(auth, authz, Permission.SEND_MESSAGES, "nhắn tin")
    def chat_recipients():
        recipients = chat.get_available_recipients(auth.current_user.role)
        return ok([{"id": u.id, "username": u.username, "role": u.role.value} for u in recipients])
