from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id
from ..core.constants import DEFAULT_RECENT_MESSAGES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import ChatMessage, Conversation
from .repository import ChatMessageRepository, ConversationRepository

logger = logging.getLogger(__name__)

# Who may open a conversation with whom.
CHAT_PARTNERS = {
    Role.TEACHER: Role.PARENT,
    Role.PARENT: Role.TEACHER,
}

PREVIEW_MAX_LENGTH = 500


class ChatService:
    """Use case: nhắn tin giữa giáo viên và phụ huynh."""

    def __init__(
        self,
        conversations: ConversationRepository,
        messages: ChatMessageRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._conversations = conversations
        self._messages = messages
        self._users = users
        self._clock = clock

    def get_user_conversations(self, user_id: int) -> Sequence[Conversation]:
        return self._conversations.list_for_user(user_id)

    def get_conversation_by_id(self, conversation_id: int) -> Optional[Conversation]:
        return self._conversations.get_by_id(conversation_id)

    def get_or_create_conversation(self, user1_id: int, user2_id: int) -> Conversation:
        user1_id = require_positive_id(user1_id, "Mã người dùng")
        user2_id = require_positive_id(user2_id, "Mã người dùng")
        if user1_id == user2_id:
            raise ValidationError("Không thể tự nhắn tin cho chính mình")

        first, second = min(user1_id, user2_id), max(user1_id, user2_id)
        existing = self._conversations.get_by_participants(first, second)
        if existing:
            return existing

        conversation_id = self._conversations.create(first, second)
        logger.info("Opened conversation %s between users %s and %s", conversation_id, first, second)
        created = self._conversations.get_by_id(conversation_id)
        if created is None:
            raise NotFoundError(f"Không tìm thấy cuộc trò chuyện với ID: {conversation_id}")
        return created

    def _require_participant(self, conversation_id: int, user_id: int) -> Conversation:
        conversation = self._conversations.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError(f"Không tìm thấy cuộc trò chuyện với ID: {conversation_id}")
        if not conversation.involves(user_id):
            raise AuthorizationError("Bạn không tham gia cuộc trò chuyện này")
        return conversation

    def send_message(
        self,
        *,
        conversation_id: int,
        sender_id: int,
        content: Optional[str] = None,
        attachment: Optional[bytes] = None,
        attachment_filename: Optional[str] = None,
        attachment_mime_type: Optional[str] = None,
    ) -> int:
        content = (content or "").strip() or None
        if content is None and not attachment:
            raise ValidationError("Tin nhắn phải có nội dung hoặc tệp đính kèm")
        if attachment and not attachment_filename:
            raise ValidationError("Thiếu tên tệp đính kèm")

        self._require_participant(conversation_id, sender_id)

        sent_at = self._clock()
        message_id = self._messages.create(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            attachment=attachment or None,
            attachment_filename=attachment_filename if attachment else None,
            attachment_mime_type=attachment_mime_type if attachment else None,
            sent_at=sent_at,
        )

        preview = content if content is not None else f"📎 {attachment_filename}"
        self._conversations.update_last_message(conversation_id, preview[:PREVIEW_MAX_LENGTH], sent_at)
        return message_id

    def get_conversation_messages(self, conversation_id: int, user_id: int) -> Sequence[ChatMessage]:
        self._require_participant(conversation_id, user_id)
        return self._messages.list_for_conversation(conversation_id)

    def get_recent_messages(
        self, conversation_id: int, user_id: int, limit: int = DEFAULT_RECENT_MESSAGES
    ) -> Sequence[ChatMessage]:
        """Last `limit` messages, oldest first."""

        self._require_participant(conversation_id, user_id)
        if limit <= 0:
            raise ValidationError("Số lượng tin nhắn phải lớn hơn 0")
        return list(reversed(self._messages.list_recent(conversation_id, limit)))

    def mark_messages_as_read(self, conversation_id: int, user_id: int) -> int:
        self._require_participant(conversation_id, user_id)
        return self._messages.mark_read(conversation_id, user_id)

    def get_unread_count(self, conversation_id: int, user_id: int) -> int:
        return self._messages.count_unread(conversation_id, user_id)

    def get_available_recipients(self, role: Role) -> Sequence[User]:
        partner = CHAT_PARTNERS.get(role)
        if partner is None:
            return []
        return self._users.list_by_role(partner)

    def can_users_chat(self, user1_id: int, user2_id: int) -> bool:
        user1 = self._users.get_by_id(user1_id)
        user2 = self._users.get_by_id(user2_id)
        if user1 is None or user2 is None:
            return False
        return CHAT_PARTNERS.get(user1.role) == user2.role
