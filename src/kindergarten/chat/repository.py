from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ChatMessage, Conversation


class ConversationRepository(Protocol):
    def get_by_id(self, conversation_id: int) -> Optional[Conversation]:
        raise NotImplementedError

    def get_by_participants(self, participant1_id: int, participant2_id: int) -> Optional[Conversation]:
        raise NotImplementedError

    def create(self, participant1_id: int, participant2_id: int) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Conversation]:
        """Most recent activity first, with unread counts for `user_id`."""

        raise NotImplementedError

    def update_last_message(self, conversation_id: int, preview: str, at: datetime) -> bool:
        raise NotImplementedError


class ChatMessageRepository(Protocol):
    def create(
        self,
        *,
        conversation_id: int,
        sender_id: int,
        content: Optional[str],
        attachment: Optional[bytes],
        attachment_filename: Optional[str],
        attachment_mime_type: Optional[str],
        sent_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_for_conversation(self, conversation_id: int) -> Sequence[ChatMessage]:
        """Oldest first."""

        raise NotImplementedError

    def list_recent(self, conversation_id: int, limit: int) -> Sequence[ChatMessage]:
        """Newest first."""

        raise NotImplementedError

    def mark_read(self, conversation_id: int, reader_id: int) -> int:
        raise NotImplementedError

    def count_unread(self, conversation_id: int, reader_id: int) -> int:
        raise NotImplementedError
