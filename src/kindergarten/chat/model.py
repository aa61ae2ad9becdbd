from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Conversation:
    """Cuộc trò chuyện giữa hai người; participant1_id < participant2_id."""

    id: int
    participant1_id: int
    participant2_id: int
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    is_active: bool = True
    participant1_name: Optional[str] = None
    participant1_role: Optional[Role] = None
    participant2_name: Optional[str] = None
    participant2_role: Optional[Role] = None
    unread_count: int = 0

    def involves(self, user_id: int) -> bool:
        return user_id in (self.participant1_id, self.participant2_id)

    def other_participant_id(self, user_id: int) -> int:
        return self.participant2_id if user_id == self.participant1_id else self.participant1_id

    def other_participant_name(self, user_id: int) -> Optional[str]:
        return self.participant2_name if user_id == self.participant1_id else self.participant1_name


@dataclass(frozen=True)
class ChatMessage:
    id: int
    conversation_id: int
    sender_id: int
    content: Optional[str] = None
    attachment: Optional[bytes] = None
    attachment_filename: Optional[str] = None
    attachment_mime_type: Optional[str] = None
    is_read: bool = False
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    sender_name: Optional[str] = None
    sender_role: Optional[Role] = None

    @property
    def has_attachment(self) -> bool:
        return bool(self.attachment)

    @property
    def is_image(self) -> bool:
        return bool(self.attachment_mime_type and self.attachment_mime_type.startswith("image/"))
