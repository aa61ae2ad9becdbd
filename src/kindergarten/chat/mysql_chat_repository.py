from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_bytes
from .model import ChatMessage, Conversation
from .repository import ChatMessageRepository, ConversationRepository


def _display_name(alias: str) -> str:
    # Parents are shown by their profile name when they have one.
    return f"""
        CASE WHEN {alias}.role = 'PARENT'
             THEN COALESCE((SELECT p.name FROM parents p WHERE p.user_id = {alias}.id LIMIT 1), {alias}.username)
             ELSE {alias}.username
        END
    """


_CONVERSATION_SELECT = f"""
    SELECT c.id, c.participant1_id, c.participant2_id, c.last_message, c.last_message_at, c.is_active,
           {_display_name("u1")} AS participant1_name, u1.role AS participant1_role,
           {_display_name("u2")} AS participant2_name, u2.role AS participant2_role
    FROM conversations c
    JOIN users u1 ON u1.id = c.participant1_id
    JOIN users u2 ON u2.id = c.participant2_id
"""

_MESSAGE_SELECT = f"""
    SELECT m.id, m.conversation_id, m.sender_id, m.content, m.attachment, m.attachment_filename,
           m.attachment_mime_type, m.is_read, m.sent_at, m.read_at,
           {_display_name("u")} AS sender_name, u.role AS sender_role
    FROM chat_messages m
    JOIN users u ON u.id = m.sender_id
"""


def _to_conversation(row: Dict[str, Any]) -> Conversation:
    return Conversation(
        id=int(row["id"]),
        participant1_id=int(row["participant1_id"]),
        participant2_id=int(row["participant2_id"]),
        last_message=row.get("last_message"),
        last_message_at=row.get("last_message_at"),
        is_active=bool(row.get("is_active", True)),
        participant1_name=row.get("participant1_name"),
        participant1_role=Role(row["participant1_role"]) if row.get("participant1_role") else None,
        participant2_name=row.get("participant2_name"),
        participant2_role=Role(row["participant2_role"]) if row.get("participant2_role") else None,
        unread_count=int(row.get("unread_count") or 0),
    )


def _to_message(row: Dict[str, Any]) -> ChatMessage:
    return ChatMessage(
        id=int(row["id"]),
        conversation_id=int(row["conversation_id"]),
        sender_id=int(row["sender_id"]),
        content=row.get("content"),
        attachment=optional_bytes(row.get("attachment")),
        attachment_filename=row.get("attachment_filename"),
        attachment_mime_type=row.get("attachment_mime_type"),
        is_read=bool(row.get("is_read")),
        sent_at=row.get("sent_at"),
        read_at=row.get("read_at"),
        sender_name=row.get("sender_name"),
        sender_role=Role(row["sender_role"]) if row.get("sender_role") else None,
    )


class MySQLConversationRepository(ConversationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, conversation_id: int) -> Optional[Conversation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_CONVERSATION_SELECT + " WHERE c.id=%s", (conversation_id,))
            row = fetchone(cur)
            return _to_conversation(row) if row else None

    def get_by_participants(self, participant1_id: int, participant2_id: int) -> Optional[Conversation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _CONVERSATION_SELECT + " WHERE c.participant1_id=%s AND c.participant2_id=%s",
                (participant1_id, participant2_id),
            )
            row = fetchone(cur)
            return _to_conversation(row) if row else None

    def create(self, participant1_id: int, participant2_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO conversations(participant1_id, participant2_id, is_active) VALUES(%s,%s,1)",
                (participant1_id, participant2_id),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int) -> Sequence[Conversation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT conv.*,
                       (SELECT COUNT(*) FROM chat_messages m
                        WHERE m.conversation_id = conv.id AND m.sender_id <> %s AND m.is_read = 0) AS unread_count
                FROM ({_CONVERSATION_SELECT}
                      WHERE (c.participant1_id=%s OR c.participant2_id=%s) AND c.is_active = 1) conv
                ORDER BY conv.last_message_at IS NULL, conv.last_message_at DESC
                """,
                (user_id, user_id, user_id),
            )
            return [_to_conversation(r) for r in fetchall(cur)]

    def update_last_message(self, conversation_id: int, preview: str, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE conversations SET last_message=%s, last_message_at=%s WHERE id=%s",
                (preview, at, conversation_id),
            )
            return cur.rowcount > 0


class MySQLChatMessageRepository(ChatMessageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO chat_messages(conversation_id, sender_id, content, attachment,
                                          attachment_filename, attachment_mime_type, sent_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (conversation_id, sender_id, content, attachment, attachment_filename, attachment_mime_type, sent_at),
            )
            return int(cur.lastrowid)

    def list_for_conversation(self, conversation_id: int) -> Sequence[ChatMessage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _MESSAGE_SELECT + " WHERE m.conversation_id=%s ORDER BY m.sent_at ASC, m.id ASC",
                (conversation_id,),
            )
            return [_to_message(r) for r in fetchall(cur)]

    def list_recent(self, conversation_id: int, limit: int) -> Sequence[ChatMessage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _MESSAGE_SELECT + " WHERE m.conversation_id=%s ORDER BY m.sent_at DESC, m.id DESC LIMIT %s",
                (conversation_id, int(limit)),
            )
            return [_to_message(r) for r in fetchall(cur)]

    def mark_read(self, conversation_id: int, reader_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE chat_messages
                SET is_read = 1, read_at = CURRENT_TIMESTAMP
                WHERE conversation_id=%s AND sender_id <> %s AND is_read = 0
                """,
                (conversation_id, reader_id),
            )
            return int(cur.rowcount)

    def count_unread(self, conversation_id: int, reader_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n FROM chat_messages
                WHERE conversation_id=%s AND sender_id <> %s AND is_read = 0
                """,
                (conversation_id, reader_id),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
