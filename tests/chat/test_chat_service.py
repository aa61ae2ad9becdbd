from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from kindergarten.chat.model import ChatMessage, Conversation
from kindergarten.chat.service import ChatService
from kindergarten.core.enums import Role
from kindergarten.core.exceptions import AuthorizationError, ValidationError
from kindergarten.users.model import User

NOW = datetime(2026, 3, 10, 9, 0, 0)


class FakeConversationsRepo:
    def __init__(self):
        self.conversations: dict[int, Conversation] = {}

    def get_by_id(self, conversation_id):
        return self.conversations.get(conversation_id)

    def get_by_participants(self, participant1_id, participant2_id):
        return next(
            (
                c
                for c in self.conversations.values()
                if (c.participant1_id, c.participant2_id) == (participant1_id, participant2_id)
            ),
            None,
        )

    def create(self, participant1_id, participant2_id):
        conversation_id = len(self.conversations) + 1
        self.conversations[conversation_id] = Conversation(
            id=conversation_id, participant1_id=participant1_id, participant2_id=participant2_id
        )
        return conversation_id

    def list_for_user(self, user_id):
        return [c for c in self.conversations.values() if c.involves(user_id)]

    def update_last_message(self, conversation_id, preview, at):
        self.conversations[conversation_id] = replace(
            self.conversations[conversation_id], last_message=preview, last_message_at=at
        )
        return True


class FakeMessagesRepo:
    def __init__(self):
        self.messages: list[ChatMessage] = []

    def create(
        self,
        *,
        conversation_id,
        sender_id,
        content,
        attachment,
        attachment_filename,
        attachment_mime_type,
        sent_at,
    ):
        message_id = len(self.messages) + 1
        self.messages.append(
            ChatMessage(
                id=message_id,
                conversation_id=conversation_id,
                sender_id=sender_id,
                content=content,
                attachment=attachment,
                attachment_filename=attachment_filename,
                attachment_mime_type=attachment_mime_type,
                sent_at=sent_at,
            )
        )
        return message_id

    def list_for_conversation(self, conversation_id):
        return [m for m in self.messages if m.conversation_id == conversation_id]

    def list_recent(self, conversation_id, limit):
        return list(reversed(self.list_for_conversation(conversation_id)))[:limit]

    def mark_read(self, conversation_id, reader_id):
        updated = 0
        for i, m in enumerate(self.messages):
            if m.conversation_id == conversation_id and m.sender_id != reader_id and not m.is_read:
                self.messages[i] = replace(m, is_read=True)
                updated += 1
        return updated

    def count_unread(self, conversation_id, reader_id):
        return sum(
            1
            for m in self.messages
            if m.conversation_id == conversation_id and m.sender_id != reader_id and not m.is_read
        )


class FakeUsersRepo:
    def __init__(self):
        self.users = {
            1: User(id=1, username="admin", password_hash="x", role=Role.PRINCIPAL, school_id=1),
            2: User(id=2, username="teacher1", password_hash="x", role=Role.TEACHER, school_id=1),
            3: User(id=3, username="parent1", password_hash="x", role=Role.PARENT, school_id=1),
            4: User(id=4, username="parent2", password_hash="x", role=Role.PARENT, school_id=1),
        }

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def list_by_role(self, role):
        return [u for u in self.users.values() if u.role == role]


class StepClock:
    def __init__(self):
        self.now = NOW

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def service():
    return ChatService(FakeConversationsRepo(), FakeMessagesRepo(), FakeUsersRepo(), clock=StepClock())


def test_conversation_pair_is_ordered_and_reused(service):
    first = service.get_or_create_conversation(3, 2)
    again = service.get_or_create_conversation(2, 3)

    assert (first.participant1_id, first.participant2_id) == (2, 3)
    assert again.id == first.id
    assert len(service.get_user_conversations(3)) == 1


def test_cannot_chat_with_self(service):
    with pytest.raises(ValidationError, match="chính mình"):
        service.get_or_create_conversation(2, 2)


def test_send_message_updates_preview(service):
    conversation = service.get_or_create_conversation(2, 3)

    service.send_message(conversation_id=conversation.id, sender_id=3, content="  Chào cô ")

    updated = service.get_conversation_by_id(conversation.id)
    assert updated.last_message == "Chào cô"
    assert updated.last_message_at is not None


def test_attachment_only_message_previews_filename(service):
    conversation = service.get_or_create_conversation(2, 3)

    service.send_message(
        conversation_id=conversation.id,
        sender_id=2,
        attachment=b"\xff\xd8",
        attachment_filename="be-an.jpg",
        attachment_mime_type="image/jpeg",
    )

    assert service.get_conversation_by_id(conversation.id).last_message == "📎 be-an.jpg"
    message = service.get_conversation_messages(conversation.id, 3)[0]
    assert message.has_attachment
    assert message.is_image


def test_empty_message_rejected(service):
    conversation = service.get_or_create_conversation(2, 3)

    with pytest.raises(ValidationError, match="nội dung hoặc tệp"):
        service.send_message(conversation_id=conversation.id, sender_id=2, content="   ")


def test_attachment_needs_filename(service):
    conversation = service.get_or_create_conversation(2, 3)

    with pytest.raises(ValidationError, match="tên tệp"):
        service.send_message(conversation_id=conversation.id, sender_id=2, attachment=b"x")


def test_outsider_cannot_read_or_send(service):
    conversation = service.get_or_create_conversation(2, 3)

    with pytest.raises(AuthorizationError):
        service.send_message(conversation_id=conversation.id, sender_id=4, content="hi")
    with pytest.raises(AuthorizationError):
        service.get_conversation_messages(conversation.id, 4)


def test_recent_messages_are_oldest_first(service):
    conversation = service.get_or_create_conversation(2, 3)
    for text in ("một", "hai", "ba"):
        service.send_message(conversation_id=conversation.id, sender_id=2, content=text)

    recent = service.get_recent_messages(conversation.id, 3, limit=2)

    assert [m.content for m in recent] == ["hai", "ba"]


def test_mark_read_and_unread_count(service):
    conversation = service.get_or_create_conversation(2, 3)
    service.send_message(conversation_id=conversation.id, sender_id=2, content="a")
    service.send_message(conversation_id=conversation.id, sender_id=2, content="b")

    assert service.get_unread_count(conversation.id, 3) == 2
    assert service.get_unread_count(conversation.id, 2) == 0
    assert service.mark_messages_as_read(conversation.id, 3) == 2
    assert service.get_unread_count(conversation.id, 3) == 0


def test_recipients_and_chat_pairs(service):
    assert [u.id for u in service.get_available_recipients(Role.TEACHER)] == [3, 4]
    assert [u.id for u in service.get_available_recipients(Role.PARENT)] == [2]
    assert service.get_available_recipients(Role.PRINCIPAL) == []

    assert service.can_users_chat(2, 3) is True
    assert service.can_users_chat(3, 4) is False
    assert service.can_users_chat(1, 3) is False
    assert service.can_users_chat(2, 99) is False
