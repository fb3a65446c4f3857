"""Unit tests for ConversationManager."""

import pytest

from api_chat_server.conversations import (
    AssistantMessage,
    ConversationManager,
    UserMessage,
)
from api_chat_server.tools import HttpRequestArgs


@pytest.fixture
def manager():
    """Create an empty ConversationManager."""
    return ConversationManager()


def test_create_conversation(manager):
    """Test creating a conversation with a static request context."""
    context = HttpRequestArgs(path_parameters={"groupId": "g1"})

    conversation = manager.create_conversation(context)

    assert len(conversation.conversation_id) == 10
    assert conversation.messages == []
    assert conversation.static_request_args == context
    assert manager.get_conversation(conversation.conversation_id) is conversation


def test_get_missing_conversation(manager):
    """Test that unknown IDs raise KeyError."""
    with pytest.raises(KeyError):
        manager.get_conversation("nonexistent")


def test_list_conversations_newest_update_first(manager):
    """Test ordering by last update."""
    first = manager.create_conversation()
    second = manager.create_conversation()
    first.updated_at = "2024-01-01T00:00:00Z"
    second.updated_at = "2025-01-01T00:00:00Z"

    ids = [c.conversation_id for c in manager.list_conversations()]

    assert ids == [second.conversation_id, first.conversation_id]


def test_delete_conversation(manager):
    """Test deleting a conversation."""
    conversation = manager.create_conversation()

    manager.delete_conversation(conversation.conversation_id)

    assert manager.list_conversations() == []
    with pytest.raises(KeyError):
        manager.delete_conversation(conversation.conversation_id)


def test_add_message_stores_new_list(manager):
    """Test that appending replaces the message list instead of mutating it."""
    conversation = manager.create_conversation()
    before = conversation.messages

    manager.add_message(conversation.conversation_id, UserMessage(content="hi"))

    assert before == []
    assert [m.content for m in conversation.messages] == ["hi"]


def test_rate_assistant_message(manager):
    """Test rating an assistant message."""
    conversation = manager.create_conversation()
    assistant = AssistantMessage(content="Hello!")
    manager.replace_messages(
        conversation.conversation_id, [UserMessage(content="hi"), assistant]
    )

    rated = manager.rate_message(conversation.conversation_id, assistant.message_id, True)

    assert rated.rating is True
    assert rated.message_id == assistant.message_id
    assert conversation.messages[-1].rating is True
    assert assistant.rating is None


def test_rate_user_message_rejected(manager):
    """Test that only assistant messages can be rated."""
    conversation = manager.create_conversation()
    user = UserMessage(content="hi")
    manager.add_message(conversation.conversation_id, user)

    with pytest.raises(ValueError, match="assistant"):
        manager.rate_message(conversation.conversation_id, user.message_id, False)


def test_rate_missing_message(manager):
    """Test that an unknown message ID raises KeyError."""
    conversation = manager.create_conversation()

    with pytest.raises(KeyError):
        manager.rate_message(conversation.conversation_id, "nope", True)


@pytest.mark.asyncio
async def test_lock_is_per_conversation(manager):
    """Test that each conversation has its own reusable lock."""
    a = manager.create_conversation()
    b = manager.create_conversation()

    async with manager.lock(a.conversation_id):
        assert manager.lock(a.conversation_id).locked()
        assert not manager.lock(b.conversation_id).locked()

    with pytest.raises(KeyError):
        manager.lock("nonexistent")


def test_message_roles_are_pinned():
    """Test that message roles cannot be overridden."""
    assert UserMessage(role="assistant", content="x").role == "user"
    assert AssistantMessage(role="user", content="x").role == "assistant"
