"""Conversation storage for api-chat-server.

This package provides the message types shared by the turn orchestrator and
the in-memory conversation manager used by the API.
"""

from api_chat_server.conversations.manager import ConversationManager
from api_chat_server.conversations.types import (
    AssistantMessage,
    Conversation,
    Message,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

__all__ = [
    # Core classes
    "ConversationManager",
    "Conversation",
    # Message types
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolMessage",
]
