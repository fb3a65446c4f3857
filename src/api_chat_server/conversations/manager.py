"""ConversationManager for in-memory conversation storage.

This module provides the ConversationManager class which handles:
- Creating conversations with an optional static request context
- Listing, retrieving and deleting conversations
- Appending and rating messages
- Serializing turns per conversation

Conversations live in process memory only and are lost on restart.
Message lists are never modified in place: every change stores a new list.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Sequence

from api_chat_server.conversations.types import (
    AssistantMessage,
    Conversation,
    Message,
    new_message_id,
    utc_timestamp,
)
from api_chat_server.tools.types import HttpRequestArgs

logger = logging.getLogger(__name__)


class ConversationManager:
    """Manages conversations held in memory.

    Each conversation has its own asyncio.Lock; callers hold it for the
    duration of a turn so that only one turn at a time updates a
    conversation's messages.
    """

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def create_conversation(
        self, static_request_args: HttpRequestArgs | None = None
    ) -> Conversation:
        """Create a new, empty conversation.

        Args:
            static_request_args: Request context constant for the conversation

        Returns:
            The newly created Conversation
        """
        conversation_id = new_message_id()
        conversation = Conversation(
            conversation_id=conversation_id,
            static_request_args=static_request_args,
        )
        self._conversations[conversation_id] = conversation
        self._locks[conversation_id] = asyncio.Lock()

        logger.info(f"Created conversation {conversation_id}")
        return conversation

    def list_conversations(self) -> list[Conversation]:
        """List all conversations, newest update first."""
        conversations = sorted(
            self._conversations.values(),
            key=lambda c: c.updated_at,
            reverse=True,
        )
        logger.debug(f"Listed {len(conversations)} conversations")
        return conversations

    def get_conversation(self, conversation_id: str) -> Conversation:
        """Get a conversation by ID.

        Raises:
            KeyError: If the conversation doesn't exist
        """
        try:
            return self._conversations[conversation_id]
        except KeyError:
            raise KeyError(f"Conversation {conversation_id} not found") from None

    def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation.

        Raises:
            KeyError: If the conversation doesn't exist
        """
        self.get_conversation(conversation_id)
        del self._conversations[conversation_id]
        self._locks.pop(conversation_id, None)
        logger.info(f"Deleted conversation {conversation_id}")

    def lock(self, conversation_id: str) -> asyncio.Lock:
        """Get the turn lock of a conversation.

        Raises:
            KeyError: If the conversation doesn't exist
        """
        self.get_conversation(conversation_id)
        return self._locks.setdefault(conversation_id, asyncio.Lock())

    def replace_messages(
        self, conversation_id: str, messages: Sequence[Message]
    ) -> Conversation:
        """Store a new message list for a conversation.

        Raises:
            KeyError: If the conversation doesn't exist
        """
        conversation = self.get_conversation(conversation_id)
        conversation.messages = list(messages)
        conversation.updated_at = utc_timestamp()
        logger.debug(
            f"Conversation {conversation_id} now has {len(conversation.messages)} messages"
        )
        return conversation

    def add_message(self, conversation_id: str, message: Message) -> Conversation:
        """Append a message to a conversation.

        Raises:
            KeyError: If the conversation doesn't exist
        """
        conversation = self.get_conversation(conversation_id)
        return self.replace_messages(conversation_id, [*conversation.messages, message])

    def rate_message(
        self, conversation_id: str, message_id: str, rating: bool
    ) -> AssistantMessage:
        """Rate an assistant message.

        Args:
            conversation_id: The conversation ID
            message_id: The message to rate
            rating: True for a positive rating, False for a negative one

        Returns:
            The rated message

        Raises:
            KeyError: If the conversation or message doesn't exist
            ValueError: If the message is not an assistant message
        """
        conversation = self.get_conversation(conversation_id)

        for index, message in enumerate(conversation.messages):
            if message.message_id != message_id:
                continue
            if not isinstance(message, AssistantMessage):
                raise ValueError("Can only rate assistant messages")

            rated = replace(message, rating=rating)
            messages = list(conversation.messages)
            messages[index] = rated
            self.replace_messages(conversation_id, messages)
            logger.info(f"Rated message {message_id} in conversation {conversation_id}")
            return rated

        raise KeyError(f"Message {message_id} not found in conversation {conversation_id}")
