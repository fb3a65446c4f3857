"""Conversation rewriting for the next completion call."""

from typing import Sequence

from api_chat_server.conversations.types import (
    Message,
    SystemMessage,
    UserMessage,
)


def rewrite_conversation(
    prior_messages: Sequence[Message],
    system_prompt: str,
    query: str | None = None,
) -> list[Message]:
    """Rebuild the message sequence around a fresh system prompt.

    Any previous system message is dropped; all other messages keep their
    relative order. The input sequence is never modified.

    Args:
        prior_messages: Conversation so far
        system_prompt: System prompt for this turn
        query: Optional new user message to append

    Returns:
        list[Message]: A new list starting with the system message
    """
    messages: list[Message] = [SystemMessage(content=system_prompt)]
    messages.extend(m for m in prior_messages if m.role != "system")
    if query:
        messages.append(UserMessage(content=query))
    return messages
