"""Pydantic models for conversation API requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from api_chat_server.conversations import Conversation, Message
from api_chat_server.tools import HttpRequestArgs


class CreateConversationRequest(BaseModel):
    """Request body for creating a new conversation."""

    static_request_args: HttpRequestArgs | None = Field(
        None,
        description=(
            "Optional request context (headers, body, path and query parameters) "
            "merged into every API call made during the conversation"
        ),
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "static_request_args": {
                        "pathParameters": {"groupId": "5f1a2b3c"},
                    }
                },
                {"static_request_args": None},
            ]
        }
    )


class AddMessageRequest(BaseModel):
    """Request body for appending a user message."""

    content: str = Field(..., min_length=1, description="The user message")


class RateMessageRequest(BaseModel):
    """Request body for rating an assistant message."""

    rating: bool = Field(..., description="True for thumbs up, False for thumbs down")


class MessageResponse(BaseModel):
    """A single message in a conversation."""

    role: str = Field(description="Message role (system, user, assistant, tool)")
    content: str = Field(description="Message content")
    message_id: str = Field(description="Unique message identifier")
    timestamp: str = Field(description="ISO 8601 timestamp")
    model: str | None = Field(default=None, description="Model that generated this message")
    tool_name: str | None = Field(default=None, description="Tool that produced this result")
    tool_calls: list[dict[str, Any]] | None = Field(
        default=None, description="Tool calls requested by the assistant"
    )
    active_tools: list[str] | None = Field(
        default=None, description="Names of the tools active when the message was produced"
    )
    rating: bool | None = Field(default=None, description="User rating, if any")

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        """Build the response schema for a message."""
        active_tools = getattr(message, "active_tools", None)
        return cls(
            role=message.role,
            content=message.content,
            message_id=message.message_id,
            timestamp=message.timestamp,
            model=getattr(message, "model", None),
            tool_name=getattr(message, "tool_name", None),
            tool_calls=getattr(message, "tool_calls", None),
            active_tools=(
                [definition.name for definition in active_tools]
                if active_tools is not None
                else None
            ),
            rating=getattr(message, "rating", None),
        )


class ConversationResponse(BaseModel):
    """Conversation metadata."""

    conversation_id: str = Field(description="Conversation identifier")
    created_at: str = Field(description="ISO 8601 creation timestamp")
    updated_at: str = Field(description="ISO 8601 timestamp of the last change")
    message_count: int = Field(description="Number of messages")
    static_request_args: HttpRequestArgs | None = Field(
        default=None, description="Static request context of the conversation"
    )

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationResponse":
        """Build the response schema for a conversation."""
        return cls(
            conversation_id=conversation.conversation_id,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
            message_count=len(conversation.messages),
            static_request_args=conversation.static_request_args,
        )


class ConversationDetailResponse(ConversationResponse):
    """Conversation metadata with its messages."""

    messages: list[MessageResponse] = Field(default_factory=list)

    @classmethod
    def from_conversation(
        cls, conversation: Conversation
    ) -> "ConversationDetailResponse":
        """Build the detailed response schema for a conversation."""
        return cls(
            conversation_id=conversation.conversation_id,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
            message_count=len(conversation.messages),
            static_request_args=conversation.static_request_args,
            messages=[MessageResponse.from_message(m) for m in conversation.messages],
        )


class ConversationListResponse(BaseModel):
    """List of conversations."""

    conversations: list[ConversationResponse] = Field(default_factory=list)
