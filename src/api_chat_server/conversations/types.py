"""Data types for conversations and their messages.

Assistant and tool messages carry `active_tools`, the snapshot of tool
definitions visible when the message was produced. The next turn recomputes
its tool window from this snapshot, so no external memory is needed.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from api_chat_server.tools.types import HttpRequestArgs, ToolDefinition


def utc_timestamp() -> str:
    """Current UTC time as an ISO 8601 string with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_message_id() -> str:
    """Generate a 10-character hexadecimal identifier."""
    return uuid.uuid4().hex[:10]


@dataclass
class UserMessage:
    """A message from the user."""

    role: str = "user"
    content: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'user'."""
        self.role = "user"


@dataclass
class SystemMessage:
    """The system instructions of a turn."""

    role: str = "system"
    content: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'system'."""
        self.role = "system"


@dataclass
class AssistantMessage:
    """A response from the model, either text or a tool-call request."""

    role: str = "assistant"
    content: str = ""
    model: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)
    eval_count: int | None = None
    prompt_eval_count: int | None = None
    tool_calls: list[dict[str, Any]] | None = None
    active_tools: tuple[ToolDefinition, ...] | None = None
    rating: bool | None = None

    def __post_init__(self) -> None:
        """Validate role is always 'assistant'."""
        self.role = "assistant"


@dataclass
class ToolMessage:
    """The result of a tool call."""

    role: str = "tool"
    tool_name: str = ""
    content: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)
    active_tools: tuple[ToolDefinition, ...] | None = None

    def __post_init__(self) -> None:
        """Validate role is always 'tool'."""
        self.role = "tool"


# Union type for all message types
Message = UserMessage | SystemMessage | AssistantMessage | ToolMessage


@dataclass
class Conversation:
    """A conversation held by the server.

    Attributes:
        conversation_id: Unique identifier (10-char hex)
        messages: Ordered message history; replaced as a whole after each turn
        static_request_args: Request context supplied once at creation
        created_at: Creation timestamp
        updated_at: Last modification timestamp
    """

    conversation_id: str
    messages: list[Message] = field(default_factory=list)
    static_request_args: HttpRequestArgs | None = None
    created_at: str = field(default_factory=utc_timestamp)
    updated_at: str = field(default_factory=utc_timestamp)
