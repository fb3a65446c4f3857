"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from api_chat_server.models.chat import (
    ChatRequest,
    ChatResponse,
    CredentialsRequest,
    DoneEvent,
    ErrorEvent,
    MessageEvent,
    ToolCallInfo,
)
from api_chat_server.models.conversations import (
    AddMessageRequest,
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationResponse,
    CreateConversationRequest,
    MessageResponse,
    RateMessageRequest,
)
from api_chat_server.models.health import HealthResponse

__all__ = [
    "AddMessageRequest",
    "ChatRequest",
    "ChatResponse",
    "ConversationDetailResponse",
    "ConversationListResponse",
    "ConversationResponse",
    "CreateConversationRequest",
    "CredentialsRequest",
    "DoneEvent",
    "ErrorEvent",
    "HealthResponse",
    "MessageEvent",
    "MessageResponse",
    "RateMessageRequest",
    "ToolCallInfo",
]
