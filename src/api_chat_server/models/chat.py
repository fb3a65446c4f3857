"""Pydantic models for chat API requests and responses.

This module defines the request and response schemas for the turn endpoints,
including the SSE event payloads of the streaming variant.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from api_chat_server.models.conversations import MessageResponse
from api_chat_server.tools import HttpApiCredentials


class CredentialsRequest(BaseModel):
    """Credentials forwarded to the downstream API for this turn only."""

    scheme: Literal["bearer", "basic", "digest"] = Field(
        "bearer", description="Authentication scheme"
    )
    token: str | None = Field(None, description="Bearer token")
    username: str | None = Field(None, description="Username or public API key")
    password: str | None = Field(None, description="Password or private API key")

    def to_credentials(self) -> HttpApiCredentials:
        """Convert to the credentials passed through to dynamic tools."""
        return HttpApiCredentials(
            scheme=self.scheme,
            token=self.token,
            username=self.username,
            password=self.password,
        )


class ChatRequest(BaseModel):
    """Request body for chat endpoints.

    Used by both POST /api/v1/chat/{conversation_id} (non-streaming)
    and POST /api/v1/chat/{conversation_id}/stream (streaming).
    """

    message: str | None = Field(
        default=None,
        description=(
            "The user message to send. If null, runs another turn on the existing "
            "history (e.g. to let the model answer after a tool result)."
        ),
    )
    credentials: CredentialsRequest | None = Field(
        default=None,
        description="Credentials for API calls made by tools during this turn",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "List the clusters in my project", "credentials": None},
                {"message": None},
            ]
        }
    )


class ToolCallInfo(BaseModel):
    """The tool call executed during a turn."""

    name: str = Field(description="Tool name")
    arguments: Any = Field(default=None, description="Arguments supplied by the model")


class ChatResponse(BaseModel):
    """Response body for the non-streaming chat endpoint."""

    conversation_id: str = Field(description="Conversation identifier")
    messages: list[MessageResponse] = Field(
        default_factory=list, description="Messages added by this turn"
    )
    active_tools: list[str] = Field(
        default_factory=list, description="Names of the tools exposed this turn"
    )
    tool_call: ToolCallInfo | None = Field(
        default=None, description="Tool call executed this turn, if any"
    )


class MessageEvent(BaseModel):
    """SSE event emitted for each message added by the turn."""

    message: MessageResponse


class DoneEvent(BaseModel):
    """SSE event emitted when the turn is complete."""

    conversation_id: str
    active_tools: list[str] = Field(default_factory=list)
    tool_call: ToolCallInfo | None = None


class ErrorEvent(BaseModel):
    """SSE event emitted when the turn fails."""

    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
