"""Chat API endpoints.

This module provides endpoints that run one conversation turn, either
returning the complete result or streaming it via SSE.
"""

import logging
from typing import Any

import httpx
import ollama
from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from api_chat_server.conversations import Conversation, ConversationManager
from api_chat_server.dependencies import get_conversation_manager, get_orchestrator
from api_chat_server.models.chat import (
    ChatRequest,
    ChatResponse,
    DoneEvent,
    ErrorEvent,
    MessageEvent,
    ToolCallInfo,
)
from api_chat_server.models.conversations import MessageResponse
from api_chat_server.orchestration import (
    MalformedArgumentsError,
    NoResponseError,
    Orchestrator,
    TurnResult,
    UnresolvedToolError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


def _error_detail(code: str, message: str, details: dict[str, Any] | None = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def _classify_error(exc: Exception) -> tuple[int, str]:
    """Map a turn failure to an HTTP status code and error code."""
    if isinstance(exc, MalformedArgumentsError):
        return 400, "malformed_arguments"
    if isinstance(exc, UnresolvedToolError):
        return 409, "unresolved_tool"
    if isinstance(exc, NoResponseError):
        return 502, "no_response"
    if isinstance(exc, ollama.ResponseError):
        return 502, "ollama_error"
    if isinstance(exc, httpx.HTTPError):
        return 502, "tool_api_error"
    if isinstance(exc, ValueError):
        return 400, "invalid_tool_request"
    return 502, "turn_failed"


def _load_conversation(manager: ConversationManager, conversation_id: str) -> Conversation:
    try:
        return manager.get_conversation(conversation_id)
    except KeyError:
        raise HTTPException(
            status_code=404,
            detail=_error_detail(
                "conversation_not_found",
                f"Conversation {conversation_id} not found",
                {"conversation_id": conversation_id},
            ),
        )


def _check_not_empty(conversation: Conversation, request_body: ChatRequest) -> None:
    if not conversation.messages and not request_body.message:
        raise HTTPException(
            status_code=400,
            detail=_error_detail(
                "empty_history", "Conversation has no messages to process"
            ),
        )


async def _run_turn(
    manager: ConversationManager,
    orchestrator: Orchestrator,
    conversation: Conversation,
    request_body: ChatRequest,
) -> TurnResult:
    """Run one turn and store the resulting messages.

    The conversation's lock is held for the whole turn. Nothing is stored
    when the turn fails.
    """
    credentials = (
        request_body.credentials.to_credentials() if request_body.credentials else None
    )
    async with manager.lock(conversation.conversation_id):
        result = await orchestrator.run_turn(
            conversation.messages,
            query=request_body.message,
            static_context=conversation.static_request_args,
            credentials=credentials,
        )
        manager.replace_messages(conversation.conversation_id, result.messages)
    return result


def _tool_call_info(result: TurnResult) -> ToolCallInfo | None:
    if result.tool_call is None:
        return None
    return ToolCallInfo(name=result.tool_call.name, arguments=result.tool_call.arguments)


@router.post("/{conversation_id}", response_model=ChatResponse)
async def chat_non_streaming(
    conversation_id: str,
    request_body: ChatRequest,
    manager: ConversationManager = Depends(get_conversation_manager),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """Run one conversation turn and return its result.

    Args:
        conversation_id: The conversation to continue
        request_body: Chat request containing the message and credentials
        manager: Injected ConversationManager
        orchestrator: Injected Orchestrator

    Returns:
        ChatResponse with the messages added by the turn

    Raises:
        HTTPException: 404 if conversation not found, 400 on malformed tool
                       arguments, 409 on unresolved tools, 502 on upstream failures
    """
    conversation = _load_conversation(manager, conversation_id)
    _check_not_empty(conversation, request_body)

    logger.info(f"Running turn for conversation {conversation_id}")
    try:
        result = await _run_turn(manager, orchestrator, conversation, request_body)
    except Exception as e:
        status_code, code = _classify_error(e)
        logger.error(f"Turn failed for conversation {conversation_id}: {e}")
        raise HTTPException(
            status_code=status_code,
            detail=_error_detail(code, str(e), {"conversation_id": conversation_id}),
        )

    return ChatResponse(
        conversation_id=conversation_id,
        messages=[MessageResponse.from_message(m) for m in result.new_messages],
        active_tools=[d.name for d in result.active_tools],
        tool_call=_tool_call_info(result),
    )


@router.post("/{conversation_id}/stream")
async def chat_streaming(
    conversation_id: str,
    request_body: ChatRequest,
    request: Request,
    manager: ConversationManager = Depends(get_conversation_manager),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> EventSourceResponse:
    """Run one conversation turn and stream its messages via SSE.

    SSE Events:
        - message: Each message added by the turn, in order
        - error: If the turn fails
        - done: The turn is complete

    Raises:
        HTTPException: 404 if conversation not found
    """
    conversation = _load_conversation(manager, conversation_id)
    _check_not_empty(conversation, request_body)

    logger.info(f"Starting streamed turn for conversation {conversation_id}")

    async def event_generator():
        """Generate SSE events for the turn."""
        try:
            result = await _run_turn(manager, orchestrator, conversation, request_body)
        except Exception as e:
            _, code = _classify_error(e)
            logger.error(f"Turn failed for conversation {conversation_id}: {e}")
            error_event = ErrorEvent(
                code=code,
                message=str(e),
                details={"conversation_id": conversation_id},
            )
            yield {"event": "error", "data": error_event.model_dump_json()}
            return

        for message in result.new_messages:
            if await request.is_disconnected():
                logger.warning(
                    f"Client disconnected during streaming for conversation {conversation_id}"
                )
                return
            event = MessageEvent(message=MessageResponse.from_message(message))
            yield {"event": "message", "data": event.model_dump_json()}

        done_event = DoneEvent(
            conversation_id=conversation_id,
            active_tools=[d.name for d in result.active_tools],
            tool_call=_tool_call_info(result),
        )
        yield {"event": "done", "data": done_event.model_dump_json()}

    return EventSourceResponse(event_generator())
