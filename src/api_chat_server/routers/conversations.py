"""Conversations router for conversation CRUD operations.

This module provides REST API endpoints for:
- Creating new conversations
- Listing and retrieving conversations
- Deleting conversations
- Appending user messages
- Rating assistant messages
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api_chat_server.conversations import ConversationManager, UserMessage
from api_chat_server.dependencies import get_conversation_manager
from api_chat_server.models.conversations import (
    AddMessageRequest,
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationResponse,
    CreateConversationRequest,
    MessageResponse,
    RateMessageRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


def _not_found(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": {
                "code": "not_found",
                "message": detail,
                "details": {},
            }
        },
    )


@router.post(
    "",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new conversation",
)
async def create_conversation(
    request: CreateConversationRequest,
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
) -> ConversationResponse:
    """Create a new, empty conversation.

    Args:
        request: Creation parameters (optional static request context)
        manager: Injected ConversationManager

    Returns:
        Created conversation metadata
    """
    conversation = manager.create_conversation(request.static_request_args)
    return ConversationResponse.from_conversation(conversation)


@router.get(
    "",
    response_model=ConversationListResponse,
    summary="List all conversations",
)
async def list_conversations(
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
) -> ConversationListResponse:
    """List all conversations, most recently updated first."""
    return ConversationListResponse(
        conversations=[
            ConversationResponse.from_conversation(c)
            for c in manager.list_conversations()
        ]
    )


@router.get(
    "/{conversation_id}",
    response_model=ConversationDetailResponse,
    summary="Get a conversation with its messages",
)
async def get_conversation(
    conversation_id: str,
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
) -> ConversationDetailResponse:
    """Get a conversation and all of its messages.

    Raises:
        HTTPException: 404 if the conversation doesn't exist
    """
    try:
        conversation = manager.get_conversation(conversation_id)
    except KeyError:
        raise _not_found(f"Conversation {conversation_id} not found")
    return ConversationDetailResponse.from_conversation(conversation)


@router.delete(
    "/{conversation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a conversation",
)
async def delete_conversation(
    conversation_id: str,
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
) -> Response:
    """Delete a conversation.

    Raises:
        HTTPException: 404 if the conversation doesn't exist
    """
    try:
        manager.delete_conversation(conversation_id)
    except KeyError:
        raise _not_found(f"Conversation {conversation_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Append a user message",
)
async def add_message(
    conversation_id: str,
    request: AddMessageRequest,
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
) -> MessageResponse:
    """Append a user message without running a turn.

    Raises:
        HTTPException: 404 if the conversation doesn't exist
    """
    message = UserMessage(content=request.content)
    try:
        async with manager.lock(conversation_id):
            manager.add_message(conversation_id, message)
    except KeyError:
        raise _not_found(f"Conversation {conversation_id} not found")

    logger.info(f"Added user message to conversation {conversation_id}")
    return MessageResponse.from_message(message)


@router.post(
    "/{conversation_id}/messages/{message_id}/rating",
    response_model=MessageResponse,
    summary="Rate an assistant message",
)
async def rate_message(
    conversation_id: str,
    message_id: str,
    request: RateMessageRequest,
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
) -> MessageResponse:
    """Rate an assistant message.

    Raises:
        HTTPException: 404 if the conversation or message doesn't exist
        HTTPException: 400 if the message is not an assistant message
    """
    try:
        async with manager.lock(conversation_id):
            rated = manager.rate_message(conversation_id, message_id, request.rating)
    except KeyError as e:
        raise _not_found(str(e.args[0]) if e.args else "Not found")
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": {
                    "code": "invalid_rating_target",
                    "message": str(e),
                    "details": {"message_id": message_id},
                }
            },
        )
    return MessageResponse.from_message(rated)
