"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings and services.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from api_chat_server.config import ApiChatServerSettings
from api_chat_server.conversations import ConversationManager
from api_chat_server.orchestration import Orchestrator


@lru_cache
def get_settings() -> ApiChatServerSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the APICHAT_ prefix.

    Returns:
        ApiChatServerSettings: The application configuration settings.
    """
    return ApiChatServerSettings()


def get_conversation_manager(request: Request) -> ConversationManager:
    """Get the in-memory ConversationManager from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        ConversationManager: The application's conversation manager.
    """
    return request.app.state.conversation_manager


def get_orchestrator(request: Request) -> Orchestrator:
    """Get the Orchestrator created during application startup.

    Args:
        request: The FastAPI request object.

    Returns:
        Orchestrator: The turn orchestrator.

    Raises:
        HTTPException: If the orchestrator is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "orchestrator"):
        raise HTTPException(
            status_code=503,
            detail="Orchestrator not initialized",
        )
    return request.app.state.orchestrator
