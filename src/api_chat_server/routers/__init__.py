"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
Each router module defines endpoints for a specific domain (health, conversations, chat).
"""

from api_chat_server.routers import chat, conversations, health

__all__ = [
    "chat",
    "conversations",
    "health",
]
