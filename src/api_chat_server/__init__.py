"""api-chat-server: Headless FastAPI server for tool-calling conversations.

This package provides a REST API and SSE streaming interface for conversations
in which a language model discovers and calls HTTP API actions as tools.
"""

__version__ = "0.1.0"

from api_chat_server.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
