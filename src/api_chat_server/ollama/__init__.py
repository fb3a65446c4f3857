"""Ollama client wrapper used as the completion service.

This package provides the async client wrapper for communicating with the
Ollama chat API, including tool (function) calling.
"""

from api_chat_server.ollama.client import OllamaClient

__all__ = ["OllamaClient"]
