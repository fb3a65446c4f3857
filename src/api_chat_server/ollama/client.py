"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient for
communicating with the Ollama API. The client is designed to be created once
at startup and reused across conversations.
"""

import logging
from typing import Any

import ollama

logger = logging.getLogger(__name__)


def _to_dict(response: Any) -> dict[str, Any]:
    if hasattr(response, "model_dump"):
        return response.model_dump()
    if isinstance(response, dict):
        return response
    # Fallback: convert to dict using vars()
    return vars(response)


class OllamaClient:
    """Async client for the Ollama chat API.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str, timeout: float | None = None) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
            timeout: Request timeout in seconds (None waits indefinitely)
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host, timeout=timeout)
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            # Try to list models as a connectivity check
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one non-streaming chat request.

        The model decides by itself whether to answer or to call one of the
        supplied tools.

        Args:
            model: The model name to use for the chat
            messages: Messages in Ollama format
            tools: Tool definitions in function format
            options: Optional model parameters (temperature, etc.)

        Returns:
            dict: The response. Contains "message" with role, content and,
                  when the model requested a tool, "tool_calls":
                  [{"function": {"name": ..., "arguments": {...}}}]

        Raises:
            Exception: If the Ollama API request fails
        """
        try:
            logger.debug(
                f"Sending chat request with model {model}: "
                f"{len(messages)} message(s), {len(tools or [])} tool(s)"
            )
            response = await self._client.chat(
                model=model,
                messages=messages,
                tools=tools or None,
                stream=False,
                options=options,
            )
            return _to_dict(response)

        except Exception as e:
            logger.error(f"Chat request failed: {e}")
            raise

    async def close(self) -> None:
        """Close the client and clean up resources.

        ollama.AsyncClient uses httpx internally which handles cleanup, so
        nothing has to be released here.
        """
        logger.debug("OllamaClient closed")
