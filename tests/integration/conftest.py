"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures: a mocked Ollama
client and a local tool catalog file, so that full turns can run through
the API without any external service.
"""

from unittest.mock import AsyncMock, patch

import pytest
import yaml


CATALOG = [
    {
        "definition": {
            "name": "getWeather",
            "description": "Get the weather forecast for a travel destination",
            "parameters": {
                "type": "object",
                "properties": {
                    "queryParameters": {
                        "type": "object",
                        "properties": {"city": {"type": "string"}},
                    }
                },
            },
        },
        "httpVerb": "get",
        "path": "/weather",
    },
    {
        "definition": {
            "name": "bookFlight",
            "description": "Book a flight for travel",
            "parameters": {"type": "object", "properties": {}},
        },
        "httpVerb": "post",
        "path": "/flights",
    },
]


@pytest.fixture(autouse=True)
def tool_catalog_file(test_settings):
    """Write the local tool catalog picked up by the app at startup."""
    path = test_settings.resolved_catalog_file
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(CATALOG, f)
    return path


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    """
    with patch("api_chat_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True
        mock_instance.chat.return_value = {
            "model": "llama3.2:latest",
            "message": {"role": "assistant", "content": "Hello!"},
            "eval_count": 5,
            "prompt_eval_count": 20,
        }

        # Return the mock instance when OllamaClient is instantiated
        mock_client_class.return_value = mock_instance

        yield mock_instance
