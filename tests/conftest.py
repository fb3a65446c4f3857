"""Pytest configuration and shared fixtures for api-chat-server tests.

This module provides common fixtures used across all test modules,
including test app creation and async client setup.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api_chat_server import create_app
from api_chat_server.config import ApiChatServerSettings


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with an isolated data directory.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        ApiChatServerSettings: Settings instance configured for testing.
    """
    return ApiChatServerSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        model="llama3.2:latest",
        system_prompt_personality="You are helpful.",
        api_base_url="http://api.test",
        data_dir=str(tmp_path),
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
