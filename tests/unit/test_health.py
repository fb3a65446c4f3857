"""Unit tests for the health check endpoint."""

from unittest.mock import AsyncMock

import pytest


@pytest.mark.asyncio
async def test_health_check_returns_ok(async_client):
    """Test that health check returns status ok."""
    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"
    assert data["model"] == "llama3.2:latest"
    assert data["api_base_url"] == "http://api.test"


@pytest.mark.asyncio
async def test_health_check_with_ollama_connected(async_client, test_app):
    """Test health check when Ollama is connected."""
    mock_client = AsyncMock()
    mock_client.host = "http://localhost:11434"
    mock_client.check_connection.return_value = True
    test_app.state.ollama_client = mock_client

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["ollama_connected"] is True
    assert data["ollama_host"] == "http://localhost:11434"


@pytest.mark.asyncio
async def test_health_check_ollama_check_exception(async_client, test_app):
    """Test health check when Ollama connectivity check raises exception."""
    mock_client = AsyncMock()
    mock_client.host = "http://localhost:11434"
    mock_client.check_connection.side_effect = Exception("Connection error")
    test_app.state.ollama_client = mock_client

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"  # Server is still healthy
    assert data["ollama_connected"] is False


@pytest.mark.asyncio
async def test_health_check_no_ollama_client(async_client, test_app):
    """Test health check when Ollama client is not initialized."""
    real_client = test_app.state.ollama_client
    delattr(test_app.state, "ollama_client")

    response = await async_client.get("/api/v1/health")

    # Restore so the lifespan shutdown can close it
    test_app.state.ollama_client = real_client
    assert response.status_code == 200
    data = response.json()
    assert data["ollama_connected"] is None
    assert data["ollama_host"] is None


@pytest.mark.asyncio
async def test_health_check_reports_empty_catalog(async_client):
    """Test that a missing catalog file is reported as an empty catalog."""
    response = await async_client.get("/api/v1/health")

    assert response.json()["catalog"] == "empty"


@pytest.mark.asyncio
async def test_health_check_reports_catalog_file(async_client, test_settings):
    """Test that an existing catalog file is reported by path."""
    catalog_file = test_settings.resolved_catalog_file
    catalog_file.write_text("[]", encoding="utf-8")

    response = await async_client.get("/api/v1/health")

    assert response.json()["catalog"] == str(catalog_file)


@pytest.mark.asyncio
async def test_health_check_reports_catalog_url(async_client, test_app):
    """Test that a remote catalog is reported by URL."""
    test_app.state.settings = test_app.state.settings.model_copy(
        update={"catalog_url": "http://catalog.test/search"}
    )

    response = await async_client.get("/api/v1/health")

    assert response.json()["catalog"] == "http://catalog.test/search"
