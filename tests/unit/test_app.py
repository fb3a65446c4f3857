"""Unit tests for the FastAPI app factory and configuration."""

from fastapi import FastAPI

from api_chat_server import __version__, create_app
from api_chat_server.app import build_catalog
from api_chat_server.config import ApiChatServerSettings
from api_chat_server.orchestration import UnresolvedToolPolicy
from api_chat_server.tools import EvictionPolicy, HttpToolCatalog, InMemoryToolCatalog


def test_create_app_returns_fastapi_instance():
    """Test that create_app returns a FastAPI instance."""
    app = create_app()
    assert isinstance(app, FastAPI)


def test_create_app_with_settings(test_settings):
    """Test that create_app accepts custom settings."""
    app = create_app(settings=test_settings)
    assert isinstance(app, FastAPI)
    assert app.state.settings is test_settings


def test_create_app_metadata():
    """Test that app has correct metadata."""
    app = create_app()
    assert app.title == "api-chat-server"
    assert app.version == "0.1.0"
    assert "Headless FastAPI server" in app.description


def test_create_app_includes_routers():
    """Test that all routers are registered."""
    app = create_app()

    routes = [route.path for route in app.routes]  # type: ignore[attr-defined]
    assert "/api/v1/health" in routes
    assert "/api/v1/conversations" in routes
    assert "/api/v1/chat/{conversation_id}" in routes
    assert "/api/v1/chat/{conversation_id}/stream" in routes


def test_create_app_has_cors_middleware(test_settings):
    """Test that CORS middleware is configured."""
    app = create_app(settings=test_settings)

    middleware_classes = [m.cls.__name__ for m in app.user_middleware]  # type: ignore[attr-defined]
    assert "CORSMiddleware" in middleware_classes


def test_version_constant():
    """Test that __version__ is defined and matches app version."""
    assert __version__ == "0.1.0"


def test_settings_default_values():
    """Test that settings have correct default values."""
    settings = ApiChatServerSettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.ollama_host == "http://localhost:11434"
    assert settings.max_dynamic_tools == 3
    assert settings.eviction_policy is EvictionPolicy.RECENT
    assert settings.unresolved_tool_policy is UnresolvedToolPolicy.INJECT_ERROR
    assert settings.catalog_url is None


def test_settings_from_environment(monkeypatch):
    """Test that APICHAT_ environment variables override defaults."""
    monkeypatch.setenv("APICHAT_MODEL", "qwen2.5:14b")
    monkeypatch.setenv("APICHAT_EVICTION_POLICY", "legacy")
    monkeypatch.setenv("APICHAT_MAX_DYNAMIC_TOOLS", "5")

    settings = ApiChatServerSettings()

    assert settings.model == "qwen2.5:14b"
    assert settings.eviction_policy is EvictionPolicy.LEGACY
    assert settings.max_dynamic_tools == 5


def test_build_catalog_prefers_url(test_settings):
    """Test that a catalog URL selects the remote catalog."""
    settings = test_settings.model_copy(update={"catalog_url": "http://catalog.test"})

    catalog = build_catalog(settings)

    assert isinstance(catalog, HttpToolCatalog)


def test_build_catalog_without_file_is_empty(test_settings):
    """Test the fallback to an empty in-memory catalog."""
    catalog = build_catalog(test_settings)

    assert isinstance(catalog, InMemoryToolCatalog)
    assert catalog.definitions == []
