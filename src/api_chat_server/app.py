"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api_chat_server.config import ApiChatServerSettings
from api_chat_server.conversations import ConversationManager
from api_chat_server.ollama import OllamaClient
from api_chat_server.orchestration import (
    CompletionInvoker,
    Orchestrator,
    OrchestratorConfig,
    make_base_system_prompt,
)
from api_chat_server.routers import chat, conversations, health
from api_chat_server.tools import (
    HttpToolCatalog,
    HttpToolExecutor,
    InMemoryToolCatalog,
    ToolCatalogResolver,
)

logger = logging.getLogger(__name__)


def build_catalog(settings: ApiChatServerSettings) -> ToolCatalogResolver:
    """Create the tool catalog resolver described by the settings.

    A remote catalog URL takes precedence over the local catalog file. With
    neither available the catalog is empty and every search finds nothing.
    """
    if settings.catalog_url:
        return HttpToolCatalog(
            url=settings.catalog_url,
            timeout=settings.catalog_timeout,
            max_retries=settings.catalog_max_retries,
        )

    catalog_file = settings.resolved_catalog_file
    if catalog_file.exists():
        return InMemoryToolCatalog.from_file(catalog_file)

    logger.warning(
        f"No tool catalog configured and {catalog_file} does not exist - "
        "catalog searches will find nothing"
    )
    return InMemoryToolCatalog([])


def build_orchestrator(
    settings: ApiChatServerSettings,
    ollama_client: OllamaClient,
    catalog: ToolCatalogResolver,
    executor: HttpToolExecutor,
) -> Orchestrator:
    """Create the turn orchestrator from settings and clients."""
    config = OrchestratorConfig(
        system_prompt=make_base_system_prompt(settings.system_prompt_personality),
        max_dynamic_tools=settings.max_dynamic_tools,
        eviction_policy=settings.eviction_policy,
        unresolved_tool_policy=settings.unresolved_tool_policy,
    )
    completion = CompletionInvoker(client=ollama_client, model=settings.model)
    return Orchestrator(
        config=config,
        completion=completion,
        catalog=catalog,
        executor=executor,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    Expensive objects (the Ollama client, the HTTP clients of the catalog and
    the tool executor, and the orchestrator built on them) are created once
    at startup and stored in app.state for reuse across all requests.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: ApiChatServerSettings = app.state.settings
    app.state.ollama_client = OllamaClient(
        host=settings.ollama_host, timeout=settings.ollama_timeout
    )
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    # Check initial connectivity
    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    catalog = build_catalog(settings)
    executor = HttpToolExecutor(
        base_url=settings.api_base_url, timeout=settings.tool_timeout
    )
    app.state.orchestrator = build_orchestrator(
        settings, app.state.ollama_client, catalog, executor
    )

    yield

    # Shutdown: Clean up resources
    await executor.close()
    if isinstance(catalog, HttpToolCatalog):
        await catalog.close()
    await app.state.ollama_client.close()
    logger.info("Clients closed")


def create_app(settings: ApiChatServerSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional ApiChatServerSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from api_chat_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="api-chat-server",
        description="Headless FastAPI server for tool-calling conversations with HTTP APIs",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings
    app.state.conversation_manager = ConversationManager()

    # Configure CORS
    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(chat.router)

    return app
