"""Health check endpoint router.

Reports the server version together with the services a turn depends on:
the completion service, the tool catalog and the downstream API.
"""

import logging

from fastapi import APIRouter, Request

from api_chat_server import __version__
from api_chat_server.config import ApiChatServerSettings
from api_chat_server.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


async def _completion_service_status(request: Request) -> tuple[bool | None, str | None]:
    """Probe the completion service, if its client has been started."""
    ollama_client = getattr(request.app.state, "ollama_client", None)
    if ollama_client is None:
        return None, None

    try:
        connected = await ollama_client.check_connection()
    except Exception as e:
        logger.warning(f"Ollama connectivity check failed: {e}")
        connected = False
    return connected, ollama_client.host


def _catalog_source(settings: ApiChatServerSettings) -> str:
    if settings.catalog_url:
        return settings.catalog_url
    catalog_file = settings.resolved_catalog_file
    return str(catalog_file) if catalog_file.exists() else "empty"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    The server is reported healthy even when the completion service is down;
    `ollama_connected` tells the two apart.
    """
    settings: ApiChatServerSettings = request.app.state.settings
    ollama_connected, ollama_host = await _completion_service_status(request)

    return HealthResponse(
        status="ok",
        version=__version__,
        ollama_connected=ollama_connected,
        ollama_host=ollama_host,
        model=settings.model,
        catalog=_catalog_source(settings),
        api_base_url=settings.api_base_url,
    )
