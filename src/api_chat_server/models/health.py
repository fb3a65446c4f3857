"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of api-chat-server.
        ollama_connected: Whether the completion service is reachable.
        ollama_host: The completion service URL.
        model: The model used for completions.
        catalog: Where catalog searches go (URL, file path or "empty").
        api_base_url: Base URL of the API called by dynamic tools.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of api-chat-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    model: str | None = Field(default=None, description="Completion model")
    catalog: str | None = Field(default=None, description="Tool catalog source")
    api_base_url: str | None = Field(
        default=None, description="Downstream API base URL"
    )
