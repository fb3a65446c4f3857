"""Configuration module for api-chat-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from api_chat_server.orchestration.dispatcher import UnresolvedToolPolicy
from api_chat_server.tools.window import DEFAULT_MAX_DYNAMIC_TOOLS, EvictionPolicy


class ApiChatServerSettings(BaseSettings):
    """Main configuration settings for api-chat-server.

    All settings can be overridden via environment variables with the APICHAT_ prefix.
    For example, APICHAT_OLLAMA_HOST will override the ollama_host setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Completion service (Ollama)
    ollama_host: str = "http://localhost:11434"
    ollama_timeout: float = 120.0
    model: str = "llama3.2:latest"

    # Orchestration
    system_prompt_personality: str = (
        "You are a friendly chatbot that can help users perform actions "
        "against an HTTP API."
    )
    max_dynamic_tools: int = DEFAULT_MAX_DYNAMIC_TOOLS
    eviction_policy: EvictionPolicy = EvictionPolicy.RECENT
    unresolved_tool_policy: UnresolvedToolPolicy = UnresolvedToolPolicy.INJECT_ERROR

    # Tool catalog: remote search endpoint, or a local YAML/JSON file
    catalog_url: str | None = None
    catalog_file: str = "tool_catalog.yaml"
    catalog_timeout: float = 10.0
    catalog_max_retries: int = 3

    # Downstream API called by dynamic tools
    api_base_url: str = "http://localhost:8080"
    tool_timeout: float = 30.0

    # Data directory (catalog_file is relative to it)
    data_dir: str = "."

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="APICHAT_")

    @property
    def resolved_catalog_file(self) -> Path:
        """Get the full path to the local tool catalog file."""
        return Path(self.data_dir) / self.catalog_file
