"""CLI entry point for api-chat-server.

This module provides the command-line interface for starting the server.
It can be invoked as `api-chat-server` (via the script entry point) or
`python -m api_chat_server`.
"""

import argparse
import logging
import sys

import uvicorn

from api_chat_server import __version__, create_app
from api_chat_server.config import ApiChatServerSettings


def main() -> None:
    """Main entry point for the api-chat-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="api-chat-server",
        description="Headless FastAPI server for tool-calling conversations with HTTP APIs",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"api-chat-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via APICHAT_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via APICHAT_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via APICHAT_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model used for completions (can be set via APICHAT_MODEL)",
    )

    parser.add_argument(
        "--api-base-url",
        type=str,
        default=None,
        help="Base URL of the API called by tools (can be set via APICHAT_API_BASE_URL)",
    )

    parser.add_argument(
        "--catalog-url",
        type=str,
        default=None,
        help="Tool catalog search endpoint (can be set via APICHAT_CATALOG_URL)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for the local tool catalog (default: ., can be set via APICHAT_DATA_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via APICHAT_LOG_LEVEL)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    overrides = {
        "host": args.host,
        "port": args.port,
        "ollama_host": args.ollama_host,
        "model": args.model,
        "api_base_url": args.api_base_url,
        "catalog_url": args.catalog_url,
        "data_dir": args.data_dir,
        "log_level": args.log_level,
    }
    settings_kwargs = {key: value for key, value in overrides.items() if value is not None}

    settings = ApiChatServerSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Create the FastAPI app
    app = create_app(settings=settings)

    # Start uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
