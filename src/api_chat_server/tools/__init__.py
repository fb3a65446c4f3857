"""Tool definitions, catalog resolution, windowing and HTTP execution.

This package provides the tool types exposed to the model, the catalog
resolvers behind the reserved search tool, the active tool window and the
executor for HTTP-backed dynamic tools.
"""

from api_chat_server.tools.catalog import (
    FIND_API_SPEC_ACTION,
    HttpToolCatalog,
    InMemoryToolCatalog,
    ToolCatalogResolver,
)
from api_chat_server.tools.http_executor import HttpToolExecutor
from api_chat_server.tools.types import (
    HttpApiCredentials,
    HttpRequestArgs,
    StaticRequestContext,
    Tool,
    ToolCallArgs,
    ToolCallRequest,
    ToolDefinition,
)
from api_chat_server.tools.window import EvictionPolicy, compute_active_tools

__all__ = [
    "FIND_API_SPEC_ACTION",
    "EvictionPolicy",
    "HttpApiCredentials",
    "HttpRequestArgs",
    "HttpToolCatalog",
    "HttpToolExecutor",
    "InMemoryToolCatalog",
    "StaticRequestContext",
    "Tool",
    "ToolCallArgs",
    "ToolCallRequest",
    "ToolCatalogResolver",
    "ToolDefinition",
    "compute_active_tools",
]
