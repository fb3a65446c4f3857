"""Active tool window management.

Each turn, the tools visible to the model are recomputed from the snapshot
carried on the last message: base tools are merged with the dynamic tools
discovered so far, duplicates are dropped and the number of dynamic tools
is bounded.
"""

import logging
from enum import Enum
from typing import Sequence

from api_chat_server.tools.http_executor import HttpToolExecutor, make_dynamic_http_tool
from api_chat_server.tools.types import (
    HttpApiCredentials,
    HttpRequestArgs,
    Tool,
    ToolDefinition,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DYNAMIC_TOOLS = 3


class EvictionPolicy(str, Enum):
    """How dynamic tools are evicted once the window is full.

    RECENT keeps every base tool and the most recently added dynamic tools.
    LEGACY reproduces the counter-based filter of earlier releases, which
    keeps every dynamic tool and can drop base tools (including the catalog
    search tool) once the window overflows.
    """

    RECENT = "recent"
    LEGACY = "legacy"


def _dedupe(definitions: Sequence[ToolDefinition]) -> list[ToolDefinition]:
    seen: set[str] = set()
    unique: list[ToolDefinition] = []
    for definition in definitions:
        if definition.name in seen:
            continue
        seen.add(definition.name)
        unique.append(definition)
    return unique


def _evict_recent(
    merged: list[ToolDefinition], base_names: set[str], max_dynamic: int
) -> list[ToolDefinition]:
    dynamic = [d for d in merged if d.name not in base_names]
    if len(dynamic) <= max_dynamic:
        return merged

    newest = dynamic[len(dynamic) - max_dynamic :] if max_dynamic > 0 else []
    keep = {d.name for d in newest}
    evicted = [d.name for d in dynamic if d.name not in keep]
    logger.debug(f"Evicting dynamic tools: {', '.join(evicted)}")
    return [d for d in merged if d.name in base_names or d.name in keep]


def _evict_legacy(
    merged: list[ToolDefinition],
    carried_count: int,
    base_names: set[str],
    max_dynamic: int,
) -> list[ToolDefinition]:
    if carried_count <= max_dynamic:
        return merged

    kept: list[ToolDefinition] = []
    counter = 0
    for definition in reversed(merged):
        if counter <= max_dynamic or definition.name not in base_names:
            kept.append(definition)
        counter += 1
    kept.reverse()
    return kept


def compute_active_tools(
    last_active_tools: Sequence[ToolDefinition] | None,
    base_tools: Sequence[ToolDefinition],
    max_dynamic: int = DEFAULT_MAX_DYNAMIC_TOOLS,
    policy: EvictionPolicy = EvictionPolicy.RECENT,
) -> list[ToolDefinition]:
    """Compute the tool definitions visible to the model this turn.

    Base tools come first and win name collisions against carried tools.

    Args:
        last_active_tools: Snapshot carried on the previous message
        base_tools: Always-available tools
        max_dynamic: Maximum number of dynamic tools to keep
        policy: Eviction policy applied when the window overflows

    Returns:
        list[ToolDefinition]: Deduplicated, bounded active definitions
    """
    carried = list(last_active_tools or [])
    base_names = {d.name for d in base_tools}
    merged = _dedupe([*base_tools, *carried])

    if policy is EvictionPolicy.LEGACY:
        return _evict_legacy(merged, len(carried), base_names, max_dynamic)
    return _evict_recent(merged, base_names, max_dynamic)


def materialize_tools(
    definitions: Sequence[ToolDefinition],
    base_tools: Sequence[Tool],
    executor: HttpToolExecutor,
    static_args: HttpRequestArgs | None = None,
    credentials: HttpApiCredentials | None = None,
) -> list[Tool]:
    """Turn active definitions into callable tools.

    Definitions named like a base tool resolve to that base tool; every other
    definition becomes a dynamic HTTP tool bound to the executor, the static
    request context and the credentials.
    """
    base_by_name = {tool.name: tool for tool in base_tools}
    tools: list[Tool] = []
    for definition in definitions:
        base_tool = base_by_name.get(definition.name)
        if base_tool is not None:
            tools.append(base_tool)
        else:
            tools.append(
                make_dynamic_http_tool(definition, executor, static_args, credentials)
            )
    return tools
