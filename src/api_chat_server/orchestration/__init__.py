"""Conversation turn orchestration.

This package contains the per-turn pipeline: system prompt composition,
conversation rewriting, completion invocation and tool-call dispatch.
"""

from api_chat_server.orchestration.completion import (
    CompletionInvoker,
    CompletionResult,
    PlainCompletion,
    ToolCallCompletion,
)
from api_chat_server.orchestration.dispatcher import ToolDispatcher, UnresolvedToolPolicy
from api_chat_server.orchestration.errors import (
    MalformedArgumentsError,
    NoResponseError,
    OrchestrationError,
    UnresolvedToolError,
)
from api_chat_server.orchestration.orchestrator import (
    Orchestrator,
    OrchestratorConfig,
    TurnResult,
)
from api_chat_server.orchestration.prompts import (
    compose_system_prompt,
    make_base_system_prompt,
)
from api_chat_server.orchestration.rewriter import rewrite_conversation

__all__ = [
    # Turn pipeline
    "Orchestrator",
    "OrchestratorConfig",
    "TurnResult",
    "CompletionInvoker",
    "CompletionResult",
    "PlainCompletion",
    "ToolCallCompletion",
    "ToolDispatcher",
    "UnresolvedToolPolicy",
    "compose_system_prompt",
    "make_base_system_prompt",
    "rewrite_conversation",
    # Errors
    "OrchestrationError",
    "NoResponseError",
    "MalformedArgumentsError",
    "UnresolvedToolError",
]
