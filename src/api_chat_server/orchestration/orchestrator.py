"""Turn orchestration.

The Orchestrator runs exactly one model turn:

1. compute the active tool window from the last message's snapshot
2. compose the system prompt for those tools
3. rewrite the conversation around the new system prompt (plus user query)
4. invoke the completion service
5. dispatch the requested tool call, or append the plain reply

It holds no per-conversation state, so one instance can serve many
conversations concurrently as long as each conversation runs one turn at
a time.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Sequence

from api_chat_server.conversations.types import Message
from api_chat_server.orchestration.completion import (
    CompletionInvoker,
    ToolCallCompletion,
)
from api_chat_server.orchestration.dispatcher import ToolDispatcher, UnresolvedToolPolicy
from api_chat_server.orchestration.prompts import compose_system_prompt
from api_chat_server.orchestration.rewriter import rewrite_conversation
from api_chat_server.tools.catalog import ToolCatalogResolver, make_find_api_spec_tool
from api_chat_server.tools.http_executor import HttpToolExecutor
from api_chat_server.tools.types import (
    HttpApiCredentials,
    StaticRequestContext,
    ToolCallRequest,
    ToolDefinition,
)
from api_chat_server.tools.window import (
    DEFAULT_MAX_DYNAMIC_TOOLS,
    EvictionPolicy,
    compute_active_tools,
    materialize_tools,
)

logger = logging.getLogger(__name__)


def last_tool_snapshot(
    messages: Sequence[Message],
) -> tuple[ToolDefinition, ...] | None:
    """Return the tool snapshot of the most recent message that carries one.

    User messages appended between turns carry no snapshot, so they must not
    reset the window to the base tools.
    """
    for message in reversed(messages):
        active_tools = getattr(message, "active_tools", None)
        if active_tools is not None:
            return active_tools
    return None


@dataclass(frozen=True)
class OrchestratorConfig:
    """Configuration of an Orchestrator.

    Attributes:
        system_prompt: Base system prompt, used verbatim as the start of
                       every turn's system message
        max_dynamic_tools: Maximum number of dynamic tools kept active
        eviction_policy: How dynamic tools are evicted
        unresolved_tool_policy: What to do with calls to inactive tools
    """

    system_prompt: str
    max_dynamic_tools: int = DEFAULT_MAX_DYNAMIC_TOOLS
    eviction_policy: EvictionPolicy = EvictionPolicy.RECENT
    unresolved_tool_policy: UnresolvedToolPolicy = UnresolvedToolPolicy.INJECT_ERROR


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one turn.

    Attributes:
        messages: Full conversation after the turn, system message first
        new_messages: Messages added by this turn (user query included)
        active_tools: Tool definitions that were exposed to the model
        tool_call: The tool call executed this turn, if any
    """

    messages: list[Message]
    new_messages: list[Message] = field(default_factory=list)
    active_tools: tuple[ToolDefinition, ...] = ()
    tool_call: ToolCallRequest | None = None


class Orchestrator:
    """Runs conversation turns against the completion service.

    Attributes:
        config: Orchestrator configuration
        completion: Completion service invoker
        executor: Executor for HTTP-backed dynamic tools
        base_tools: Always-available tools (the catalog-search tool)
        dispatcher: Tool-call dispatcher
    """

    def __init__(
        self,
        config: OrchestratorConfig,
        completion: CompletionInvoker,
        catalog: ToolCatalogResolver,
        executor: HttpToolExecutor,
    ) -> None:
        self.config = config
        self.completion = completion
        self.executor = executor
        self.base_tools = [make_find_api_spec_tool(catalog)]
        self.dispatcher = ToolDispatcher(config.unresolved_tool_policy)

        if config.eviction_policy is EvictionPolicy.LEGACY:
            logger.warning(
                "Legacy tool eviction is enabled: base tools, including the catalog "
                "search tool, can be dropped once the tool window overflows"
            )

    @property
    def base_definitions(self) -> list[ToolDefinition]:
        """Definitions of the always-available tools."""
        return [tool.definition for tool in self.base_tools]

    async def run_turn(
        self,
        messages: Sequence[Message],
        query: str | None = None,
        static_context: StaticRequestContext | None = None,
        credentials: HttpApiCredentials | None = None,
    ) -> TurnResult:
        """Run one model turn.

        Args:
            messages: Conversation so far; not modified
            query: Optional new user message
            static_context: Static request context of the conversation
            credentials: Credentials passed through to dynamic tools

        Returns:
            TurnResult: The updated conversation and turn details

        Raises:
            NoResponseError: If the completion service returned no message
            MalformedArgumentsError: If tool-call arguments can't be parsed
            UnresolvedToolError: If the model called an inactive tool and the
                                 policy is RAISE
        """
        definitions = compute_active_tools(
            last_tool_snapshot(messages),
            self.base_definitions,
            max_dynamic=self.config.max_dynamic_tools,
            policy=self.config.eviction_policy,
        )
        tools = materialize_tools(
            definitions, self.base_tools, self.executor, static_context, credentials
        )
        logger.debug(f"Active tools: {', '.join(d.name for d in definitions)}")

        system_prompt = compose_system_prompt(
            self.config.system_prompt, tools, static_context
        )
        conversation = rewrite_conversation(messages, system_prompt, query)
        # Everything after the system message and the prior history is new
        first_new = 1 + sum(1 for m in messages if m.role != "system")

        result = await self.completion.invoke(conversation, definitions)

        tool_call = None
        if isinstance(result, ToolCallCompletion):
            tool_call = result.request
            final = await self.dispatcher.dispatch(result, tools, conversation)
        else:
            reply = replace(result.message, active_tools=tuple(definitions))
            final = [*conversation, reply]

        logger.info(
            f"Turn completed: {len(final) - first_new} new message(s)"
            + (f", tool call {tool_call.name}" if tool_call else "")
        )
        return TurnResult(
            messages=final,
            new_messages=final[first_new:],
            active_tools=tuple(definitions),
            tool_call=tool_call,
        )
