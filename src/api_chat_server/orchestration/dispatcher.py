"""Dispatching of tool calls requested by the model.

A requested call is classified once into one of three variants:

- DynamicToolCall: an HTTP-backed tool discovered through the catalog
- SearchToolCall: the reserved catalog-search tool, whose results grow the
  active tool set
- UnresolvedToolCall: a name that matches nothing in the active set

The dispatcher then appends the assistant's tool-call echo and a tool result
message to a copy of the conversation.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from pydantic import ValidationError

from api_chat_server.conversations.types import Message, ToolMessage
from api_chat_server.orchestration.completion import ToolCallCompletion
from api_chat_server.orchestration.errors import (
    MalformedArgumentsError,
    UnresolvedToolError,
)
from api_chat_server.tools.catalog import FIND_API_SPEC_ACTION
from api_chat_server.tools.types import (
    Tool,
    ToolCallArgs,
    ToolCallRequest,
    ToolDefinition,
)

logger = logging.getLogger(__name__)

NO_FUNCTION_FOUND = (
    "No function found in the API spec. Try asking the user for more information."
)


class UnresolvedToolPolicy(str, Enum):
    """What to do when the model calls a tool that is not active.

    INJECT_ERROR appends a tool result explaining the tool is unavailable, so
    the model can recover on the next turn. RAISE fails the turn with
    UnresolvedToolError.
    """

    INJECT_ERROR = "inject_error"
    RAISE = "raise"


@dataclass(frozen=True)
class DynamicToolCall:
    tool: Tool
    request: ToolCallRequest


@dataclass(frozen=True)
class SearchToolCall:
    tool: Tool
    request: ToolCallRequest


@dataclass(frozen=True)
class UnresolvedToolCall:
    request: ToolCallRequest


ToolCall = DynamicToolCall | SearchToolCall | UnresolvedToolCall


def classify_tool_call(request: ToolCallRequest, active_tools: Sequence[Tool]) -> ToolCall:
    """Select the dispatch variant for a requested call."""
    tool = next((t for t in active_tools if t.definition.name == request.name), None)
    if tool is None:
        return UnresolvedToolCall(request=request)
    if tool.name == FIND_API_SPEC_ACTION:
        return SearchToolCall(tool=tool, request=request)
    if tool.dynamic:
        return DynamicToolCall(tool=tool, request=request)
    return UnresolvedToolCall(request=request)


def parse_tool_arguments(request: ToolCallRequest) -> dict[str, Any]:
    """Decode the argument payload of a tool call.

    Raises:
        MalformedArgumentsError: If the payload is not a JSON object
    """
    arguments = request.arguments
    if arguments is None or arguments == "":
        return {}
    if isinstance(arguments, dict):
        return dict(arguments)
    if not isinstance(arguments, str):
        try:
            return dict(arguments)
        except (TypeError, ValueError) as e:
            raise MalformedArgumentsError(request.name, str(e)) from e

    try:
        decoded = json.loads(arguments)
    except json.JSONDecodeError as e:
        raise MalformedArgumentsError(request.name, str(e)) from e

    if not isinstance(decoded, dict):
        raise MalformedArgumentsError(
            request.name, f"expected a JSON object, got {type(decoded).__name__}"
        )
    return decoded


def serialize_tool_result(result: Any) -> str:
    """Render a tool response as message content."""
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


def format_search_result(definitions: Sequence[ToolDefinition]) -> str:
    """Summarize catalog search results for the model."""
    if not definitions:
        return NO_FUNCTION_FOUND
    names = "\n- ".join(definition.name for definition in definitions)
    return (
        f"Found the following function(s) to use:\n- {names}\n\n"
        "They have been added to your set of available functions. "
        "Execute the function if you have sufficient data. "
        "If you need more data, ask the user for it."
    )


def _union(
    current: Sequence[ToolDefinition], found: Sequence[ToolDefinition]
) -> tuple[ToolDefinition, ...]:
    names = {definition.name for definition in current}
    added = []
    for definition in found:
        if definition.name not in names:
            names.add(definition.name)
            added.append(definition)
    return (*current, *added)


class ToolDispatcher:
    """Executes the tool call requested by the model.

    Attributes:
        unresolved_policy: Behaviour for calls to tools that are not active
    """

    def __init__(
        self, unresolved_policy: UnresolvedToolPolicy = UnresolvedToolPolicy.INJECT_ERROR
    ) -> None:
        self.unresolved_policy = unresolved_policy

    async def dispatch(
        self,
        completion: ToolCallCompletion,
        active_tools: Sequence[Tool],
        conversation: Sequence[Message],
    ) -> list[Message]:
        """Run a requested tool call and fold the result into the conversation.

        Args:
            completion: The tool-call completion (echo message and request)
            active_tools: Tools active this turn
            conversation: Conversation so far; not modified

        Returns:
            list[Message]: New list with the echo and the tool result appended

        Raises:
            MalformedArgumentsError: If the argument payload can't be parsed
            UnresolvedToolError: If the tool is not active and the policy is RAISE
        """
        call = classify_tool_call(completion.request, active_tools)
        current = tuple(tool.definition for tool in active_tools)

        if isinstance(call, DynamicToolCall):
            result_message = await self._call_dynamic(call, current)
        elif isinstance(call, SearchToolCall):
            result_message = await self._call_search(call, current)
        else:
            result_message = self._unresolved(call, current)

        return [*conversation, completion.message, result_message]

    async def _call_dynamic(
        self, call: DynamicToolCall, current: tuple[ToolDefinition, ...]
    ) -> ToolMessage:
        arguments = parse_tool_arguments(call.request)
        try:
            dynamic_args = ToolCallArgs.model_validate(arguments)
        except ValidationError as e:
            raise MalformedArgumentsError(call.request.name, str(e)) from e

        logger.info(f"Executing dynamic tool {call.tool.name}")
        result = await call.tool.invoke(dynamic_args)

        return ToolMessage(
            tool_name=call.tool.name,
            content=serialize_tool_result(result),
            active_tools=current,
        )

    async def _call_search(
        self, call: SearchToolCall, current: tuple[ToolDefinition, ...]
    ) -> ToolMessage:
        arguments = parse_tool_arguments(call.request)
        query = arguments.get("query")
        if not isinstance(query, str):
            raise MalformedArgumentsError(call.request.name, "missing 'query' argument")

        found: list[ToolDefinition] = await call.tool.invoke({"query": query})
        logger.info(
            f"Catalog search for {query!r} found: "
            f"{', '.join(d.name for d in found) or 'nothing'}"
        )

        return ToolMessage(
            tool_name=call.tool.name,
            content=format_search_result(found),
            active_tools=_union(current, found),
        )

    def _unresolved(
        self, call: UnresolvedToolCall, current: tuple[ToolDefinition, ...]
    ) -> ToolMessage:
        available = [definition.name for definition in current]
        if self.unresolved_policy is UnresolvedToolPolicy.RAISE:
            raise UnresolvedToolError(call.request.name, available)

        logger.warning(f"Model called unavailable tool {call.request.name}")
        return ToolMessage(
            tool_name=call.request.name,
            content=(
                f"Function {call.request.name} is not available. "
                f"Available functions: {', '.join(available)}. "
                f"Use {FIND_API_SPEC_ACTION} to find other actions."
            ),
            active_tools=current,
        )
