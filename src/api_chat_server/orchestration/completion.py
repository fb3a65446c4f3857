"""Completion service invocation.

This module sends a rewritten conversation and the active tool definitions
to the completion service and classifies the answer as either a plain
assistant reply or a tool-call request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from api_chat_server.conversations.types import AssistantMessage, Message
from api_chat_server.ollama import OllamaClient
from api_chat_server.orchestration.errors import NoResponseError
from api_chat_server.tools.types import ToolCallRequest, ToolDefinition

logger = logging.getLogger(__name__)


def to_completion_messages(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Strip messages to the fields the completion service accepts.

    Args:
        messages: Conversation messages

    Returns:
        List of message dicts: role and content, plus tool_calls for
        assistant tool-call echoes and tool_name for tool results
    """
    completion_messages = []

    for msg in messages:
        completion_msg: dict[str, Any] = {
            "role": msg.role,
            "content": msg.content,
        }

        # Add tool_calls for assistant messages that have them
        if getattr(msg, "tool_calls", None):
            completion_msg["tool_calls"] = msg.tool_calls

        if getattr(msg, "tool_name", None):
            completion_msg["tool_name"] = msg.tool_name

        completion_messages.append(completion_msg)

    return completion_messages


@dataclass(frozen=True)
class PlainCompletion:
    """The model answered with text."""

    message: AssistantMessage


@dataclass(frozen=True)
class ToolCallCompletion:
    """The model requested a tool call.

    Attributes:
        message: Assistant message echoing the tool call
        request: The requested call
    """

    message: AssistantMessage
    request: ToolCallRequest


CompletionResult = PlainCompletion | ToolCallCompletion


class CompletionInvoker:
    """Sends one turn to the completion service.

    The service decides by itself whether to call a tool. Failures are not
    retried here.

    Attributes:
        client: The Ollama client
        model: Model name used for every request
        options: Optional model parameters
    """

    def __init__(
        self,
        client: OllamaClient,
        model: str,
        options: dict[str, Any] | None = None,
    ) -> None:
        self.client = client
        self.model = model
        self.options = options

    async def invoke(
        self,
        messages: Sequence[Message],
        active_tools: Sequence[ToolDefinition],
    ) -> CompletionResult:
        """Request a completion for a conversation.

        Args:
            messages: Rewritten conversation, system message first
            active_tools: Definitions the model may call

        Returns:
            CompletionResult: PlainCompletion or ToolCallCompletion

        Raises:
            NoResponseError: If the service returned no message
        """
        response = await self.client.chat(
            model=self.model,
            messages=to_completion_messages(messages),
            tools=[definition.to_ollama_tool() for definition in active_tools],
            options=self.options,
        )

        message = response.get("message")
        if not message:
            raise NoResponseError("No message returned from the completion service")

        assistant_message = AssistantMessage(
            content=message.get("content") or "",
            model=self.model,
            eval_count=response.get("eval_count"),
            prompt_eval_count=response.get("prompt_eval_count"),
        )

        tool_calls = message.get("tool_calls") or []
        if not tool_calls:
            logger.debug(f"Received plain reply: {len(assistant_message.content)} characters")
            return PlainCompletion(message=assistant_message)

        if len(tool_calls) > 1:
            logger.warning(
                f"Model requested {len(tool_calls)} tool calls, only the first is executed"
            )

        tool_call = tool_calls[0]
        function = tool_call.get("function") or {}
        name = function.get("name")
        if not name:
            raise NoResponseError("Tool call returned without a function name")

        assistant_message.tool_calls = [tool_call]
        logger.info(f"Model requested tool call: {name}")
        return ToolCallCompletion(
            message=assistant_message,
            request=ToolCallRequest(name=name, arguments=function.get("arguments")),
        )
