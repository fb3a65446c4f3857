"""Exceptions raised while running a conversation turn."""


class OrchestrationError(Exception):
    """Base class for errors raised by the turn orchestrator."""


class NoResponseError(OrchestrationError):
    """The completion service returned no usable message."""


class MalformedArgumentsError(OrchestrationError):
    """A tool-call argument payload could not be parsed as a JSON object."""

    def __init__(self, tool_name: str, reason: str):
        self.tool_name = tool_name
        self.reason = reason
        super().__init__(f"Malformed arguments for tool '{tool_name}': {reason}")


class UnresolvedToolError(OrchestrationError):
    """The model requested a tool that is not in the active tool set."""

    def __init__(self, tool_name: str, available: list[str]):
        self.tool_name = tool_name
        self.available = available
        super().__init__(
            f"Tool '{tool_name}' is not available (active tools: {', '.join(available)})"
        )
