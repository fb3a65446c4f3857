"""Data types for tools exposed to the language model.

This module defines tool definitions (what the model sees), runtime tool
wrappers (what the server calls), and the argument/credential shapes passed
to HTTP-backed tools.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described capability the model may request.

    Attributes:
        name: Unique identifier of the tool
        description: Text shown to the model
        parameters: JSON schema describing the tool arguments
        http_verb: HTTP method for HTTP-backed tools (e.g. "GET")
        resource_path: Resource path for HTTP-backed tools (e.g. "/groups/{groupId}")
    """

    name: str
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)
    http_verb: str | None = None
    resource_path: str | None = None

    def to_ollama_tool(self) -> dict[str, Any]:
        """Render the definition in the function format the chat API accepts."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters or {"type": "object", "properties": {}},
            },
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ToolDefinition":
        """Create a ToolDefinition from a dictionary.

        Accepts a flat shape (name, description, parameters, http_verb,
        resource_path) as well as the catalog shape, where the function schema
        is nested under "definition" and the HTTP details are given as
        "httpVerb" and "path".

        Args:
            data: Definition data

        Returns:
            ToolDefinition: Parsed definition

        Raises:
            ValueError: If the definition has no name
        """
        definition = data.get("definition") or data.get("function") or data
        name = definition.get("name")
        if not name:
            raise ValueError(f"Tool definition without a name: {dict(data)!r}")

        http_verb = data.get("http_verb") or data.get("httpVerb")
        resource_path = data.get("resource_path") or data.get("path")

        return ToolDefinition(
            name=name,
            description=definition.get("description", ""),
            parameters=dict(definition.get("parameters") or {}),
            http_verb=http_verb.upper() if http_verb else None,
            resource_path=resource_path,
        )


ToolFunction = Callable[[Any], Awaitable[Any]]


@dataclass
class Tool:
    """Runtime wrapper around a tool definition.

    Attributes:
        name: Name of the tool, same as definition.name
        definition: The definition exposed to the model
        invoke: Async callable receiving the parsed arguments
        dynamic: True if the tool was discovered at runtime via catalog
                 search and is subject to eviction from the window
    """

    name: str
    definition: ToolDefinition
    invoke: ToolFunction
    dynamic: bool = False


@dataclass(frozen=True)
class ToolCallRequest:
    """A tool call requested by the model.

    Attributes:
        name: Requested tool name
        arguments: Raw JSON text or an already decoded mapping
    """

    name: str
    arguments: str | Mapping[str, Any] | None = None


class HttpRequestArgs(BaseModel):
    """Parts of an HTTP request supplied to a dynamic tool.

    Used as the static request context given once per conversation, and as
    the base of the arguments the model supplies on each tool call.
    """

    headers: dict[str, Any] | None = None
    body: Any = None
    path_parameters: dict[str, Any] | None = Field(
        default=None, alias="pathParameters"
    )
    query_parameters: dict[str, Any] | None = Field(
        default=None, alias="queryParameters"
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# The static context has the same shape as the per-call arguments
StaticRequestContext = HttpRequestArgs


class ToolCallArgs(HttpRequestArgs):
    """Arguments supplied by the model for one dynamic tool call.

    Unlike the static context, unknown top-level keys are rejected: the
    request must not be sent without the values the model meant to pass.
    """

    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class HttpApiCredentials:
    """Authentication material for downstream API calls.

    Attributes:
        scheme: One of "bearer", "basic" or "digest"
        token: Bearer token
        username: Username (or public key) for basic/digest auth
        password: Password (or private key) for basic/digest auth
    """

    scheme: str = "bearer"
    token: str | None = field(default=None, repr=False)
    username: str | None = None
    password: str | None = field(default=None, repr=False)
