"""Execution of HTTP-backed dynamic tools.

Dynamic tools describe an API endpoint (verb + resource path). Calling one
means assembling an HTTP request from the static request context of the
conversation, the arguments supplied by the model and the caller's
credentials, and sending it to the configured API.
"""

import logging
import re
from typing import Any
from urllib.parse import quote

import httpx

from api_chat_server.tools.types import (
    HttpApiCredentials,
    HttpRequestArgs,
    Tool,
    ToolDefinition,
)

logger = logging.getLogger(__name__)

_PATH_PARAMETER = re.compile(r"\{(\w+)\}")


def _merge_dicts(
    static: dict[str, Any] | None, dynamic: dict[str, Any] | None
) -> dict[str, Any] | None:
    if static is None and dynamic is None:
        return None
    return {**(dynamic or {}), **(static or {})}


def merge_request_args(
    static_args: HttpRequestArgs | None, dynamic_args: HttpRequestArgs | None
) -> HttpRequestArgs:
    """Merge the static request context with model-supplied arguments.

    Values from the static context take precedence on key conflicts, since
    they are supplied by the caller and stay constant for the conversation.
    A non-mapping body from the static context replaces the model's body.

    Args:
        static_args: Static request context of the conversation
        dynamic_args: Arguments supplied by the model

    Returns:
        HttpRequestArgs: The merged request parts
    """
    static_args = static_args or HttpRequestArgs()
    dynamic_args = dynamic_args or HttpRequestArgs()

    if isinstance(static_args.body, dict) and isinstance(dynamic_args.body, dict):
        body = {**dynamic_args.body, **static_args.body}
    elif static_args.body is not None:
        body = static_args.body
    else:
        body = dynamic_args.body

    return HttpRequestArgs(
        headers=_merge_dicts(static_args.headers, dynamic_args.headers),
        body=body,
        path_parameters=_merge_dicts(
            static_args.path_parameters, dynamic_args.path_parameters
        ),
        query_parameters=_merge_dicts(
            static_args.query_parameters, dynamic_args.query_parameters
        ),
    )


def build_path(resource_path: str, path_parameters: dict[str, Any] | None) -> str:
    """Substitute `{name}` placeholders in a resource path.

    Raises:
        ValueError: If a placeholder has no matching path parameter
    """
    path_parameters = path_parameters or {}

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in path_parameters:
            raise ValueError(f"Missing path parameter '{name}' for {resource_path}")
        return quote(str(path_parameters[name]), safe="")

    return _PATH_PARAMETER.sub(substitute, resource_path)


def _auth_for(credentials: HttpApiCredentials | None) -> httpx.Auth | None:
    if credentials is None or credentials.scheme == "bearer":
        return None
    if credentials.scheme == "basic":
        return httpx.BasicAuth(credentials.username or "", credentials.password or "")
    if credentials.scheme == "digest":
        return httpx.DigestAuth(credentials.username or "", credentials.password or "")
    raise ValueError(f"Unsupported credentials scheme: {credentials.scheme}")


class HttpToolExecutor:
    """Sends dynamic tool calls to the downstream HTTP API.

    Tool calls may have side effects, so requests are never retried.

    Attributes:
        base_url: Base URL that resource paths are resolved against
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        logger.info(f"HttpToolExecutor initialized with base url: {base_url}")

    async def execute(
        self,
        http_verb: str,
        resource_path: str,
        static_args: HttpRequestArgs | None = None,
        dynamic_args: HttpRequestArgs | None = None,
        credentials: HttpApiCredentials | None = None,
    ) -> Any:
        """Perform one API request.

        Args:
            http_verb: HTTP method
            resource_path: Resource path, possibly with `{name}` placeholders
            static_args: Static request context of the conversation
            dynamic_args: Arguments supplied by the model
            credentials: Caller credentials

        Returns:
            Decoded JSON when the response is JSON, otherwise the response text

        Raises:
            ValueError: If a path parameter is missing
            httpx.HTTPError: On transport failures and error status codes
        """
        args = merge_request_args(static_args, dynamic_args)
        path = build_path(resource_path, args.path_parameters)

        headers = {key: str(value) for key, value in (args.headers or {}).items()}
        if credentials is not None and credentials.scheme == "bearer" and credentials.token:
            headers["Authorization"] = f"Bearer {credentials.token}"

        request_kwargs: dict[str, Any] = {
            "headers": headers,
            "params": args.query_parameters,
            "auth": _auth_for(credentials),
        }
        if args.body is not None:
            if isinstance(args.body, (dict, list)):
                request_kwargs["json"] = args.body
            else:
                request_kwargs["content"] = str(args.body)

        logger.info(f"Calling API: {http_verb.upper()} {path}")
        response = await self._client.request(http_verb.upper(), path, **request_kwargs)
        response.raise_for_status()
        logger.debug(f"API responded with status {response.status_code}")

        if "json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()


def make_dynamic_http_tool(
    definition: ToolDefinition,
    executor: HttpToolExecutor,
    static_args: HttpRequestArgs | None = None,
    credentials: HttpApiCredentials | None = None,
) -> Tool:
    """Bind a catalog definition to the HTTP executor as a dynamic tool.

    Args:
        definition: Definition with http_verb and resource_path
        executor: The executor performing the request
        static_args: Static request context of the conversation
        credentials: Caller credentials

    Returns:
        Tool: Dynamic tool whose invoke() takes HttpRequestArgs
    """

    async def invoke(dynamic_args: HttpRequestArgs) -> Any:
        if not definition.http_verb or not definition.resource_path:
            raise ValueError(
                f"Tool '{definition.name}' has no HTTP verb or resource path"
            )
        return await executor.execute(
            http_verb=definition.http_verb,
            resource_path=definition.resource_path,
            static_args=static_args,
            dynamic_args=dynamic_args,
            credentials=credentials,
        )

    return Tool(
        name=definition.name,
        definition=definition,
        invoke=invoke,
        dynamic=True,
    )
