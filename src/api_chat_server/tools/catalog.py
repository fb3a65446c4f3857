"""Tool catalog resolvers and the reserved catalog-search tool.

A catalog resolver maps a free-text query to an ordered list of candidate
tool definitions. The model reaches the catalog through the reserved
`find_api_spec_action` tool, which is always part of the active tool set.
"""

import logging
import re
from pathlib import Path
from typing import Any, Protocol

import httpx
import yaml
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from api_chat_server.tools.types import Tool, ToolDefinition

logger = logging.getLogger(__name__)

FIND_API_SPEC_ACTION = "find_api_spec_action"

FIND_API_SPEC_ACTION_DEFINITION = ToolDefinition(
    name=FIND_API_SPEC_ACTION,
    description="Find an action in the API spec",
    parameters={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "repeat the user's query"},
        },
        "required": ["query"],
    },
)


class ToolCatalogResolver(Protocol):
    """Anything that can search for tool definitions."""

    async def search(self, query: str) -> list[ToolDefinition]: ...


def make_find_api_spec_tool(catalog: ToolCatalogResolver) -> Tool:
    """Build the reserved catalog-search tool around a resolver.

    Args:
        catalog: The resolver to query

    Returns:
        Tool: Non-dynamic tool whose invoke() takes {"query": str}
    """

    async def find_api_spec_action(arguments: dict[str, Any]) -> list[ToolDefinition]:
        return await catalog.search(str(arguments.get("query", "")))

    return Tool(
        name=FIND_API_SPEC_ACTION,
        definition=FIND_API_SPEC_ACTION_DEFINITION,
        invoke=find_api_spec_action,
        dynamic=False,
    )


def parse_definitions(payload: Any) -> list[ToolDefinition]:
    """Parse a catalog payload into tool definitions.

    Accepts either a bare list or a mapping with a "results" or "tools" list.
    Entries without a name are skipped with a warning.
    """
    if isinstance(payload, dict):
        payload = payload.get("results", payload.get("tools", []))
    if not isinstance(payload, list):
        raise ValueError(f"Unexpected catalog payload type: {type(payload).__name__}")

    definitions: list[ToolDefinition] = []
    for entry in payload:
        try:
            definitions.append(ToolDefinition.from_dict(entry))
        except (ValueError, AttributeError) as e:
            logger.warning(f"Skipping invalid catalog entry: {e}")
    return definitions


class HttpToolCatalog:
    """Catalog resolver backed by a remote search endpoint.

    Issues `GET {url}?query=...` and expects a JSON list of definitions.
    Searching is a pure read, so transport failures and timeouts are retried
    with exponential backoff.

    Attributes:
        url: The search endpoint URL
        max_retries: Maximum number of attempts per search
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_min_seconds: float = 0.5,
        retry_max_seconds: float = 4.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.max_retries = max_retries
        self._retry_min_seconds = retry_min_seconds
        self._retry_max_seconds = retry_max_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        logger.info(f"HttpToolCatalog initialized with url: {url}")

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self.max_retries)),
            wait=wait_exponential(
                multiplier=self._retry_min_seconds,
                max=self._retry_max_seconds,
            ),
            retry=retry_if_exception_type(httpx.TransportError),
        )

    async def search(self, query: str) -> list[ToolDefinition]:
        """Search the remote catalog.

        Args:
            query: Free-text query

        Returns:
            list[ToolDefinition]: Ordered candidates, possibly empty

        Raises:
            httpx.HTTPError: If the catalog cannot be reached or answers with an error
        """
        logger.debug(f"Searching tool catalog for: {query!r}")
        async for attempt in self._retrying():
            with attempt:
                response = await self._client.get(self.url, params={"query": query})
                response.raise_for_status()

        definitions = parse_definitions(response.json())
        logger.info(f"Catalog returned {len(definitions)} tool(s) for {query!r}")
        return definitions

    async def close(self) -> None:
        """Close the underlying HTTP client if this catalog created it."""
        if self._owns_client:
            await self._client.aclose()


def _tokenize(text: str) -> set[str]:
    # Split camelCase and snake_case identifiers into words
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", text)
    return set(re.findall(r"[a-z0-9]+", text.lower()))


class InMemoryToolCatalog:
    """Catalog resolver over a fixed list of definitions.

    Scores each definition by the number of query words found in its name
    and description. Used when no remote catalog is configured.
    """

    def __init__(self, definitions: list[ToolDefinition], limit: int = 3) -> None:
        self.definitions = list(definitions)
        self.limit = limit

    @classmethod
    def from_file(cls, path: Path, limit: int = 3) -> "InMemoryToolCatalog":
        """Load definitions from a YAML or JSON file.

        Args:
            path: Catalog file path
            limit: Maximum number of results per search

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file content is not a list of definitions
        """
        if not path.exists():
            raise FileNotFoundError(f"Tool catalog file {path} not found")

        with open(path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f) or []

        definitions = parse_definitions(payload)
        logger.info(f"Loaded {len(definitions)} tool definition(s) from {path}")
        return cls(definitions, limit=limit)

    async def search(self, query: str) -> list[ToolDefinition]:
        """Return the best keyword matches for a query."""
        query_tokens = _tokenize(query)
        if not query_tokens:
            return []

        scored = []
        for index, definition in enumerate(self.definitions):
            tokens = _tokenize(f"{definition.name} {definition.description}")
            score = len(query_tokens & tokens)
            if score > 0:
                scored.append((-score, index, definition))

        scored.sort(key=lambda item: (item[0], item[1]))
        return [definition for _, _, definition in scored[: self.limit]]
