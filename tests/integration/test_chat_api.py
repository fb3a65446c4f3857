"""Integration tests for the non-streaming chat endpoint.

These tests run full turns through the API with a mocked completion
service, the local tool catalog written by the integration conftest, and a
mocked downstream API.
"""

import json

import httpx
import ollama
import pytest
from httpx import AsyncClient

from api_chat_server.orchestration import ToolDispatcher, UnresolvedToolPolicy
from api_chat_server.tools import HttpToolExecutor


def _tool_call(name, arguments):
    return {
        "model": "llama3.2:latest",
        "message": {
            "role": "assistant",
            "content": "",
            "tool_calls": [{"function": {"name": name, "arguments": arguments}}],
        },
    }


def _reply(content):
    return {"model": "llama3.2:latest", "message": {"role": "assistant", "content": content}}


async def _create(async_client: AsyncClient, **body) -> str:
    response = await async_client.post("/api/v1/conversations", json=body)
    assert response.status_code == 201
    return response.json()["conversation_id"]


@pytest.fixture
def api_requests(async_client, test_app):
    """Route dynamic tool calls to a mocked downstream API.

    Returns:
        list: Requests received by the mocked API
    """
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"city": "Oslo", "forecast": "sunny"})

    client = httpx.AsyncClient(
        base_url="http://api.test", transport=httpx.MockTransport(handler)
    )
    executor = HttpToolExecutor("http://api.test", client=client)
    test_app.state.orchestrator.executor = executor
    return seen


@pytest.mark.asyncio
async def test_chat_plain_reply(async_client: AsyncClient, mock_ollama_client):
    """Test a turn answered with plain text."""
    conversation_id = await _create(async_client)

    response = await async_client.post(
        f"/api/v1/chat/{conversation_id}", json={"message": "hi"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["conversation_id"] == conversation_id
    assert [m["role"] for m in data["messages"]] == ["user", "assistant"]
    assert data["messages"][-1]["content"] == "Hello!"
    assert data["active_tools"] == ["find_api_spec_action"]
    assert data["tool_call"] is None

    sent = mock_ollama_client.chat.call_args.kwargs["messages"]
    assert sent[0]["role"] == "system"
    assert sent[-1] == {"role": "user", "content": "hi"}

    detail = (await async_client.get(f"/api/v1/conversations/{conversation_id}")).json()
    assert [m["role"] for m in detail["messages"]] == ["system", "user", "assistant"]


@pytest.mark.asyncio
async def test_chat_search_then_follow_up(async_client: AsyncClient, mock_ollama_client):
    """Test that catalog results become callable tools on the next turn."""
    conversation_id = await _create(async_client)
    mock_ollama_client.chat.side_effect = [
        _tool_call("find_api_spec_action", {"query": "travel"}),
        _reply("Which city?"),
    ]

    first = await async_client.post(
        f"/api/v1/chat/{conversation_id}", json={"message": "I want to travel"}
    )

    assert first.status_code == 200
    data = first.json()
    assert data["tool_call"]["name"] == "find_api_spec_action"
    tool_message = data["messages"][-1]
    assert tool_message["role"] == "tool"
    assert tool_message["active_tools"] == [
        "find_api_spec_action",
        "getWeather",
        "bookFlight",
    ]

    second = await async_client.post(f"/api/v1/chat/{conversation_id}", json={})

    assert second.status_code == 200
    assert second.json()["messages"][-1]["content"] == "Which city?"
    tools = mock_ollama_client.chat.call_args.kwargs["tools"]
    assert [t["function"]["name"] for t in tools] == [
        "find_api_spec_action",
        "getWeather",
        "bookFlight",
    ]


@pytest.mark.asyncio
async def test_chat_dynamic_tool_calls_api(
    async_client: AsyncClient, mock_ollama_client, api_requests
):
    """Test a dynamic tool call reaching the downstream API with credentials."""
    conversation_id = await _create(
        async_client, static_request_args={"headers": {"X-Team": "travel"}}
    )
    mock_ollama_client.chat.side_effect = [
        _tool_call("find_api_spec_action", {"query": "weather"}),
        _tool_call("getWeather", json.dumps({"queryParameters": {"city": "Oslo"}})),
    ]

    await async_client.post(f"/api/v1/chat/{conversation_id}", json={"message": "weather?"})
    response = await async_client.post(
        f"/api/v1/chat/{conversation_id}",
        json={"message": "Oslo", "credentials": {"scheme": "bearer", "token": "secret"}},
    )

    assert response.status_code == 200
    assert response.json()["tool_call"]["name"] == "getWeather"
    tool_message = response.json()["messages"][-1]
    assert tool_message["tool_name"] == "getWeather"
    assert json.loads(tool_message["content"]) == {"city": "Oslo", "forecast": "sunny"}

    request = api_requests[0]
    assert request.method == "GET"
    assert request.url.path == "/weather"
    assert request.url.params["city"] == "Oslo"
    assert request.headers["X-Team"] == "travel"
    assert request.headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_chat_malformed_arguments(async_client: AsyncClient, mock_ollama_client):
    """Test that malformed tool arguments fail the turn with 400."""
    conversation_id = await _create(async_client)
    mock_ollama_client.chat.return_value = _tool_call("find_api_spec_action", "{oops")

    response = await async_client.post(
        f"/api/v1/chat/{conversation_id}", json={"message": "travel"}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "malformed_arguments"

    detail = (await async_client.get(f"/api/v1/conversations/{conversation_id}")).json()
    assert detail["message_count"] == 0


@pytest.mark.asyncio
async def test_chat_unresolved_tool_is_reported_to_model(
    async_client: AsyncClient, mock_ollama_client
):
    """Test that an unknown tool yields a tool result by default."""
    conversation_id = await _create(async_client)
    mock_ollama_client.chat.return_value = _tool_call("deleteEverything", "{}")

    response = await async_client.post(
        f"/api/v1/chat/{conversation_id}", json={"message": "delete it all"}
    )

    assert response.status_code == 200
    tool_message = response.json()["messages"][-1]
    assert tool_message["role"] == "tool"
    assert "deleteEverything is not available" in tool_message["content"]


@pytest.mark.asyncio
async def test_chat_unresolved_tool_with_raise_policy(
    async_client: AsyncClient, mock_ollama_client, test_app
):
    """Test that an unknown tool fails the turn with 409 under the RAISE policy."""
    test_app.state.orchestrator.dispatcher = ToolDispatcher(UnresolvedToolPolicy.RAISE)
    conversation_id = await _create(async_client)
    mock_ollama_client.chat.return_value = _tool_call("deleteEverything", "{}")

    response = await async_client.post(
        f"/api/v1/chat/{conversation_id}", json={"message": "delete it all"}
    )

    assert response.status_code == 409
    assert response.json()["detail"]["error"]["code"] == "unresolved_tool"


@pytest.mark.asyncio
async def test_chat_ollama_error(async_client: AsyncClient, mock_ollama_client):
    """Test that completion service failures map to 502."""
    conversation_id = await _create(async_client)
    mock_ollama_client.chat.side_effect = ollama.ResponseError("model not found")

    response = await async_client.post(
        f"/api/v1/chat/{conversation_id}", json={"message": "hi"}
    )

    assert response.status_code == 502
    assert response.json()["detail"]["error"]["code"] == "ollama_error"

    detail = (await async_client.get(f"/api/v1/conversations/{conversation_id}")).json()
    assert detail["message_count"] == 0


@pytest.mark.asyncio
async def test_chat_nonexistent_conversation(async_client: AsyncClient):
    """Test chatting in a conversation that doesn't exist."""
    response = await async_client.post("/api/v1/chat/nonexistent", json={"message": "hi"})

    assert response.status_code == 404
    assert response.json()["detail"]["error"]["code"] == "conversation_not_found"


@pytest.mark.asyncio
async def test_chat_empty_history_without_message(async_client: AsyncClient):
    """Test that a turn needs either history or a new message."""
    conversation_id = await _create(async_client)

    response = await async_client.post(f"/api/v1/chat/{conversation_id}", json={})

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "empty_history"


@pytest.mark.asyncio
async def test_chat_after_added_message(async_client: AsyncClient, mock_ollama_client):
    """Test running a turn on a message appended beforehand."""
    conversation_id = await _create(async_client)
    await async_client.post(
        f"/api/v1/conversations/{conversation_id}/messages", json={"content": "hi"}
    )

    response = await async_client.post(f"/api/v1/chat/{conversation_id}", json={})

    assert response.status_code == 200
    assert [m["role"] for m in response.json()["messages"]] == ["assistant"]
    sent = mock_ollama_client.chat.call_args.kwargs["messages"]
    assert [m["role"] for m in sent] == ["system", "user"]


@pytest.mark.asyncio
async def test_found_tools_survive_added_message(
    async_client: AsyncClient, mock_ollama_client
):
    """Test that appending a user message keeps the tools found by a search."""
    conversation_id = await _create(async_client)
    mock_ollama_client.chat.side_effect = [
        _tool_call("find_api_spec_action", {"query": "travel"}),
        _reply("Booking a flight to Paris."),
    ]

    await async_client.post(
        f"/api/v1/chat/{conversation_id}", json={"message": "I want to travel"}
    )
    await async_client.post(
        f"/api/v1/conversations/{conversation_id}/messages", json={"content": "Paris"}
    )
    response = await async_client.post(f"/api/v1/chat/{conversation_id}", json={})

    assert response.status_code == 200
    assert response.json()["active_tools"] == [
        "find_api_spec_action",
        "getWeather",
        "bookFlight",
    ]
    tools = mock_ollama_client.chat.call_args.kwargs["tools"]
    assert [t["function"]["name"] for t in tools] == [
        "find_api_spec_action",
        "getWeather",
        "bookFlight",
    ]
