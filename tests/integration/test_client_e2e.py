"""Client 端到端测试 -- A2AClient 经 ASGITransport 调用完整 app

测试内容：
1. A2ACardResolver 读取 AgentCard，A2AClient 由 card.url 构造
2. send_task / get_task 多轮对话
3. send_message 无状态回复
4. 协议错误映射为 A2AClientJSONRPCError
5. send_task_subscribe 逐个产出事件
6. HTTP 层失败映射为 A2AClientHTTPError
"""

import json
from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from agentlink.client import (
    A2ACardResolver,
    A2AClient,
    A2AClientHTTPError,
    A2AClientJSONRPCError,
)
from agentlink.core.models import (
    Role,
    TaskArtifactUpdateEvent,
    TaskState,
    TaskStatusUpdateEvent,
    extract_text,
    text_message,
)
from agentlink.core.store import InMemoryTaskStore
from agentlink.executor import GreetingAgentExecutor


def _greeting(name: str):
    return text_message(Role.USER, json.dumps({"type": "greeting", "input": {"name": name}}))


@pytest_asyncio.fixture
async def http_client(monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """指向完整 app 的 httpx 客户端"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
    monkeypatch.setenv("AGENTLINK_AGENT_URL", "http://agent.test/")

    from agentlink.gateway.main import create_app, install_components

    app = create_app()
    install_components(app, InMemoryTaskStore(), GreetingAgentExecutor())
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://agent.test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def a2a_client(http_client: AsyncClient) -> A2AClient:
    card = await A2ACardResolver("http://agent.test", http_client=http_client).get_agent_card()
    return A2AClient(agent_card=card, http_client=http_client)


class TestClientE2E:
    """A2AClient -> gateway -> RequestHandler -> GreetingAgentExecutor"""

    async def test_card_resolution(self, http_client: AsyncClient):
        card = await A2ACardResolver("http://agent.test/", http_client=http_client).get_agent_card()
        assert card.name == "Greeting Agent"
        assert card.capabilities.streaming is True
        assert card.get_skill("greeting") is not None

    async def test_multi_turn_task(self, a2a_client: A2AClient):
        assert a2a_client.url == "http://agent.test/"

        first = await a2a_client.send_task("conv-1", _greeting("Ada"), session_id="s-1")
        assert first.status.state == TaskState.COMPLETED
        assert extract_text(first.status.message) == "Hey Ada, greetings from Agent B 🤝"

        second = await a2a_client.send_task("conv-1", _greeting("Bob"))
        assert len(second.history) == 4
        assert second.session_id == "s-1"

        fetched = await a2a_client.get_task("conv-1")
        assert fetched == second

        trimmed = await a2a_client.get_task("conv-1", history_length=2)
        assert len(trimmed.history) == 2

    async def test_send_message(self, a2a_client: A2AClient):
        reply = await a2a_client.send_message(_greeting("Kim"))
        assert reply.role == Role.AGENT
        assert extract_text(reply) == "Hey Kim, greetings from Agent B 🤝"

    async def test_protocol_errors(self, a2a_client: A2AClient):
        with pytest.raises(A2AClientJSONRPCError) as exc_info:
            await a2a_client.get_task("missing")
        assert exc_info.value.code == -32001

        await a2a_client.send_task("conv-2", _greeting("Ada"))
        with pytest.raises(A2AClientJSONRPCError) as exc_info:
            await a2a_client.cancel_task("conv-2")
        assert exc_info.value.code == -32002

    async def test_send_task_subscribe(self, a2a_client: A2AClient):
        events = [
            event async for event in a2a_client.send_task_subscribe("conv-3", _greeting("Lin"))
        ]

        assert isinstance(events[0], TaskStatusUpdateEvent)
        assert events[0].status.state == TaskState.WORKING
        assert not any(isinstance(e, TaskArtifactUpdateEvent) for e in events)
        assert events[-1].final is True
        assert extract_text(events[-1].status.message) == "Hey Lin, greetings from Agent B 🤝"

        task = await a2a_client.get_task("conv-3")
        assert task.status.state == TaskState.COMPLETED
        assert len(task.history) == 2


class TestClientErrors:
    async def test_requires_url_or_card(self):
        with pytest.raises(ValueError):
            A2AClient()

    async def test_http_status_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway"))
        async with AsyncClient(transport=transport) as ac:
            client = A2AClient(url="http://agent.test/", http_client=ac)
            with pytest.raises(A2AClientHTTPError) as exc_info:
                await client.get_task("x")
        assert exc_info.value.status_code == 502

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with AsyncClient(transport=httpx.MockTransport(handler)) as ac:
            client = A2AClient(url="http://agent.test/", http_client=ac)
            with pytest.raises(A2AClientHTTPError) as exc_info:
                await client.send_message(_greeting("x"))
        assert exc_info.value.status_code == 503

    async def test_invalid_json_response(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        async with AsyncClient(transport=transport) as ac:
            client = A2AClient(url="http://agent.test/", http_client=ac)
            with pytest.raises(A2AClientHTTPError):
                await client.get_task("x")

    async def test_stream_error_envelope(self):
        body = json.dumps(
            {"jsonrpc": "2.0", "id": "1", "error": {"code": -32602, "message": "Invalid parameters"}}
        )
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                200,
                content=f"data: {body}\n\n".encode(),
                headers={"content-type": "text/event-stream"},
            )
        )
        async with AsyncClient(transport=transport) as ac:
            client = A2AClient(url="http://agent.test/", http_client=ac)
            with pytest.raises(A2AClientJSONRPCError) as exc_info:
                async for _ in client.send_task_subscribe("t", _greeting("x")):
                    pass
        assert exc_info.value.code == -32602
