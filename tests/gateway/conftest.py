"""gateway 测试配置 -- RequestHandler / FastAPI app / httpx AsyncClient fixture"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from support import EchoExecutor

from agentlink.core.store import InMemoryTaskStore
from agentlink.executor import GreetingAgentExecutor
from agentlink.gateway.services.request_handler import RequestHandler


@pytest_asyncio.fixture
async def echo_executor() -> EchoExecutor:
    return EchoExecutor()


@pytest_asyncio.fixture
async def handler(echo_executor: EchoExecutor, memory_store: InMemoryTaskStore) -> RequestHandler:
    """使用 EchoExecutor + 内存 Store 的 RequestHandler"""
    return RequestHandler(echo_executor, memory_store)


@pytest_asyncio.fixture
async def test_app(memory_store: InMemoryTaskStore, monkeypatch):
    """创建测试用 FastAPI app（绕过 lifespan 手动装配组件）"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
    monkeypatch.setenv("AGENTLINK_AGENT_URL", "http://test/")

    from agentlink.gateway.main import create_app, install_components

    app = create_app()
    install_components(app, memory_store, GreetingAgentExecutor())
    yield app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac
