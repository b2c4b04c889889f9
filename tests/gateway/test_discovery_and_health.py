"""发现文档与健康检查测试

测试内容：
1. GET /.well-known/agent.json 返回 camelCase AgentCard
2. GET /health 永远 200
3. GET /ready 探测 TaskStore（ok / unreachable / error -> 503）
"""

from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient


class TestAgentCardRoute:
    async def test_agent_card(self, client: AsyncClient):
        resp = await client.get("/.well-known/agent.json")
        assert resp.status_code == 200
        card = resp.json()
        assert card["name"] == "Greeting Agent"
        assert card["url"] == "http://test/"
        assert card["capabilities"] == {
            "streaming": True,
            "pushNotifications": False,
            "stateTransitionHistory": False,
        }
        assert card["skills"][0]["id"] == "greeting"
        assert "defaultInputModes" in card
        assert card["authentication"]["schemes"] == ["public"]


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_ready(self, client: AsyncClient):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ready"
        assert body["checks"] == {"task_store": "ok", "executor": "ok"}

    async def test_ready_store_unreachable(self, test_app, memory_store):
        """ping 返回 False -> task_store="unreachable"，503"""
        memory_store.ping = AsyncMock(return_value=False)
        async with AsyncClient(
            transport=ASGITransport(app=test_app), base_url="http://test"
        ) as ac:
            resp = await ac.get("/ready")

        assert resp.status_code == 503
        assert resp.json()["checks"]["task_store"] == "unreachable"
        memory_store.ping.assert_awaited_once()

    async def test_ready_store_failure(self, test_app, memory_store):
        memory_store.ping = AsyncMock(side_effect=RuntimeError("disk gone"))
        async with AsyncClient(
            transport=ASGITransport(app=test_app), base_url="http://test"
        ) as ac:
            resp = await ac.get("/ready")

        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "not_ready"
        assert body["checks"]["task_store"] == "error: disk gone"

    async def test_ready_without_components(self, monkeypatch):
        monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
        from agentlink.gateway.main import create_app

        app = create_app()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/ready")
        assert resp.status_code == 503
