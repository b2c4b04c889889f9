"""CatalogAgentExecutor 测试（httpx.MockTransport）

测试内容：
1. 目录返回列表 / 带元数据的对象，产出 product-inventory Artifact
2. 商品字段标准化（variants 格式）
3. filters 作为查询参数
4. 目录 4xx/5xx -> 失败结果
5. 连接失败 -> CatalogUnreachableError；非 JSON -> CatalogPayloadError
6. 流式事件包含 Artifact 事件
"""

import httpx
import pytest

from agentlink.core.models import (
    DataPart,
    Message,
    Role,
    TaskArtifactUpdateEvent,
    extract_text,
    text_message,
)
from agentlink.executor import (
    CatalogAgentExecutor,
    CatalogPayloadError,
    CatalogUnreachableError,
    ExecutionRequest,
    normalize_product,
)

SHOP_BODY = {
    "shop": "Demo Shop",
    "currency": "EUR",
    "lastSync": "2026-01-01T00:00:00+00:00",
    "products": [
        {"name": "Mug", "sku": "M-1", "price": 9.5, "quantity": 3, "category": "kitchen"},
        {"name": "Cap", "sku": "C-1", "price": 15, "quantity": 0, "vendor": "Acme"},
    ],
}


def _executor(handler) -> CatalogAgentExecutor:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CatalogAgentExecutor("http://catalog.test/", http_client=client)


def _request(message: Message) -> ExecutionRequest:
    return ExecutionRequest(method="tasks/send", task_id="t-1", message=message)


class TestCatalogExecutor:
    """目录查询"""

    async def test_inventory_artifact(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=SHOP_BODY)

        executor = _executor(handler)
        result = await executor.on_message_send(
            _request(text_message(Role.USER, "Get all products from inventory")), None
        )

        assert seen[0].url.path == "/products"
        assert result.is_failure is False
        assert extract_text(result.message) == "Found 2 products in Demo Shop"

        artifact = result.artifacts[0]
        assert artifact.name == "product-inventory"
        data = artifact.parts[0].data
        assert data["metadata"] == {
            "shop": "Demo Shop",
            "currency": "EUR",
            "total": 2,
            "lastSync": "2026-01-01T00:00:00+00:00",
        }
        assert data["products"][0]["inStock"] is True
        assert data["products"][1]["inStock"] is False
        assert data["products"][1]["currency"] == "EUR"

    async def test_list_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"title": "Lamp", "price": "20.00"}])

        result = await _executor(handler).on_message_send(
            _request(text_message(Role.USER, "list")), None
        )
        data = result.artifacts[0].parts[0].data
        assert data["products"][0]["name"] == "Lamp"
        assert data["metadata"]["currency"] == "USD"
        assert data["metadata"]["total"] == 1

    async def test_filters_become_query_params(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        msg = Message(
            role=Role.USER,
            parts=[DataPart(data={"action": "get_products", "filters": {"category": "kitchen"}})],
        )
        await _executor(handler).on_message_send(_request(msg), None)

        assert seen[0].url.params["category"] == "kitchen"

    async def test_unsupported_action(self):
        def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
            raise AssertionError("catalog must not be called")

        msg = Message(role=Role.USER, parts=[DataPart(data={"action": "delete_all"})])
        result = await _executor(handler).on_message_send(_request(msg), None)

        assert result.is_failure is True
        assert "delete_all" in extract_text(result.message)

    async def test_http_error_is_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "down"})

        result = await _executor(handler).on_message_send(
            _request(text_message(Role.USER, "x")), None
        )
        assert result.is_failure is True
        assert "503" in extract_text(result.message)

    async def test_redirect_is_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"location": "http://elsewhere/"})

        result = await _executor(handler).on_message_send(
            _request(text_message(Role.USER, "x")), None
        )
        assert result.is_failure is True
        assert extract_text(result.message) == "Catalog request failed with status 302"

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(CatalogUnreachableError) as exc_info:
            await _executor(handler).on_message_send(_request(text_message(Role.USER, "x")), None)
        assert exc_info.value.catalog_url == "http://catalog.test"
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)
        assert "recoverable" not in vars(exc_info.value)

    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(CatalogPayloadError):
            await _executor(handler).on_message_send(_request(text_message(Role.USER, "x")), None)

    async def test_unexpected_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": []})

        with pytest.raises(CatalogPayloadError):
            await _executor(handler).on_message_send(_request(text_message(Role.USER, "x")), None)

    async def test_stream_includes_artifact_event(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=SHOP_BODY)

        events = [
            e
            async for e in _executor(handler).on_message_stream(
                _request(text_message(Role.USER, "x")), None
            )
        ]
        assert isinstance(events[1], TaskArtifactUpdateEvent)
        assert events[1].artifact.index == 0
        assert events[-1].final is True
        assert events[-1].metadata == {"artifactsReplaced": True}


class TestNormalizeProduct:
    def test_variant_format(self):
        product = normalize_product(
            {
                "title": "Shirt",
                "product_type": "apparel",
                "vendor": "Acme",
                "variants": [{"sku": "S-1", "price": "12.00", "inventory_quantity": 4}],
            },
            default_currency="USD",
        )
        assert product == {
            "name": "Shirt",
            "sku": "S-1",
            "price": "12.00",
            "currency": "USD",
            "inStock": True,
            "quantity": 4,
            "category": "apparel",
            "vendor": "Acme",
        }

    def test_bad_quantity_defaults_to_zero(self):
        product = normalize_product({"name": "X", "quantity": "many"})
        assert product["quantity"] == 0
        assert product["inStock"] is False
