"""CatalogAgentExecutor -- 外部商品目录查询

通过 httpx 调用外部目录 GET {catalog_url}/products，
把商品统一为标准字段后作为 data Artifact 返回。
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog

from agentlink.core.models import (
    AgentSkill,
    Artifact,
    Role,
    Task,
    extract_structured,
    text_message,
    utc_timestamp,
)

from .base import BaseAgentExecutor
from .exceptions import CatalogPayloadError, CatalogUnreachableError
from .models import ExecutionRequest, ExecutionResult

log = structlog.get_logger()

# 连接类异常类型集合（触发 CatalogUnreachableError）
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    TimeoutError,
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.NetworkError,
)

INVENTORY_SKILL = AgentSkill(
    id="product-inventory",
    name="Product Inventory",
    description="Returns the current product inventory from the catalog",
    tags=["catalog", "inventory", "products"],
    examples=["Get all products from inventory"],
)

ARTIFACT_NAME = "product-inventory"


def normalize_product(raw: dict[str, Any], default_currency: str | None = None) -> dict[str, Any]:
    """把目录返回的商品统一为标准字段

    支持扁平格式（name/sku/price/quantity）和 variants 格式（title + variants[0]）。
    """
    variant: dict[str, Any] = {}
    variants = raw.get("variants")
    if isinstance(variants, list) and variants and isinstance(variants[0], dict):
        variant = variants[0]

    quantity = raw.get("quantity", variant.get("inventory_quantity", 0))
    try:
        quantity = int(quantity or 0)
    except (TypeError, ValueError):
        quantity = 0

    in_stock = raw.get("inStock")
    if in_stock is None:
        in_stock = quantity > 0

    return {
        "name": raw.get("name") or raw.get("title"),
        "sku": raw.get("sku") or variant.get("sku"),
        "price": raw.get("price", variant.get("price")),
        "currency": raw.get("currency") or default_currency,
        "inStock": bool(in_stock),
        "quantity": quantity,
        "category": raw.get("category") or raw.get("product_type"),
        "vendor": raw.get("vendor"),
    }


class CatalogAgentExecutor(BaseAgentExecutor):
    """商品目录 Executor

    请求格式:
        - 文本（如 "Get all products from inventory"）：查询全部商品
        - data Part {"action": "get_products", "filters": {"category": ...}}：按条件查询
    """

    skills = (INVENTORY_SKILL,)
    streaming = True

    def __init__(
        self,
        catalog_url: str,
        timeout_s: int = 10,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            catalog_url: 目录服务基础 URL
            timeout_s: 请求超时（秒）
            http_client: 外部注入的 httpx 客户端，None 时每次调用自建
        """
        self._catalog_url = catalog_url.rstrip("/")
        self._timeout_s = timeout_s
        self._http_client = http_client

    async def on_message_send(
        self, request: ExecutionRequest, task: Task | None
    ) -> ExecutionResult:
        structured = extract_structured(request.message)
        action = "get_products"
        filters: dict[str, Any] = {}
        if isinstance(structured, dict):
            action = structured.get("action", action)
            if isinstance(structured.get("filters"), dict):
                filters = structured["filters"]

        if action != "get_products":
            return self._failure(f"Unsupported catalog action: {action}")

        start_time = time.monotonic()
        response = await self._fetch_products(filters)
        duration_ms = int((time.monotonic() - start_time) * 1000)

        if not response.is_success:
            log.warning(
                "catalog_request_failed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            return self._failure(
                f"Catalog request failed with status {response.status_code}"
            )

        inventory = self._parse_inventory(response)
        log.info(
            "catalog_request_completed",
            product_count=len(inventory["products"]),
            duration_ms=duration_ms,
        )

        shop = inventory["metadata"].get("shop") or "the catalog"
        summary = f"Found {len(inventory['products'])} products in {shop}"
        return ExecutionResult(
            message=text_message(Role.AGENT, summary),
            artifacts=[
                Artifact.from_data(
                    inventory,
                    name=ARTIFACT_NAME,
                    description="Product inventory from the catalog",
                )
            ],
        )

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._timeout_s) as client:
            yield client

    async def _fetch_products(self, filters: dict[str, Any]) -> httpx.Response:
        """调用目录服务

        Raises:
            CatalogUnreachableError: 连接失败或超时
        """
        params = {
            key: value
            for key, value in filters.items()
            if isinstance(value, str | int | float | bool)
        }
        url = f"{self._catalog_url}/products"
        try:
            async with self._client() as client:
                return await client.get(url, params=params, timeout=self._timeout_s)
        except _CONNECTION_ERROR_TYPES as e:
            log.error(
                "catalog_unreachable",
                catalog_url=self._catalog_url,
                error_type=type(e).__name__,
            )
            raise CatalogUnreachableError(self._catalog_url, e) from e

    @staticmethod
    def _parse_inventory(response: httpx.Response) -> dict[str, Any]:
        """解析目录响应为 {"products": [...], "metadata": {...}}

        Raises:
            CatalogPayloadError: 响应不是 JSON 或结构无法识别
        """
        try:
            body = response.json()
        except ValueError as e:
            raise CatalogPayloadError("Catalog returned invalid JSON") from e

        if isinstance(body, list):
            raw_products, shop_info = body, {}
        elif isinstance(body, dict) and isinstance(body.get("products"), list):
            raw_products, shop_info = body["products"], body
        else:
            raise CatalogPayloadError()

        currency = shop_info.get("currency")
        products = [
            normalize_product(p, currency) for p in raw_products if isinstance(p, dict)
        ]
        return {
            "products": products,
            "metadata": {
                "shop": shop_info.get("shop"),
                "currency": currency or "USD",
                "total": shop_info.get("total", len(products)),
                "lastSync": shop_info.get("lastSync") or utc_timestamp(),
            },
        }

    @staticmethod
    def _failure(text: str) -> ExecutionResult:
        return ExecutionResult(message=text_message(Role.AGENT, text), is_failure=True)

