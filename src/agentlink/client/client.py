"""A2A Client -- 通过 httpx 调用 A2A 服务

A2ACardResolver 读取发现文档；A2AClient 发送 JSON-RPC 请求，
sendSubscribe 的 SSE 响应逐条解析为 StreamEvent。
"""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError
from ulid import ULID

from agentlink.core.models import (
    JSONRPC_VERSION,
    AgentCard,
    Message,
    StreamEvent,
    Task,
)

from .exceptions import A2AClientHTTPError, A2AClientJSONRPCError

log = structlog.get_logger()

AGENT_CARD_PATH = "/.well-known/agent.json"

_STREAM_EVENT_ADAPTER: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


class _HTTPClientMixin:
    """外部注入 httpx 客户端时复用，否则每次调用自建"""

    _http_client: httpx.AsyncClient | None
    _timeout_s: float

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._timeout_s) as client:
            yield client


class A2ACardResolver(_HTTPClientMixin):
    """发现文档解析器"""

    def __init__(
        self,
        base_url: str,
        agent_card_path: str = AGENT_CARD_PATH,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 30,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._agent_card_path = "/" + agent_card_path.lstrip("/")
        self._http_client = http_client
        self._timeout_s = timeout_s

    async def get_agent_card(self) -> AgentCard:
        """GET {base_url}/.well-known/agent.json

        Raises:
            A2AClientHTTPError: 请求失败或响应无法解析为 AgentCard
        """
        url = f"{self._base_url}{self._agent_card_path}"
        async with self._client() as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise A2AClientHTTPError(e.response.status_code, str(e)) from e
            except httpx.RequestError as e:
                raise A2AClientHTTPError(503, f"Network communication error: {e}") from e

        try:
            return AgentCard.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise A2AClientHTTPError(response.status_code, f"Invalid agent card: {e}") from e


class A2AClient(_HTTPClientMixin):
    """A2A JSON-RPC 客户端

    Args:
        url: 服务端 JSON-RPC 地址；为 None 时取 agent_card.url
        agent_card: 可选的 AgentCard
        http_client: 可选的 httpx 客户端
        timeout_s: 自建客户端的超时（秒）
    """

    def __init__(
        self,
        url: str | None = None,
        agent_card: AgentCard | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 30,
    ) -> None:
        if url is None:
            if agent_card is None:
                raise ValueError("A2AClient requires either url or agent_card")
            url = agent_card.url
        self._url = url
        self._http_client = http_client
        self._timeout_s = timeout_s

    @property
    def url(self) -> str:
        return self._url

    # ============================================================
    # 方法
    # ============================================================

    async def send_message(
        self,
        message: Message,
        session_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Message:
        """message/send -- 无状态请求，返回 agent 回复"""
        params = self._send_params(None, message, session_id, metadata)
        result = await self._send_request("message/send", params)
        return Message.model_validate(result)

    async def send_task(
        self,
        task_id: str,
        message: Message,
        session_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Task:
        """tasks/send -- 创建或继续 Task"""
        params = self._send_params(task_id, message, session_id, metadata)
        result = await self._send_request("tasks/send", params)
        return Task.model_validate(result)

    async def get_task(self, task_id: str, history_length: int | None = None) -> Task:
        """tasks/get"""
        params: dict[str, Any] = {"id": task_id}
        if history_length is not None:
            params["historyLength"] = history_length
        result = await self._send_request("tasks/get", params)
        return Task.model_validate(result)

    async def cancel_task(self, task_id: str) -> Task:
        """tasks/cancel"""
        result = await self._send_request("tasks/cancel", {"id": task_id})
        return Task.model_validate(result)

    async def send_task_subscribe(
        self,
        task_id: str,
        message: Message,
        session_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """tasks/sendSubscribe -- 逐个产出流式事件，直到 final 事件

        Raises:
            A2AClientJSONRPCError: 流中出现错误信封
            A2AClientHTTPError: HTTP 层失败
        """
        payload = self._envelope(
            "tasks/sendSubscribe",
            self._send_params(task_id, message, session_id, metadata),
        )
        async with self._client() as client:
            try:
                async with client.stream(
                    "POST",
                    self._url,
                    json=payload,
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    if response.status_code >= 400:
                        await response.aread()
                        raise A2AClientHTTPError(response.status_code, response.text)

                    content_type = response.headers.get("content-type", "")
                    if content_type.startswith("application/json"):
                        # 服务端在进入流式前就返回了错误信封
                        await response.aread()
                        self._unwrap(self._decode(response.text, response.status_code))
                        return

                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        envelope = self._decode(line[len("data:"):].strip(), response.status_code)
                        event = _STREAM_EVENT_ADAPTER.validate_python(self._unwrap(envelope))
                        yield event
                        if getattr(event, "final", False):
                            return
            except httpx.RequestError as e:
                raise A2AClientHTTPError(503, f"Network communication error: {e}") from e

    # ============================================================
    # 内部工具
    # ============================================================

    @staticmethod
    def _send_params(
        task_id: str | None,
        message: Message,
        session_id: str | None,
        metadata: dict[str, Any] | None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"message": message.to_wire()}
        if task_id is not None:
            params["id"] = task_id
        if session_id is not None:
            params["sessionId"] = session_id
        if metadata is not None:
            params["metadata"] = metadata
        return params

    @staticmethod
    def _envelope(method: str, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": str(ULID()),
            "method": method,
            "params": params,
        }

    async def _send_request(self, method: str, params: dict[str, Any]) -> Any:
        payload = self._envelope(method, params)
        log.debug("a2a_client_request", rpc_method=method, rpc_id=payload["id"])
        async with self._client() as client:
            try:
                response = await client.post(self._url, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise A2AClientHTTPError(e.response.status_code, str(e)) from e
            except httpx.RequestError as e:
                raise A2AClientHTTPError(503, f"Network communication error: {e}") from e

        return self._unwrap(self._decode(response.text, response.status_code))

    @staticmethod
    def _decode(text: str, status_code: int) -> dict[str, Any]:
        try:
            body = json.loads(text)
        except ValueError as e:
            raise A2AClientHTTPError(status_code, f"Invalid JSON response: {e}") from e
        if not isinstance(body, dict):
            raise A2AClientHTTPError(status_code, "Response is not a JSON-RPC envelope")
        return body

    @staticmethod
    def _unwrap(envelope: dict[str, Any]) -> Any:
        """取出 result；错误信封抛出 A2AClientJSONRPCError"""
        error = envelope.get("error")
        if error is not None:
            raise A2AClientJSONRPCError(
                code=error.get("code", 0),
                message=error.get("message", ""),
                data=error.get("data"),
            )
        return envelope.get("result")
