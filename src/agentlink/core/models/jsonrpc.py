"""JSON-RPC 2.0 信封与各方法的 params 模型"""

from typing import Any, Literal

from pydantic import Field

from .base import WireModel
from .message import Message

JSONRPC_VERSION = "2.0"

RequestId = str | int | None


class JSONRPCRequest(WireModel):
    """请求信封"""

    jsonrpc: Literal["2.0"]
    id: RequestId = None
    method: str = Field(min_length=1)
    params: dict[str, Any] | None = None


class JSONRPCError(WireModel):
    """错误对象"""

    code: int
    message: str
    data: Any | None = None

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            wire["data"] = self.data
        return wire


class JSONRPCResponse(WireModel):
    """响应信封 -- result 与 error 恰好出现其一"""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId = None
    result: Any | None = None
    error: JSONRPCError | None = None

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            wire["error"] = self.error.to_wire()
        else:
            wire["result"] = self.result
        return wire


class MessageSendParams(WireModel):
    """message/send 参数；携带 id 时按 task 发送处理"""

    id: str | None = Field(default=None, min_length=1)
    session_id: str | None = Field(default=None, alias="sessionId")
    message: Message
    metadata: dict[str, Any] | None = None


class TaskSendParams(WireModel):
    """tasks/send 与 tasks/sendSubscribe 参数"""

    id: str = Field(min_length=1)
    session_id: str | None = Field(default=None, alias="sessionId")
    message: Message
    metadata: dict[str, Any] | None = None


class TaskQueryParams(WireModel):
    """tasks/get 参数"""

    id: str = Field(min_length=1)
    history_length: int | None = Field(default=None, ge=0, alias="historyLength")
    metadata: dict[str, Any] | None = None


class TaskIdParams(WireModel):
    """tasks/cancel 与 tasks/resubscribe 参数"""

    id: str = Field(min_length=1)
    metadata: dict[str, Any] | None = None
