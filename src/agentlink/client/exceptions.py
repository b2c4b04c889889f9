"""Client 异常体系"""

from typing import Any


class A2AClientError(Exception):
    """Client 基础异常"""


class A2AClientHTTPError(A2AClientError):
    """HTTP 层失败（连接失败、非 2xx 状态码、响应体不是 JSON）"""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"HTTP Error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class A2AClientJSONRPCError(A2AClientError):
    """服务端返回了 JSON-RPC 错误信封"""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        super().__init__(f"JSON-RPC Error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data
