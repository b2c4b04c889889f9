"""协议异常体系 -- 每个异常携带对应的 JSON-RPC 错误码

只有 RequestHandler 会把这些异常转换为响应信封。
"""

from typing import Any

from .models.jsonrpc import JSONRPCError

# JSON-RPC 2.0 标准错误码
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# A2A 协议错误码
TASK_NOT_FOUND = -32001
TASK_NOT_CANCELABLE = -32002
UNSUPPORTED_OPERATION = -32004


class A2AError(Exception):
    """协议基础异常"""

    code: int = INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, data: Any | None = None) -> None:
        """
        Args:
            message: 返回给调用方的错误描述，None 使用默认描述
            data: 可选的附加错误数据
        """
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def to_error(self) -> JSONRPCError:
        return JSONRPCError(code=self.code, message=self.message, data=self.data)


class JSONParseError(A2AError):
    code = PARSE_ERROR
    default_message = "Invalid JSON payload"


class InvalidRequestError(A2AError):
    code = INVALID_REQUEST
    default_message = "Request payload validation error"


class MethodNotFoundError(A2AError):
    code = METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParamsError(A2AError):
    code = INVALID_PARAMS
    default_message = "Invalid parameters"


class InternalError(A2AError):
    code = INTERNAL_ERROR
    default_message = "Internal error"


class TaskNotFoundError(A2AError):
    code = TASK_NOT_FOUND
    default_message = "Task not found"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskNotCancelableError(A2AError):
    code = TASK_NOT_CANCELABLE
    default_message = "Task cannot be canceled"


class UnsupportedOperationError(A2AError):
    """执行方未实现的可选能力（cancel / resubscribe）"""

    code = UNSUPPORTED_OPERATION
    default_message = "This operation is not supported"


class InvalidTransitionError(Exception):
    """状态机拒绝的流转 -- 服务端缺陷，对调用方只暴露通用 internal error"""

    def __init__(self, from_state: str, to_state: str) -> None:
        super().__init__(f"Invalid task state transition: {from_state} -> {to_state}")
        self.from_state = from_state
        self.to_state = to_state
