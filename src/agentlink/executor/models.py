"""数据模型 -- ExecutionRequest + ExecutionResult

Executor 与 RequestHandler 之间传递的唯一两种结构。
"""

from typing import Any

from pydantic import BaseModel, Field

from agentlink.core.models import Artifact, Message, RequestId


class ExecutionRequest(BaseModel):
    """交给 Executor 的入站请求"""

    request_id: RequestId = Field(default=None, description="JSON-RPC 请求 id")
    method: str = Field(description="JSON-RPC 方法名")
    task_id: str | None = Field(default=None, description="Task ID，message/send 时为 None")
    session_id: str | None = Field(default=None, description="会话标识")
    message: Message | None = Field(default=None, description="入站消息，cancel 时为 None")
    metadata: dict[str, Any] = Field(default_factory=dict, description="请求元数据")


class ExecutionResult(BaseModel):
    """一次处理周期的产出

    is_failure=True 表示“已处理但结果失败”，对应 Task 的 failed 状态，
    不是协议错误。
    """

    message: Message = Field(description="唯一的出站消息")
    artifacts: list[Artifact] | None = Field(
        default=None,
        description="结构化输出；None 表示本次不替换 Task 的 artifacts",
    )
    is_failure: bool = Field(default=False, description="是否为失败结果")
