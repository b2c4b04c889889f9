"""Task 数据模型 -- 对齐 A2A Task 规范

id 由调用方提供，创建后不可变，是 TaskStore 的唯一主键。
history 只追加；status 的流转由 state_machine 控制。
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from .artifact import Artifact
from .base import WireModel
from .enums import TERMINAL_STATES, TaskState
from .message import Message


def utc_timestamp() -> str:
    """当前 UTC 时间的 ISO-8601 字符串"""
    return datetime.now(UTC).isoformat()


class TaskStatus(WireModel):
    """Task 当前状态"""

    state: TaskState = Field(description="状态")
    message: Message | None = Field(default=None, description="伴随状态的消息")
    timestamp: str = Field(default_factory=utc_timestamp, description="ISO-8601 时间戳")


class Task(WireModel):
    """Task 数据模型 -- 一个由调用方 id 标识的有状态工作单元"""

    id: str = Field(min_length=1, description="调用方提供的唯一标识")
    session_id: str | None = Field(default=None, alias="sessionId", description="会话标识")
    status: TaskStatus = Field(description="当前状态")
    history: list[Message] = Field(default_factory=list, description="对话历史，只追加")
    artifacts: list[Artifact] = Field(default_factory=list, description="结构化输出")
    metadata: dict[str, Any] = Field(default_factory=dict, description="附加元数据")

    @property
    def is_terminal(self) -> bool:
        return self.status.state in TERMINAL_STATES

    def with_history_limit(self, history_length: int | None) -> "Task":
        """返回只保留最近 history_length 条历史的副本（仅用于响应视图）"""
        if history_length is None or history_length >= len(self.history):
            return self
        kept = self.history[-history_length:] if history_length > 0 else []
        return self.model_copy(update={"history": list(kept)})
