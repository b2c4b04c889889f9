"""流式事件模型 -- tasks/sendSubscribe 的每个响应 result

事件按产生顺序投递；最后一个事件为 final=True 的状态事件。
"""

from typing import Annotated, Any, Literal

from pydantic import Field

from .artifact import Artifact
from .base import WireModel
from .task import TaskStatus

# final 事件 metadata 标记：本周期整体替换 Task.artifacts，无 Artifact 事件时即清空
ARTIFACTS_REPLACED_KEY = "artifactsReplaced"


class TaskStatusUpdateEvent(WireModel):
    """状态更新事件"""

    type: Literal["taskStatusUpdate"] = "taskStatusUpdate"
    id: str = Field(description="Task ID")
    status: TaskStatus
    final: bool = Field(default=False, description="是否为流的终止事件")
    metadata: dict[str, Any] | None = None


class TaskArtifactUpdateEvent(WireModel):
    """Artifact 产出事件"""

    type: Literal["taskArtifactUpdate"] = "taskArtifactUpdate"
    id: str = Field(description="Task ID")
    artifact: Artifact
    metadata: dict[str, Any] | None = None


StreamEvent = Annotated[
    TaskStatusUpdateEvent | TaskArtifactUpdateEvent,
    Field(discriminator="type"),
]
