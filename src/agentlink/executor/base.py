"""AgentExecutor 接口 + 基类

Executor 是可插拔的领域逻辑：给定入站消息和（可选的）当前 Task，
产出一条出站消息和零或多个 Artifact。Executor 不得直接修改 Task，
所有修改都通过 state_machine 回流。
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import ClassVar, Protocol

from agentlink.core.models import (
    ARTIFACTS_REPLACED_KEY,
    AgentSkill,
    Message,
    StreamEvent,
    Task,
    TaskArtifactUpdateEvent,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
)

from .exceptions import UnsupportedOperationError
from .models import ExecutionRequest, ExecutionResult


class AgentExecutor(Protocol):
    """RequestHandler 依赖的 Executor 能力集合"""

    skills: ClassVar[tuple[AgentSkill, ...]]
    streaming: ClassVar[bool]

    async def on_message_send(
        self, request: ExecutionRequest, task: Task | None
    ) -> ExecutionResult:
        """处理一条入站消息，返回唯一的出站消息和可选 Artifact"""
        ...

    def on_message_stream(
        self, request: ExecutionRequest, task: Task | None
    ) -> AsyncIterator[StreamEvent]:
        """流式处理：有限、有序的事件序列，以 final 状态事件结束"""
        ...

    async def on_cancel(self, request: ExecutionRequest, task: Task) -> Message | None:
        """取消任务；不支持时抛出 UnsupportedOperationError"""
        ...

    def on_resubscribe(
        self, request: ExecutionRequest, task: Task
    ) -> AsyncIterator[StreamEvent]:
        """重新订阅任务事件；不支持时抛出 UnsupportedOperationError"""
        ...


class BaseAgentExecutor(ABC):
    """Executor 基类

    子类只需实现 on_message_send；流式处理由同一计算派生，
    每次调用独立执行，不可重放。cancel / resubscribe 默认不支持。
    """

    skills: ClassVar[tuple[AgentSkill, ...]] = ()
    streaming: ClassVar[bool] = True

    @abstractmethod
    async def on_message_send(
        self, request: ExecutionRequest, task: Task | None
    ) -> ExecutionResult: ...

    async def on_message_stream(
        self, request: ExecutionRequest, task: Task | None
    ) -> AsyncIterator[StreamEvent]:
        """working 状态 -> 每个 Artifact 一个事件 -> final 状态事件"""
        task_id = request.task_id or ""
        yield TaskStatusUpdateEvent(
            id=task_id,
            status=TaskStatus(state=TaskState.WORKING),
        )

        result = await self.on_message_send(request, task)

        for index, artifact in enumerate(result.artifacts or []):
            yield TaskArtifactUpdateEvent(
                id=task_id,
                artifact=artifact.model_copy(update={"index": index}),
            )

        final_state = TaskState.FAILED if result.is_failure else TaskState.COMPLETED
        # artifacts=[] 表示清空，同样需要标记
        metadata = {ARTIFACTS_REPLACED_KEY: True} if result.artifacts is not None else None
        yield TaskStatusUpdateEvent(
            id=task_id,
            status=TaskStatus(state=final_state, message=result.message),
            final=True,
            metadata=metadata,
        )

    async def on_cancel(self, request: ExecutionRequest, task: Task) -> Message | None:
        raise UnsupportedOperationError()

    async def on_resubscribe(
        self, request: ExecutionRequest, task: Task
    ) -> AsyncIterator[StreamEvent]:
        raise UnsupportedOperationError()
        yield  # pragma: no cover
