"""测试辅助 -- 脚本化 Executor 与 JSON-RPC 信封构造"""

from collections.abc import AsyncIterator

from agentlink.core.models import (
    Artifact,
    Message,
    Role,
    StreamEvent,
    Task,
    TaskArtifactUpdateEvent,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
    extract_text,
    text_message,
)
from agentlink.executor import (
    BaseAgentExecutor,
    ExecutionRequest,
    ExecutionResult,
)


class EchoExecutor(BaseAgentExecutor):
    """回显入站文本；文本为 "boom" 时抛出异常，"fail" 时返回失败结果"""

    def __init__(self) -> None:
        self.calls: list[ExecutionRequest] = []

    async def on_message_send(
        self, request: ExecutionRequest, task: Task | None
    ) -> ExecutionResult:
        self.calls.append(request)
        text = extract_text(request.message)
        if text == "boom":
            raise RuntimeError("secret executor failure")
        if text == "fail":
            return ExecutionResult(message=text_message(Role.AGENT, "failed"), is_failure=True)
        return ExecutionResult(
            message=text_message(Role.AGENT, f"echo: {text}"),
            artifacts=[Artifact.from_text(text, name="echo")],
        )


class CancelableExecutor(EchoExecutor):
    """支持取消"""

    async def on_cancel(self, request: ExecutionRequest, task: Task) -> Message | None:
        return text_message(Role.AGENT, "canceled by request")


class ScriptedStreamExecutor(EchoExecutor):
    """按脚本产出流式事件"""

    def __init__(self, events: list[StreamEvent], error: Exception | None = None) -> None:
        super().__init__()
        self._events = events
        self._error = error

    async def on_message_stream(
        self, request: ExecutionRequest, task: Task | None
    ) -> AsyncIterator[StreamEvent]:
        for event in self._events:
            yield event
        if self._error is not None:
            raise self._error


def status_event(
    task_id: str, state: TaskState, text: str | None = None, final: bool = False
) -> TaskStatusUpdateEvent:
    message = text_message(Role.AGENT, text) if text is not None else None
    return TaskStatusUpdateEvent(
        id=task_id, status=TaskStatus(state=state, message=message), final=final
    )


def artifact_event(task_id: str, text: str) -> TaskArtifactUpdateEvent:
    return TaskArtifactUpdateEvent(id=task_id, artifact=Artifact.from_text(text))


def rpc(method: str, params: dict | None = None, request_id: str | int | None = 1) -> dict:
    """构造 JSON-RPC 请求信封"""
    payload: dict = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def user_text(text: str) -> dict:
    """线上格式的用户文本消息"""
    return text_message(Role.USER, text).to_wire()
