"""RequestHandler -- JSON-RPC 方法分发

一个请求信封进，一个（或流式的一串）响应信封出：
1. 校验信封与 params
2. 按 method 分发到对应处理函数，得到 Outcome
3. TaskUpdateOutcome 由统一的 commit 步骤持久化
4. 异常转换为 JSON-RPC 错误信封

同一 task id 的读-改-写（含持久化）在 per-id 锁内串行执行；
不同 task id 之间互不阻塞。
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from agentlink.core.config import STREAM_QUEUE_MAXSIZE
from agentlink.core.exceptions import (
    A2AError,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    TaskNotCancelableError,
    TaskNotFoundError,
)
from agentlink.core.models import (
    ARTIFACTS_REPLACED_KEY,
    Artifact,
    JSONRPCRequest,
    JSONRPCResponse,
    Message,
    MessageSendParams,
    RequestId,
    StreamEvent,
    Task,
    TaskArtifactUpdateEvent,
    TaskIdParams,
    TaskQueryParams,
    TaskSendParams,
    TaskState,
    TaskStatusUpdateEvent,
)
from agentlink.core.state_machine import (
    apply_result,
    begin_processing,
    cancel_task,
    create_task,
)
from agentlink.core.store import TaskStore
from agentlink.executor import AgentExecutor, ExecutionRequest

from .stream_channel import StreamChannel

log = structlog.get_logger()

ParamsT = TypeVar("ParamsT", bound=BaseModel)

STREAMING_METHODS = frozenset({"tasks/sendSubscribe", "tasks/resubscribe"})

# 每个请求绑定到 structlog contextvars 的键，请求结束时解绑
_RPC_CONTEXT_KEYS = ("rpc_method", "rpc_id", "task_id")


# ============================================================
# Outcome -- 方法处理结果
# ============================================================


@dataclass(frozen=True)
class MessageOutcome:
    """无状态回复，不触及 TaskStore"""

    message: Message


@dataclass(frozen=True)
class TaskUpdateOutcome:
    """Task 已修改，需要持久化"""

    task: Task


@dataclass(frozen=True)
class TaskViewOutcome:
    """只读视图，不持久化"""

    task: Task


Outcome = MessageOutcome | TaskUpdateOutcome | TaskViewOutcome


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    refcount: int = 0


def _request_id_of(payload: Any) -> RequestId:
    """从（可能不合法的）信封中尽量取出 id，用于错误响应"""
    if isinstance(payload, dict):
        request_id = payload.get("id")
        if isinstance(request_id, str | int) and not isinstance(request_id, bool):
            return request_id
    return None


def success_envelope(request_id: RequestId, result: Any) -> dict[str, Any]:
    return JSONRPCResponse(id=request_id, result=result).to_wire()


def error_envelope(request_id: RequestId, error: A2AError) -> dict[str, Any]:
    return JSONRPCResponse(id=request_id, error=error.to_error()).to_wire()


class RequestHandler:
    """JSON-RPC 分发器

    Args:
        executor: 领域逻辑
        task_store: Task 持久化
        stream_queue_maxsize: 流式通道容量
    """

    def __init__(
        self,
        executor: AgentExecutor,
        task_store: TaskStore,
        stream_queue_maxsize: int = STREAM_QUEUE_MAXSIZE,
    ) -> None:
        self._executor = executor
        self._store = task_store
        self._stream_queue_maxsize = stream_queue_maxsize
        # task_id -> 引用计数的锁，无等待者时移除
        self._locks: dict[str, _LockEntry] = {}
        self._methods: dict[str, Callable[[JSONRPCRequest], Awaitable[Outcome]]] = {
            "message/send": self._on_message_send,
            "tasks/send": self._on_task_send,
            "tasks/get": self._on_task_get,
            "tasks/cancel": self._on_task_cancel,
        }

    # ============================================================
    # 公共入口
    # ============================================================

    @staticmethod
    def is_streaming(payload: Any) -> bool:
        """信封的 method 是否需要流式响应"""
        return isinstance(payload, dict) and payload.get("method") in STREAMING_METHODS

    @property
    def active_lock_count(self) -> int:
        return len(self._locks)

    async def handle(self, payload: Any) -> dict[str, Any]:
        """处理非流式请求，返回响应信封；不抛出异常"""
        request_id = _request_id_of(payload)
        try:
            request = self._parse_request(payload)
            request_id = request.id
            structlog.contextvars.bind_contextvars(
                rpc_method=request.method, rpc_id=request_id
            )
            if request.method in STREAMING_METHODS:
                raise InvalidRequestError(
                    f"Method {request.method} requires a streaming transport"
                )
            method = self._methods.get(request.method)
            if method is None:
                raise MethodNotFoundError(f"Method not found: {request.method}")

            outcome = await method(request)
            log.debug("rpc_request_handled", outcome=type(outcome).__name__)
            return success_envelope(request_id, self._render(outcome))
        except A2AError as e:
            self._log_error(e)
            return error_envelope(request_id, e)
        except Exception:
            log.exception("rpc_internal_error", rpc_id=request_id)
            return error_envelope(request_id, InternalError())
        finally:
            structlog.contextvars.unbind_contextvars(*_RPC_CONTEXT_KEYS)

    async def handle_stream(self, payload: Any) -> AsyncIterator[dict[str, Any]]:
        """处理流式请求，逐个产出响应信封；不抛出异常

        非流式 method 退化为单个响应信封。
        """
        if not self.is_streaming(payload):
            yield await self.handle(payload)
            return

        request_id = _request_id_of(payload)
        try:
            request = self._parse_request(payload)
            request_id = request.id
            structlog.contextvars.bind_contextvars(
                rpc_method=request.method, rpc_id=request_id
            )
            if request.method == "tasks/sendSubscribe":
                events = self._on_send_subscribe(request)
            else:
                events = self._on_resubscribe(request)

            async for event in events:
                yield success_envelope(request_id, event.to_wire())
        except A2AError as e:
            self._log_error(e)
            yield error_envelope(request_id, e)
        except Exception:
            log.exception("rpc_internal_error", rpc_id=request_id)
            yield error_envelope(request_id, InternalError())
        finally:
            structlog.contextvars.unbind_contextvars(*_RPC_CONTEXT_KEYS)

    # ============================================================
    # 非流式方法
    # ============================================================

    async def _on_message_send(self, request: JSONRPCRequest) -> Outcome:
        params = self._parse_params(MessageSendParams, request)
        if params.id is not None:
            # 带 id 的 message/send 按 task 发送处理
            task_params = TaskSendParams(
                id=params.id,
                session_id=params.session_id,
                message=params.message,
                metadata=params.metadata,
            )
            return await self._send_task(request, task_params)

        exec_request = ExecutionRequest(
            request_id=request.id,
            method=request.method,
            session_id=params.session_id,
            message=params.message,
            metadata=params.metadata or {},
        )
        result = await self._executor.on_message_send(exec_request, None)
        return MessageOutcome(message=result.message)

    async def _on_task_send(self, request: JSONRPCRequest) -> Outcome:
        params = self._parse_params(TaskSendParams, request)
        return await self._send_task(request, params)

    async def _send_task(self, request: JSONRPCRequest, params: TaskSendParams) -> Outcome:
        structlog.contextvars.bind_contextvars(task_id=params.id)

        async def run() -> Outcome:
            task = await self._load_or_create(params)
            exec_request = self._execution_request(request, params)
            result = await self._executor.on_message_send(
                exec_request, task.model_copy(deep=True)
            )
            apply_result(
                task,
                params.message,
                result.message,
                result.artifacts,
                failed=result.is_failure,
            )
            log.info(
                "task_processed",
                state=task.status.state,
                history_length=len(task.history),
                artifact_count=len(task.artifacts),
            )
            return TaskUpdateOutcome(task=task)

        return await self._run_locked(params.id, run)

    async def _on_task_get(self, request: JSONRPCRequest) -> Outcome:
        params = self._parse_params(TaskQueryParams, request)
        structlog.contextvars.bind_contextvars(task_id=params.id)

        async def run() -> Outcome:
            task = await self._require_task(params.id)
            return TaskViewOutcome(task=task.with_history_limit(params.history_length))

        return await self._run_locked(params.id, run)

    async def _on_task_cancel(self, request: JSONRPCRequest) -> Outcome:
        params = self._parse_params(TaskIdParams, request)
        structlog.contextvars.bind_contextvars(task_id=params.id)

        async def run() -> Outcome:
            task = await self._require_task(params.id)
            if task.is_terminal:
                raise TaskNotCancelableError(
                    f"Task {task.id} is already in terminal state: {task.status.state}"
                )
            exec_request = ExecutionRequest(
                request_id=request.id,
                method=request.method,
                task_id=task.id,
                session_id=task.session_id,
                metadata=params.metadata or {},
            )
            message = await self._executor.on_cancel(exec_request, task.model_copy(deep=True))
            cancel_task(task, message)
            log.info("task_canceled")
            return TaskUpdateOutcome(task=task)

        return await self._run_locked(params.id, run)

    # ============================================================
    # 流式方法
    # ============================================================

    async def _on_send_subscribe(self, request: JSONRPCRequest) -> AsyncIterator[StreamEvent]:
        """执行方事件经有界通道转发；final 事件到达时先持久化再产出"""
        params = self._parse_params(TaskSendParams, request)
        structlog.contextvars.bind_contextvars(task_id=params.id)

        async with self._task_lock(params.id):
            task = await self._load_or_create(params)
            exec_request = self._execution_request(request, params)
            channel: StreamChannel[StreamEvent] = StreamChannel(self._stream_queue_maxsize)
            producer = asyncio.create_task(
                self._pump(
                    channel,
                    self._executor.on_message_stream(exec_request, task.model_copy(deep=True)),
                )
            )

            artifacts: list[Artifact] = []
            finished = False
            try:
                async for event in channel:
                    if isinstance(event, TaskArtifactUpdateEvent):
                        artifacts.append(event.artifact)
                    elif event.final:
                        self._apply_final(task, params.message, event, artifacts)
                        await self._commit(TaskUpdateOutcome(task=task))
                        finished = True
                        yield event
                        break
                    yield event

                if not finished:
                    # 执行方异常在此处重新抛出
                    await producer
                    raise InternalError("Stream ended without a final event")
            finally:
                if not producer.done():
                    producer.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await producer

        log.info("task_stream_completed", state=task.status.state)

    async def _on_resubscribe(self, request: JSONRPCRequest) -> AsyncIterator[StreamEvent]:
        params = self._parse_params(TaskIdParams, request)
        structlog.contextvars.bind_contextvars(task_id=params.id)

        async with self._task_lock(params.id):
            task = await self._require_task(params.id)

        exec_request = ExecutionRequest(
            request_id=request.id,
            method=request.method,
            task_id=task.id,
            session_id=task.session_id,
            metadata=params.metadata or {},
        )
        async for event in self._executor.on_resubscribe(exec_request, task):
            yield event

    @staticmethod
    async def _pump(
        channel: StreamChannel[StreamEvent], events: AsyncIterator[StreamEvent]
    ) -> None:
        """生产方：把执行方事件送入通道，结束（含异常）时关闭通道"""
        try:
            async for event in events:
                await channel.send(event)
        finally:
            channel.close()

    @staticmethod
    def _apply_final(
        task: Task,
        inbound: Message,
        event: TaskStatusUpdateEvent,
        artifacts: list[Artifact],
    ) -> None:
        """final 事件 -> apply_result

        收到过 Artifact 事件，或 final 事件标记了 artifactsReplaced 时整体替换
        Task.artifacts（后者允许清空）；否则保留已有 artifacts。
        """
        state = event.status.state
        outbound = event.status.message
        if state not in (TaskState.COMPLETED, TaskState.FAILED) or outbound is None:
            raise InternalError("Final stream event must complete or fail with a message")
        replaced = bool(artifacts) or bool((event.metadata or {}).get(ARTIFACTS_REPLACED_KEY))
        apply_result(
            task,
            inbound,
            outbound,
            artifacts if replaced else None,
            failed=state == TaskState.FAILED,
        )

    # ============================================================
    # 内部工具
    # ============================================================

    @contextlib.asynccontextmanager
    async def _task_lock(self, task_id: str) -> AsyncIterator[None]:
        """per-id 锁；引用计数归零时从表中移除"""
        entry = self._locks.get(task_id)
        if entry is None:
            entry = _LockEntry()
            self._locks[task_id] = entry
        entry.refcount += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.refcount -= 1
            if entry.refcount == 0:
                self._locks.pop(task_id, None)

    async def _run_locked(
        self, task_id: str, run: Callable[[], Awaitable[Outcome]]
    ) -> Outcome:
        async with self._task_lock(task_id):
            outcome = await run()
            await self._commit(outcome)
        return outcome

    async def _commit(self, outcome: Outcome) -> None:
        if isinstance(outcome, TaskUpdateOutcome):
            await self._store.save(outcome.task)

    async def _require_task(self, task_id: str) -> Task:
        task = await self._store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def _load_or_create(self, params: TaskSendParams) -> Task:
        """读取已有 Task 或新建，并推进到 working"""
        task = await self._store.get(params.id)
        if task is None:
            task = create_task(params.id, params.session_id, params.metadata)
            log.info("task_created")
        else:
            if params.metadata:
                task.metadata.update(params.metadata)
            if task.session_id is None and params.session_id is not None:
                task.session_id = params.session_id

        if task.status.state != TaskState.WORKING:
            begin_processing(task)
        return task

    @staticmethod
    def _execution_request(request: JSONRPCRequest, params: TaskSendParams) -> ExecutionRequest:
        return ExecutionRequest(
            request_id=request.id,
            method=request.method,
            task_id=params.id,
            session_id=params.session_id,
            message=params.message,
            metadata=params.metadata or {},
        )

    @staticmethod
    def _parse_request(payload: Any) -> JSONRPCRequest:
        if not isinstance(payload, dict):
            raise InvalidRequestError("Request must be a JSON object")
        try:
            return JSONRPCRequest.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequestError(data=_validation_details(e)) from e

    @staticmethod
    def _parse_params(model: type[ParamsT], request: JSONRPCRequest) -> ParamsT:
        try:
            return model.model_validate(request.params or {})
        except ValidationError as e:
            raise InvalidParamsError(data=_validation_details(e)) from e

    @staticmethod
    def _render(outcome: Outcome) -> dict[str, Any]:
        if isinstance(outcome, MessageOutcome):
            return outcome.message.to_wire()
        return outcome.task.to_wire()

    @staticmethod
    def _log_error(error: A2AError) -> None:
        log.warning("rpc_error", code=error.code, error=error.message)


def _validation_details(error: ValidationError) -> list[dict[str, str]]:
    """ValidationError -> 可 JSON 序列化的字段错误列表"""
    return [
        {
            "field": ".".join(str(loc) for loc in item["loc"]),
            "message": item["msg"],
        }
        for item in error.errors()
    ]
