"""Task 状态机 -- 创建 / 开始处理 / 应用结果 / 取消

全部为内存中的确定性变换，不做 I/O；调用方负责持久化。
合法流转见 models.enums.VALID_TRANSITIONS：

    submitted -> working -> completed | failed
    submitted | working -> canceled（仅显式取消）
    completed | failed | canceled -> working（新的输入重新打开对话）
"""

from collections.abc import Sequence
from typing import Any

from .exceptions import InvalidTransitionError, TaskNotCancelableError
from .models.artifact import Artifact
from .models.enums import CANCELABLE_STATES, TaskState, validate_transition
from .models.message import Message
from .models.task import Task, TaskStatus


def create_task(
    task_id: str,
    session_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Task:
    """创建 submitted 状态的新 Task，history / artifacts 为空"""
    return Task(
        id=task_id,
        session_id=session_id,
        status=TaskStatus(state=TaskState.SUBMITTED),
        metadata=dict(metadata or {}),
    )


def transition(task: Task, to_state: TaskState, message: Message | None = None) -> Task:
    """把 Task 推进到 to_state（就地修改）

    Raises:
        InvalidTransitionError: 流转不合法
    """
    from_state = task.status.state
    if not validate_transition(from_state, to_state):
        raise InvalidTransitionError(from_state, to_state)
    task.status = TaskStatus(state=to_state, message=message)
    return task


def begin_processing(task: Task) -> Task:
    """进入 working；终态 Task 因新的输入被重新打开"""
    return transition(task, TaskState.WORKING)


def append_inbound(task: Task, message: Message) -> bool:
    """追加入站消息，与已有条目结构相同时跳过

    Returns:
        True 如果实际追加
    """
    if any(existing == message for existing in task.history):
        return False
    task.history.append(message)
    return True


def apply_result(
    task: Task,
    inbound: Message | None,
    outbound: Message,
    artifacts: Sequence[Artifact] | None = None,
    failed: bool = False,
) -> Task:
    """把一次处理周期的结果应用到 Task

    1. inbound 追加到 history（结构去重）
    2. outbound 总是追加到 history
    3. status = failed ? failed : completed，携带 outbound
    4. artifacts 不为 None 时整体替换（不合并），index 按位置重排

    Task 尚未处于 working 时先经过 working，submitted 不会直接跳到终态。

    Returns:
        同一个 Task 对象（已修改）
    """
    if outbound is None:
        raise ValueError("apply_result requires an outbound message")

    if task.status.state != TaskState.WORKING:
        begin_processing(task)

    if inbound is not None:
        append_inbound(task, inbound)
    task.history.append(outbound)

    to_state = TaskState.FAILED if failed else TaskState.COMPLETED
    transition(task, to_state, message=outbound)

    if artifacts is not None:
        task.artifacts = [
            artifact.model_copy(update={"index": position})
            for position, artifact in enumerate(artifacts)
        ]
    return task


def cancel_task(task: Task, message: Message | None = None) -> Task:
    """取消 submitted / working 的 Task

    Raises:
        TaskNotCancelableError: Task 已在终态
    """
    if task.status.state not in CANCELABLE_STATES:
        raise TaskNotCancelableError(
            f"Task {task.id} is already in terminal state: {task.status.state}"
        )
    return transition(task, TaskState.CANCELED, message=message)
