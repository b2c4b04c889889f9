"""枚举定义 -- 对齐 A2A 协议 TaskState / Role / Part 类型

包含 TaskState 状态机、Role 枚举，
以及 VALID_TRANSITIONS 合法流转映射和 TERMINAL_STATES 终态集合。
"""

from enum import StrEnum


class TaskState(StrEnum):
    """Task 状态机 -- 线上格式为小写字符串"""

    SUBMITTED = "submitted"
    WORKING = "working"

    # 终态（一次处理周期的终点）
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


# 合法状态流转
VALID_TRANSITIONS: dict[TaskState, set[TaskState]] = {
    TaskState.SUBMITTED: {TaskState.WORKING, TaskState.CANCELED},
    TaskState.WORKING: {
        TaskState.COMPLETED,
        TaskState.FAILED,
        TaskState.CANCELED,
    },
    # 终态只能由新的输入重新打开（多轮对话）
    TaskState.COMPLETED: {TaskState.WORKING},
    TaskState.FAILED: {TaskState.WORKING},
    TaskState.CANCELED: {TaskState.WORKING},
}

TERMINAL_STATES: set[TaskState] = {
    TaskState.COMPLETED,
    TaskState.FAILED,
    TaskState.CANCELED,
}

# 可被取消的状态
CANCELABLE_STATES: set[TaskState] = {
    TaskState.SUBMITTED,
    TaskState.WORKING,
}


class Role(StrEnum):
    """消息发送方"""

    USER = "user"
    AGENT = "agent"


def validate_transition(from_state: TaskState, to_state: TaskState) -> bool:
    """验证状态流转是否合法

    Args:
        from_state: 当前状态
        to_state: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_state, set())
    return to_state in allowed
