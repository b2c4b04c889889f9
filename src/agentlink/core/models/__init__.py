"""agentlink Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .agent_card import (
    AgentAuthentication,
    AgentCapabilities,
    AgentCard,
    AgentProvider,
    AgentSkill,
)
from .artifact import Artifact
from .base import WireModel
from .enums import (
    CANCELABLE_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    Role,
    TaskState,
    validate_transition,
)
from .events import (
    ARTIFACTS_REPLACED_KEY,
    StreamEvent,
    TaskArtifactUpdateEvent,
    TaskStatusUpdateEvent,
)
from .jsonrpc import (
    JSONRPC_VERSION,
    JSONRPCError,
    JSONRPCRequest,
    JSONRPCResponse,
    MessageSendParams,
    RequestId,
    TaskIdParams,
    TaskQueryParams,
    TaskSendParams,
)
from .message import (
    DataPart,
    FileContent,
    FilePart,
    Message,
    Part,
    TextPart,
    extract_structured,
    extract_text,
    text_message,
)
from .task import Task, TaskStatus, utc_timestamp

__all__ = [
    # 枚举
    "TaskState",
    "Role",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "CANCELABLE_STATES",
    "validate_transition",
    # Message / Part
    "WireModel",
    "Message",
    "Part",
    "TextPart",
    "DataPart",
    "FilePart",
    "FileContent",
    "extract_text",
    "extract_structured",
    "text_message",
    # Task
    "Task",
    "TaskStatus",
    "utc_timestamp",
    # Artifact
    "Artifact",
    # 流式事件
    "ARTIFACTS_REPLACED_KEY",
    "StreamEvent",
    "TaskStatusUpdateEvent",
    "TaskArtifactUpdateEvent",
    # JSON-RPC
    "JSONRPC_VERSION",
    "RequestId",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCError",
    "MessageSendParams",
    "TaskSendParams",
    "TaskQueryParams",
    "TaskIdParams",
    # AgentCard
    "AgentCard",
    "AgentSkill",
    "AgentCapabilities",
    "AgentProvider",
    "AgentAuthentication",
]
