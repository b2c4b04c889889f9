"""agentlink Executor -- 可插拔的领域逻辑

executor 包的公开接口导出。
"""

# 接口与数据模型
from .base import AgentExecutor, BaseAgentExecutor

# 内置 Executor
from .catalog import CatalogAgentExecutor, normalize_product

# 配置
from .config import ExecutorConfig, load_executor_config

# 异常
from .exceptions import CatalogPayloadError, CatalogUnreachableError, ExecutorError
from .greeting import GreetingAgentExecutor
from .models import ExecutionRequest, ExecutionResult
from .registry import build_agent_card, create_executor

__all__ = [
    "AgentExecutor",
    "BaseAgentExecutor",
    "ExecutionRequest",
    "ExecutionResult",
    "GreetingAgentExecutor",
    "CatalogAgentExecutor",
    "normalize_product",
    "ExecutorConfig",
    "load_executor_config",
    "create_executor",
    "build_agent_card",
    "ExecutorError",
    "CatalogUnreachableError",
    "CatalogPayloadError",
]
