"""ExecutorConfig -- Executor 配置加载

从环境变量加载：选择哪个 Executor、目录服务地址，以及 AgentCard 的自描述信息。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

_DEFAULT_CATALOG_TIMEOUT_S = 10


class ExecutorConfig(BaseModel):
    """Executor 配置 -- 从环境变量加载

    环境变量:
        AGENTLINK_EXECUTOR: greeting（默认）/ catalog
        AGENTLINK_CATALOG_URL: 目录服务基础 URL
        AGENTLINK_CATALOG_TIMEOUT_S: 目录请求超时（秒，默认 10）
        AGENTLINK_AGENT_NAME / AGENTLINK_AGENT_DESCRIPTION /
        AGENTLINK_AGENT_URL / AGENTLINK_AGENT_VERSION: AgentCard 字段
    """

    executor: Literal["greeting", "catalog"] = Field(
        default="greeting",
        description="Executor 类型",
    )
    catalog_url: str = Field(
        default="http://localhost:3000",
        description="目录服务基础 URL（仅 catalog 使用）",
    )
    catalog_timeout_s: int = Field(
        default=_DEFAULT_CATALOG_TIMEOUT_S,
        ge=1,
        description="目录请求超时（秒）",
    )
    greeting_signature: str = Field(
        default="Agent B",
        description="问候语落款（仅 greeting 使用）",
    )
    agent_name: str | None = Field(default=None, description="AgentCard.name，None 按 Executor 推导")
    agent_description: str | None = Field(default=None, description="AgentCard.description")
    agent_url: str = Field(default="http://localhost:8000/", description="AgentCard.url")
    agent_version: str = Field(default="1.0.0", description="AgentCard.version")


def load_executor_config() -> ExecutorConfig:
    """从环境变量加载 Executor 配置

    Returns:
        ExecutorConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("AGENTLINK_EXECUTOR"):
        kwargs["executor"] = val.lower()

    if val := os.environ.get("AGENTLINK_CATALOG_URL"):
        kwargs["catalog_url"] = val

    if val := os.environ.get("AGENTLINK_CATALOG_TIMEOUT_S"):
        try:
            kwargs["catalog_timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="AGENTLINK_CATALOG_TIMEOUT_S",
                value=val,
                fallback=_DEFAULT_CATALOG_TIMEOUT_S,
            )
            # 使用默认值，不阻塞启动

    if val := os.environ.get("AGENTLINK_GREETING_SIGNATURE"):
        kwargs["greeting_signature"] = val

    if val := os.environ.get("AGENTLINK_AGENT_NAME"):
        kwargs["agent_name"] = val

    if val := os.environ.get("AGENTLINK_AGENT_DESCRIPTION"):
        kwargs["agent_description"] = val

    if val := os.environ.get("AGENTLINK_AGENT_URL"):
        kwargs["agent_url"] = val

    if val := os.environ.get("AGENTLINK_AGENT_VERSION"):
        kwargs["agent_version"] = val

    return ExecutorConfig(**kwargs)
