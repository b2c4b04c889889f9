"""Executor 装配 -- 按配置创建 Executor 并生成 AgentCard"""

import httpx
import structlog

from agentlink.core.models import AgentCapabilities, AgentCard, AgentProvider

from .base import BaseAgentExecutor
from .catalog import CatalogAgentExecutor
from .config import ExecutorConfig
from .greeting import GreetingAgentExecutor

log = structlog.get_logger()

_DEFAULT_NAMES = {
    "greeting": ("Greeting Agent", "Replies to greeting tasks"),
    "catalog": ("Catalog Agent", "Answers product inventory queries from a catalog"),
}


def create_executor(
    config: ExecutorConfig,
    http_client: httpx.AsyncClient | None = None,
) -> BaseAgentExecutor:
    """根据 config.executor 创建 Executor

    Args:
        config: Executor 配置
        http_client: 可选的 httpx 客户端（catalog 使用，便于测试注入）
    """
    if config.executor == "catalog":
        executor: BaseAgentExecutor = CatalogAgentExecutor(
            catalog_url=config.catalog_url,
            timeout_s=config.catalog_timeout_s,
            http_client=http_client,
        )
    else:
        executor = GreetingAgentExecutor(signature=config.greeting_signature)

    log.info(
        "executor_created",
        executor=config.executor,
        skills=[skill.id for skill in executor.skills],
    )
    return executor


def build_agent_card(config: ExecutorConfig, executor: BaseAgentExecutor) -> AgentCard:
    """由配置与 Executor 能力生成 AgentCard"""
    default_name, default_description = _DEFAULT_NAMES.get(
        config.executor, ("A2A Agent", None)
    )
    return AgentCard(
        name=config.agent_name or default_name,
        description=config.agent_description or default_description,
        url=config.agent_url,
        version=config.agent_version,
        provider=AgentProvider(organization="agentlink"),
        capabilities=AgentCapabilities(streaming=executor.streaming),
        default_input_modes=["text", "data"],
        default_output_modes=["text", "data"],
        skills=list(executor.skills),
    )
