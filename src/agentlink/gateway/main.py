"""FastAPI 应用主文件

app 创建 + lifespan 管理：TaskStore 初始化/关闭 + Executor 装配 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from agentlink.core.config import STREAM_QUEUE_MAXSIZE, get_db_path, get_store_backend
from agentlink.core.store import TaskStore, create_task_store
from agentlink.executor import (
    AgentExecutor,
    build_agent_card,
    create_executor,
    load_executor_config,
)

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import agent_card, health, jsonrpc
from .services.request_handler import RequestHandler

log = structlog.get_logger()


def install_components(
    app: FastAPI,
    task_store: TaskStore,
    executor: AgentExecutor | None = None,
) -> None:
    """把运行时组件挂到 app.state（lifespan 与测试共用）"""
    config = load_executor_config()
    if executor is None:
        executor = create_executor(config)

    app.state.executor_config = config
    app.state.task_store = task_store
    app.state.executor = executor
    app.state.agent_card = build_agent_card(config, executor)
    app.state.request_handler = RequestHandler(
        executor=executor,
        task_store=task_store,
        stream_queue_maxsize=STREAM_QUEUE_MAXSIZE,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 Store 与 Executor，关闭时清理连接"""
    backend = get_store_backend()
    db_path = get_db_path() if backend == "sqlite" else None
    task_store = await create_task_store(backend, db_path)
    install_components(app, task_store)
    log.info(
        "gateway_started",
        store_backend=backend,
        executor=app.state.executor_config.executor,
    )

    yield

    # 关闭：清理 Store
    if getattr(app.state, "task_store", None) is not None:
        await app.state.task_store.close()
    log.info("gateway_stopped")


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="agentlink A2A Server",
        version="0.1.0",
        description="A2A JSON-RPC task exchange",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()
    setup_logfire(app)

    # 注册路由
    app.include_router(jsonrpc.router, tags=["jsonrpc"])
    app.include_router(agent_card.router, tags=["discovery"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（ASGI 服务器入口）
app = create_app()
