"""全局 pytest 配置 -- TaskStore fixture + SSE 状态重置"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio

from agentlink.core.store import InMemoryTaskStore, SqliteTaskStore, create_sqlite_task_store


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse-starlette 的退出事件按事件循环创建，每个测试使用新循环前重置"""
    from sse_starlette.sse import AppStatus

    if hasattr(AppStatus, "should_exit_event"):
        AppStatus.should_exit_event = None
    yield


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def memory_store() -> AsyncGenerator[InMemoryTaskStore, None]:
    """提供内存 TaskStore"""
    store = InMemoryTaskStore()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sqlite_store(tmp_db_path: Path) -> AsyncGenerator[SqliteTaskStore, None]:
    """提供已初始化的临时 SQLite TaskStore"""
    store = await create_sqlite_task_store(str(tmp_db_path))
    yield store
    await store.close()
