"""agentlink Core Store -- TaskStore 实现

提供工厂函数按配置创建 TaskStore（memory / sqlite）。
"""

from pathlib import Path

import aiosqlite

from .memory_store import InMemoryTaskStore
from .protocols import TaskStore
from .sqlite_init import init_db
from .sqlite_store import SqliteTaskStore


async def create_sqlite_task_store(db_path: str) -> SqliteTaskStore:
    """创建 SQLite TaskStore

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        已初始化的 SqliteTaskStore
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    try:
        await init_db(conn)
    except Exception:
        await conn.close()
        raise
    return SqliteTaskStore(conn)


async def create_task_store(backend: str, db_path: str | None = None) -> TaskStore:
    """按后端名称创建 TaskStore

    Args:
        backend: "memory" 或 "sqlite"
        db_path: sqlite 后端的数据库路径

    Raises:
        ValueError: 未知后端或 sqlite 缺少 db_path
    """
    if backend == "memory":
        return InMemoryTaskStore()
    if backend == "sqlite":
        if not db_path:
            raise ValueError("sqlite task store requires db_path")
        return await create_sqlite_task_store(db_path)
    raise ValueError(f"unknown task store backend: {backend}")


__all__ = [
    "TaskStore",
    "InMemoryTaskStore",
    "SqliteTaskStore",
    "create_task_store",
    "create_sqlite_task_store",
    "init_db",
]
