"""TaskStore SQLite 实现

一行一个 Task，完整 Task 以线上 JSON 格式存放在 body 列。
save 为 upsert（INSERT ... ON CONFLICT DO UPDATE）并立即提交。
"""

import asyncio
import json

import aiosqlite

from ..models.task import Task, utc_timestamp


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        # 共享连接上的 execute + commit 需成对执行
        self._write_lock = asyncio.Lock()

    @property
    def conn(self) -> aiosqlite.Connection:
        return self._conn

    async def get(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            "SELECT body FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def save(self, task: Task) -> None:
        """按 task_id upsert，整体覆盖"""
        async with self._write_lock:
            await self._upsert(task)

    async def _upsert(self, task: Task) -> None:
        try:
            await self._conn.execute(
                """
                INSERT INTO tasks (task_id, session_id, state, updated_at, body)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(task_id) DO UPDATE SET
                    session_id = excluded.session_id,
                    state = excluded.state,
                    updated_at = excluded.updated_at,
                    body = excluded.body
                """,
                (
                    task.id,
                    task.session_id,
                    task.status.state.value,
                    utc_timestamp(),
                    json.dumps(task.to_wire(), ensure_ascii=False),
                ),
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    async def ping(self) -> bool:
        cursor = await self._conn.execute("SELECT 1")
        row = await cursor.fetchone()
        return row is not None

    async def close(self) -> None:
        await self._conn.close()

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task.model_validate(json.loads(row[0]))
