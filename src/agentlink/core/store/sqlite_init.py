"""SQLite schema 初始化

tasks 表一行一个 Task：task_id 为主键，完整 Task 以线上 JSON 存放在 body 列，
session_id / state / updated_at 冗余出来供查询和排障。
schema 版本记录在 PRAGMA user_version 中。
"""

import aiosqlite

SCHEMA_VERSION = 1

_SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id     TEXT PRIMARY KEY,
    session_id  TEXT,
    state       TEXT NOT NULL,
    updated_at  TEXT NOT NULL,
    body        TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_tasks_state ON tasks(state);
CREATE INDEX IF NOT EXISTS idx_tasks_session ON tasks(session_id);
"""


async def _pragma(conn: aiosqlite.Connection, name: str) -> str | int | None:
    cursor = await conn.execute(f"PRAGMA {name};")
    row = await cursor.fetchone()
    return row[0] if row is not None else None


async def journal_mode(conn: aiosqlite.Connection) -> str:
    """当前 journal 模式（小写），WAL 生效时为 "wal" """
    return str(await _pragma(conn, "journal_mode")).lower()


async def init_db(conn: aiosqlite.Connection) -> None:
    """设置连接 PRAGMA 并建表

    Raises:
        RuntimeError: 数据库由更新版本的 schema 创建
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA synchronous = NORMAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    version = int(await _pragma(conn, "user_version") or 0)
    if version > SCHEMA_VERSION:
        raise RuntimeError(
            f"task database schema v{version} is newer than supported v{SCHEMA_VERSION}"
        )
    if version < SCHEMA_VERSION:
        await conn.executescript(_SCHEMA_V1)
        await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
    await conn.commit()
