"""配置常量模块 -- 可通过环境变量覆盖

包含 TaskStore 后端选择、SQLite 路径、流式通道容量、SSE 心跳间隔等可配置项。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("AGENTLINK_DATA_DIR", "data"))


def get_store_backend() -> str:
    """获取 TaskStore 后端：memory（默认）/ sqlite"""
    return os.environ.get("AGENTLINK_STORE_BACKEND", "memory").lower()


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "AGENTLINK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "agentlink.db"),
    )


# 流式事件通道容量（满时生产方等待，不丢事件）
STREAM_QUEUE_MAXSIZE: int = int(
    os.environ.get("AGENTLINK_STREAM_QUEUE_MAXSIZE", "64")
)

# SSE 心跳间隔（秒）
SSE_PING_INTERVAL: int = int(
    os.environ.get("AGENTLINK_SSE_PING_INTERVAL", "15")
)
