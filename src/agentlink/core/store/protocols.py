"""Store Protocol 接口定义

使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models.task import Task


class TaskStore(Protocol):
    """Task 存储接口 -- tasks/get 查询的唯一数据源

    同一 task_id 的 get/save 顺序由调用方（RequestHandler 的 per-id 锁）保证。
    """

    async def get(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务，不存在返回 None"""
        ...

    async def save(self, task: Task) -> None:
        """按 task.id upsert，整体覆盖已有记录（last-write-wins）"""
        ...

    async def ping(self) -> bool:
        """Readiness 探测"""
        ...

    async def close(self) -> None:
        """释放后端资源"""
        ...
