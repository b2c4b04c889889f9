"""TaskStore 进程内实现

存入和取出都做深拷贝：调用方拿到的 Task 与存储内的对象互不影响，
失败的处理周期不会把半途修改带进存储。
"""

from ..models.task import Task


class InMemoryTaskStore:
    """TaskStore 的内存实现"""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    async def get(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        return task.model_copy(deep=True)

    async def save(self, task: Task) -> None:
        self._tasks[task.id] = task.model_copy(deep=True)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._tasks.clear()

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks
