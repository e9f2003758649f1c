"""TaskRepository -- tasks 表访问"""

from datetime import UTC, datetime

from socialhub.core.models import Task

from ..rows import parse_rows, parse_task_row, task_record
from .base import BaseRepository


class TaskRepository(BaseRepository):
    """任务读写；子任务树、标签、附件以 JSON 列整体保存"""

    async def get_tasks(self, user_id: str | None = None) -> list[Task]:
        """读取任务（按创建时间倒序），user_id 为 None 时读取全部"""

        async def _run() -> list[Task]:
            rows = await self._client.select(
                "tasks",
                eq={"user_id": user_id} if user_id else None,
                order_by="created_at",
                descending=True,
            )
            return parse_rows(rows, parse_task_row, "tasks")

        return await self._call("get_tasks", _run(), [])

    async def get_task_ids(self) -> set[str] | None:
        """后端已有的任务 id；后端失败返回 None"""

        async def _run() -> set[str]:
            rows = await self._client.select("tasks", columns=["id"])
            return {r["id"] for r in rows}

        return await self._call("get_task_ids", _run(), None)

    async def create_task(self, task: Task) -> Task | None:
        async def _run() -> Task:
            record = task_record(task)
            record["created_at"] = datetime.now(UTC).isoformat()
            row = await self._client.insert("tasks", record)
            return parse_task_row(row)

        return await self._call("create_task", _run(), None)

    async def update_task(self, task: Task) -> Task | None:
        """整体更新任务（表单保存或完成状态切换）"""

        async def _run() -> Task | None:
            record = task_record(task)
            task_id = record.pop("id")
            rows = await self._client.update("tasks", record, eq={"id": task_id})
            return parse_task_row(rows[0]) if rows else None

        return await self._call("update_task", _run(), None)

    async def delete_task(self, task_id: str) -> bool:
        async def _run() -> bool:
            return await self._client.delete("tasks", eq={"id": task_id}) > 0

        return await self._call("delete_task", _run(), False)
