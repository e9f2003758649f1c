"""TaskService -- 任务管理

表单保存、删除、完成状态切换、批量导入都经过 OptimisticCoordinator。
子任务树深度在进入 Coordinator 之前校验（表单级错误，不触发回滚）。
"""

from typing import Any

import structlog
from pydantic import BaseModel, Field
from socialhub.backend.repositories import TaskRepository
from socialhub.core.cancellation import CancellationToken, is_cancelled
from socialhub.core.coordinator import MutationResult, MutationStatus, OptimisticCoordinator
from socialhub.core.exceptions import TaskImportError
from socialhub.core.ids import new_id
from socialhub.core.models import Priority, Task
from socialhub.core.notifier import Notifier, error_toast, success_toast
from socialhub.core.state import TaskStore
from socialhub.core.subtasks import toggle_subtask, toggle_task, validate_depth

from ..task_io import export_tasks, import_tasks

log = structlog.get_logger()


class TaskStats(BaseModel):
    """任务概览"""

    completed: int = Field(default=0, description="已完成")
    pending: int = Field(default=0, description="未完成")
    urgent: int = Field(default=0, description="紧急且未完成")


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        tasks: TaskRepository,
        store: TaskStore,
        coordinator: OptimisticCoordinator,
        notifier: Notifier | None = None,
        fallback_tasks: list[Task] | None = None,
    ) -> None:
        self._tasks = tasks
        self._store = store
        self._coordinator = coordinator
        self._notifier = notifier
        self._fallback_tasks = list(fallback_tasks or [])

    @property
    def store(self) -> TaskStore:
        return self._store

    async def load(self, user_id: str | None = None, token: CancellationToken | None = None) -> list[Task]:
        """加载任务；后端无数据或失败时使用内置数据"""
        tasks = await self._tasks.get_tasks(user_id)
        if not tasks and self._fallback_tasks:
            log.info("tasks_fallback_used", count=len(self._fallback_tasks))
            tasks = [t.model_copy(deep=True) for t in self._fallback_tasks]
        if is_cancelled(token):
            return []
        self._store.set_all(tasks)
        return self._store.all()

    async def create(
        self,
        title: str,
        *,
        user_id: str | None = None,
        token: CancellationToken | None = None,
        **fields: Any,
    ) -> MutationResult[Task]:
        """创建任务（插入到最前）

        Raises:
            SubtaskDepthError: 子任务嵌套过深
            ValidationError: 字段无效
        """
        task = Task.model_validate({**fields, "id": new_id("task"), "title": title, "user_id": user_id})
        validate_depth(task.subtasks)
        result = await self._coordinator.mutate(
            self._store,
            task.id,
            lambda _current: task,
            self._tasks.create_task,
            operation="create_task",
            error="Não foi possível criar a tarefa.",
            server_id=lambda created: created.id,
            token=token,
        )
        if result.ok:
            self._notify(success_toast("Tarefa criada com sucesso."))
        return result

    async def update(
        self,
        task_id: str,
        token: CancellationToken | None = None,
        **fields: Any,
    ) -> MutationResult[Task]:
        """表单保存：用 fields 覆盖任务字段

        Raises:
            KeyError: 任务不存在
            SubtaskDepthError: 子任务嵌套过深
        """
        current = self._require(task_id)
        # 先校验一次，表单错误不进入 Coordinator
        validate_depth(self._merge(current, fields).subtasks)
        result = await self._coordinator.mutate(
            self._store,
            task_id,
            lambda task: self._merge(task, fields),
            self._tasks.update_task,
            operation="update_task",
            error="Não foi possível atualizar a tarefa.",
            token=token,
        )
        if result.ok:
            self._notify(success_toast("Tarefa atualizada com sucesso."))
        return result

    async def delete(self, task_id: str, token: CancellationToken | None = None) -> MutationResult[Task]:
        self._require(task_id)
        return await self._coordinator.mutate(
            self._store,
            task_id,
            lambda _task: None,
            lambda _none: self._tasks.delete_task(task_id),
            operation="delete_task",
            error="Não foi possível excluir a tarefa.",
            token=token,
        )

    async def toggle_completion(
        self,
        task_id: str,
        subtask_id: str | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[Task]:
        """切换完成状态

        subtask_id 为 None 时只切换任务本身；否则切换该子任务并向下级联。

        Raises:
            KeyError: 任务或子任务不存在
        """
        self._require(task_id)

        def _apply(task: Task | None) -> Task:
            if subtask_id is None:
                return toggle_task(task)
            return toggle_subtask(task, subtask_id)

        return await self._coordinator.mutate(
            self._store,
            task_id,
            _apply,
            self._tasks.update_task,
            operation="toggle_task_completion",
            error="Não foi possível atualizar a tarefa.",
            token=token,
        )

    async def import_tasks(self, text: str | bytes, token: CancellationToken | None = None) -> MutationResult[Task]:
        """导入任务文件：追加到现有列表末尾，整体成功或整体回滚

        文件格式无效时发出错误提示，不修改列表。
        """
        try:
            imported = import_tasks(text)
        except TaskImportError as e:
            log.warning("task_import_invalid", error=str(e))
            self._notify(
                error_toast(
                    "O arquivo está corrompido ou em formato inválido.",
                    title="Erro de Importação",
                )
            )
            return MutationResult(MutationStatus.ROLLED_BACK, error=e)

        # id 去重在集合锁内进行，看到的是导入开始时的最新列表
        batch: list[Task] = []

        def _apply(items: list[Task]) -> list[Task]:
            batch[:] = self._with_unique_ids(imported, [t.id for t in items])
            return [*items, *batch]

        async def _persist(_items: list[Task]) -> bool:
            for task in batch:
                if await self._tasks.create_task(task) is None:
                    return False
            return True

        result = await self._coordinator.mutate_collection(
            self._store,
            _apply,
            _persist,
            operation="import_tasks",
            error=error_toast("Não foi possível importar as tarefas.", title="Erro de Importação"),
            token=token,
        )
        if result.ok:
            log.info("tasks_imported", count=len(batch))
            self._notify(success_toast("Tarefas importadas."))
        return result

    def export_tasks(self) -> str:
        return export_tasks(self._store.all())

    def stats(self) -> TaskStats:
        tasks = self._store.all()
        return TaskStats(
            completed=sum(1 for t in tasks if t.is_completed),
            pending=sum(1 for t in tasks if not t.is_completed),
            urgent=sum(1 for t in tasks if t.priority == Priority.URGENT and not t.is_completed),
        )

    @staticmethod
    def _with_unique_ids(imported: list[Task], existing_ids: list[str]) -> list[Task]:
        """与现有任务或同一文件内重复的 id 重新分配"""
        seen = set(existing_ids)
        result = []
        for task in imported:
            if task.id in seen:
                new_task_id = new_id("task")
                log.info("imported_task_id_reassigned", old_id=task.id, new_id=new_task_id)
                task = task.model_copy(update={"id": new_task_id})
            seen.add(task.id)
            result.append(task)
        return result

    @staticmethod
    def _merge(task: Task, fields: dict[str, Any]) -> Task:
        return Task.model_validate({**task.model_dump(), **fields})

    def _require(self, task_id: str) -> Task:
        task = self._store.get(task_id)
        if task is None:
            raise KeyError(task_id)
        return task

    def _notify(self, toast) -> None:
        if self._notifier is not None:
            self._notifier.notify(toast)
