"""子任务树操作

状态机：每个节点 {incomplete, complete}。
- 切换某个子任务：翻转自身，并把所有后代强制设为同一新状态（只向下级联）
- 祖先和兄弟节点保持不变（不向上级联）
- 直接切换任务本身只改变 Task.is_completed，不触碰子任务

所有函数都是纯函数，返回新的树，不修改入参。
"""

from collections.abc import Iterable

from .config import MAX_SUBTASK_DEPTH
from .exceptions import SubtaskDepthError
from .models.task import Subtask, Task


def set_completed_recursive(subtasks: Iterable[Subtask], completed: bool) -> list[Subtask]:
    """把一组子树的所有节点设为同一完成状态"""
    return [
        sub.model_copy(
            update={
                "is_completed": completed,
                "subtasks": set_completed_recursive(sub.subtasks, completed),
            }
        )
        for sub in subtasks
    ]


def toggle_subtask_in_tree(
    subtasks: list[Subtask],
    subtask_id: str,
) -> tuple[list[Subtask], bool]:
    """在子任务树中切换指定节点

    Returns:
        (新的子任务树, 是否找到该节点)
    """
    result: list[Subtask] = []
    found = False
    for sub in subtasks:
        if found:
            result.append(sub)
            continue
        if sub.id == subtask_id:
            new_state = not sub.is_completed
            result.append(
                sub.model_copy(
                    update={
                        "is_completed": new_state,
                        "subtasks": set_completed_recursive(sub.subtasks, new_state),
                    }
                )
            )
            found = True
            continue
        children, found = toggle_subtask_in_tree(sub.subtasks, subtask_id)
        result.append(sub.model_copy(update={"subtasks": children}) if found else sub)
    return result, found


def toggle_subtask(task: Task, subtask_id: str) -> Task:
    """切换任务中的某个子任务

    Raises:
        KeyError: 子任务不存在
    """
    subtasks, found = toggle_subtask_in_tree(task.subtasks, subtask_id)
    if not found:
        raise KeyError(subtask_id)
    return task.model_copy(update={"subtasks": subtasks})


def toggle_task(task: Task) -> Task:
    """切换任务本身的完成状态（不影响子任务）"""
    return task.model_copy(update={"is_completed": not task.is_completed})


def find_subtask(subtasks: Iterable[Subtask], subtask_id: str) -> Subtask | None:
    """深度优先查找子任务"""
    for sub in subtasks:
        if sub.id == subtask_id:
            return sub
        nested = find_subtask(sub.subtasks, subtask_id)
        if nested is not None:
            return nested
    return None


def count_nodes(subtasks: Iterable[Subtask]) -> int:
    """统计子树节点总数"""
    return sum(1 + count_nodes(sub.subtasks) for sub in subtasks)


def tree_depth(subtasks: Iterable[Subtask]) -> int:
    """子任务树深度，空树为 0"""
    return max((1 + tree_depth(sub.subtasks) for sub in subtasks), default=0)


def validate_depth(subtasks: Iterable[Subtask], max_depth: int = MAX_SUBTASK_DEPTH) -> None:
    """校验子任务树深度

    Raises:
        SubtaskDepthError: 深度超过上限
    """
    depth = tree_depth(subtasks)
    if depth > max_depth:
        raise SubtaskDepthError(depth, max_depth)
