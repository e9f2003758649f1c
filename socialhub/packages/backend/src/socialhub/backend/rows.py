"""后端行 <-> 领域实体映射

后端返回的行是松散类型的 dict；每种实体有显式的解析函数，
无法映射时抛出 RowParseError，而不是把不完整的数据交给界面。
*_record 函数构造插入/更新载荷（列名与表结构一致）。
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError
from socialhub.core.exceptions import RowParseError
from socialhub.core.models import (
    CalendarEvent,
    Community,
    Conversation,
    Desabafo,
    Message,
    Post,
    Priority,
    Tag,
    Task,
    User,
)

log = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

Row = Mapping[str, Any]


def _validate(model: type[M], table: str, row: Row, data: Mapping[str, Any]) -> M:
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise RowParseError(table, row.get("id"), f"{e.error_count()} 个字段无效") from e


def _without_none(row: Row) -> dict[str, Any]:
    """去掉值为 NULL 的列，让模型默认值生效"""
    return {k: v for k, v in row.items() if v is not None}


# --- users ---


def parse_user_row(row: Row) -> User:
    return _validate(User, "users", row, _without_none(row))


def user_record(user: User) -> dict[str, Any]:
    data = user.model_dump(mode="json")
    # email 列唯一：未填写的邮箱存为 NULL
    data["email"] = data["email"] or None
    return data


# --- posts ---


def parse_post_row(row: Row, authors: Mapping[str, User] | None = None) -> Post:
    """解析帖子行

    Args:
        row: posts 表行
        authors: author_id -> User（第二次查询得到），缺失时 author 为 None
    """
    data = _without_none(row)
    author_id = data.pop("author_id", None)
    data["author"] = (authors or {}).get(author_id) if author_id else None
    return _validate(Post, "posts", row, data)


def post_record(post: Post) -> dict[str, Any]:
    data = post.model_dump(mode="json", exclude={"author"})
    data["author_id"] = post.author.id if post.author else None
    return data


# --- desabafos ---


def parse_desabafo_row(row: Row) -> Desabafo:
    data = _without_none(row)
    if "created_at" in data:
        data["created_date"] = data.pop("created_at")
    return _validate(Desabafo, "desabafos", row, data)


def desabafo_record(desabafo: Desabafo) -> dict[str, Any]:
    data = desabafo.model_dump(mode="json")
    data["created_at"] = data.pop("created_date")
    return data


# --- tasks ---

# 任务表中存在但模型不使用的列
_TASK_IGNORED_COLUMNS = ("created_at", "start_time", "end_time")


def parse_task_row(row: Row) -> Task:
    """解析任务行；priority 缺失时默认 medium，is_public 缺失时默认公开"""
    data = _without_none(row)
    for column in _TASK_IGNORED_COLUMNS:
        data.pop(column, None)
    data.setdefault("priority", Priority.MEDIUM.value)
    data.setdefault("is_public", True)
    data.setdefault("description", "")
    return _validate(Task, "tasks", row, data)


def task_record(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json", by_alias=True)


# --- conversations / messages ---


def parse_conversation_row(row: Row, participants: Mapping[str, User] | None = None) -> Conversation:
    data = _without_none(row)
    participant_id = data.get("participant_id")
    if participant_id and participants:
        data["participant"] = participants.get(participant_id)
    return _validate(Conversation, "conversations", row, data)


def conversation_record(conversation: Conversation) -> dict[str, Any]:
    return conversation.model_dump(mode="json", exclude={"participant"})


def parse_message_row(row: Row) -> Message:
    return _validate(Message, "messages", row, _without_none(row))


def message_record(message: Message) -> dict[str, Any]:
    return message.model_dump(mode="json")


# --- communities / tags / events ---


def parse_community_row(row: Row) -> Community:
    return _validate(Community, "communities", row, _without_none(row))


def community_record(community: Community) -> dict[str, Any]:
    return community.model_dump(mode="json")


def parse_tag_row(row: Row) -> Tag:
    return _validate(Tag, "tags", row, _without_none(row))


def tag_record(tag: Tag) -> dict[str, Any]:
    return tag.model_dump(mode="json")


def parse_event_row(row: Row) -> CalendarEvent:
    return _validate(CalendarEvent, "events", row, _without_none(row))


def event_record(event: CalendarEvent) -> dict[str, Any]:
    return event.model_dump(mode="json")


def parse_rows(
    rows: Iterable[Row],
    parser: Callable[[Row], M],
    table: str,
) -> list[M]:
    """批量解析，跳过无法解析的行并记录 warning"""
    result: list[M] = []
    for row in rows:
        try:
            result.append(parser(row))
        except RowParseError as e:
            log.warning("row_parse_failed", table=table, row_id=e.row_id, reason=e.reason)
    return result
