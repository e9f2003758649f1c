"""列表过滤与排序

所有文本匹配都不区分大小写；未设置的条件不参与过滤。
函数均为纯函数，不修改入参顺序以外的任何状态。
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field
from socialhub.core.models import Community, Desabafo, Post, Priority, Task


class DateRange(BaseModel):
    """闭区间日期范围（任一端可为空）"""

    start: datetime | None = Field(default=None, description="起始时间")
    end: datetime | None = Field(default=None, description="结束时间")

    def excludes(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return True
        return self.end is not None and value > self.end


class PostFilter(BaseModel):
    """动态过滤条件"""

    search: str = Field(default="", description="搜索词（正文、作者名、话题）")
    date_range: DateRange | None = Field(default=None, description="创建时间范围")
    min_likes: int = Field(default=0, ge=0, description="最少点赞数")
    min_comments: int = Field(default=0, ge=0, description="最少评论数")
    has_media: bool = Field(default=False, description="仅含配图")
    keyword: str = Field(default="", description="正文关键词")


class DesabafoFilter(BaseModel):
    """倾诉过滤条件"""

    search: str = Field(default="", description="搜索词（正文、话题）")
    date_range: DateRange | None = Field(default=None, description="创建时间范围")
    min_reactions: int = Field(default=0, ge=0, description="最少反应总数")
    min_comments: int = Field(default=0, ge=0, description="最少评论数")


class TaskFilter(BaseModel):
    """任务过滤条件"""

    search: str = Field(default="", description="搜索词（标题、描述）")
    due_date: DateRange | None = Field(default=None, description="截止时间范围")
    status: Literal["all", "completed", "pending"] = Field(default="all", description="完成状态")
    priority: Priority | Literal["all"] = Field(default="all", description="优先级")
    tag: str = Field(default="", description="标签名（包含匹配）")


class CommunityFilter(BaseModel):
    """社区过滤条件"""

    search: str = Field(default="", description="搜索词（名称、简介）")
    created: DateRange | None = Field(default=None, description="创建时间范围")
    min_members: int = Field(default=0, ge=0, description="最少成员数")
    privacy: Literal["all", "public", "private"] = Field(default="all", description="可见性")
    category: str = Field(default="", description="分类")


def total_reactions(reactions: dict[str, int]) -> int:
    return sum(reactions.values())


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def filter_posts(posts: Iterable[Post], criteria: PostFilter) -> list[Post]:
    result = []
    for post in posts:
        term = criteria.search
        if term and not (
            _contains(post.content, term)
            or (post.author is not None and _contains(post.author.name, term))
            or any(_contains(h, term) for h in post.hashtags)
        ):
            continue
        if criteria.date_range and criteria.date_range.excludes(post.created_date):
            continue
        if post.likes_count < criteria.min_likes:
            continue
        if post.comments_count < criteria.min_comments:
            continue
        if criteria.has_media and not post.image_url:
            continue
        if criteria.keyword and not _contains(post.content, criteria.keyword):
            continue
        result.append(post)
    return result


def filter_desabafos(
    desabafos: Iterable[Desabafo],
    criteria: DesabafoFilter,
    sort_by: Literal["recent", "popular"] = "recent",
) -> list[Desabafo]:
    """过滤并排序倾诉：recent 按时间倒序，popular 按反应总数倒序"""
    result = []
    for item in desabafos:
        term = criteria.search
        if term and not (_contains(item.content, term) or any(_contains(h, term) for h in item.hashtags)):
            continue
        if criteria.date_range and criteria.date_range.excludes(item.created_date):
            continue
        if total_reactions(item.reactions) < criteria.min_reactions:
            continue
        if len(item.comments) < criteria.min_comments:
            continue
        result.append(item)

    if sort_by == "popular":
        return sorted(result, key=lambda d: total_reactions(d.reactions), reverse=True)
    return sorted(result, key=lambda d: d.created_date, reverse=True)


def filter_tasks(tasks: Iterable[Task], criteria: TaskFilter) -> list[Task]:
    result = []
    for task in tasks:
        term = criteria.search
        if term and not (_contains(task.title, term) or _contains(task.description, term)):
            continue
        # 没有截止时间的任务不受日期范围限制
        if criteria.due_date and task.due_date and criteria.due_date.excludes(task.due_date):
            continue
        if criteria.status == "completed" and not task.is_completed:
            continue
        if criteria.status == "pending" and task.is_completed:
            continue
        if criteria.priority != "all" and task.priority != criteria.priority:
            continue
        if criteria.tag and not any(_contains(t.name, criteria.tag) for t in task.tags):
            continue
        result.append(task)
    return result


def filter_communities(communities: Iterable[Community], criteria: CommunityFilter) -> list[Community]:
    result = []
    for community in communities:
        term = criteria.search
        if term and not (_contains(community.name, term) or _contains(community.description, term)):
            continue
        if criteria.created and criteria.created.excludes(community.created_date):
            continue
        if community.members_count < criteria.min_members:
            continue
        if criteria.privacy == "public" and community.is_private:
            continue
        if criteria.privacy == "private" and not community.is_private:
            continue
        if criteria.category and community.category.lower() != criteria.category.lower():
            continue
        result.append(community)
    return result
