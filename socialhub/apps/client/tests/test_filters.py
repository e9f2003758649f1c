"""列表过滤测试"""

from datetime import UTC, datetime, timedelta

from socialhub.client.filters import (
    CommunityFilter,
    DateRange,
    DesabafoFilter,
    PostFilter,
    TaskFilter,
    filter_communities,
    filter_desabafos,
    filter_posts,
    filter_tasks,
)
from socialhub.core.models import Comment, Community, Desabafo, DesabafoComment, Post, Priority, Tag, Task, User

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class TestFilterPosts:
    def _posts(self) -> list[Post]:
        return [
            Post(id="p1", author=User(id="u1", name="Ana"), content="Praia hoje", hashtags=["#verão"],
                 likes_count=10, created_date=NOW),
            Post(id="p2", content="Estudando Python", image_url="http://img", likes_count=1,
                 comments=[Comment(id="c", content="x")], comments_count=1, created_date=NOW - timedelta(days=10)),
            Post(id="p3", content="Nada demais", created_date=NOW - timedelta(days=1)),
        ]

    def test_search_matches_content_author_and_hashtags(self):
        posts = self._posts()
        assert [p.id for p in filter_posts(posts, PostFilter(search="ana"))] == ["p1"]
        assert [p.id for p in filter_posts(posts, PostFilter(search="VERÃO"))] == ["p1"]
        assert [p.id for p in filter_posts(posts, PostFilter(search="python"))] == ["p2"]

    def test_numeric_and_media_filters(self):
        posts = self._posts()
        assert [p.id for p in filter_posts(posts, PostFilter(min_likes=5))] == ["p1"]
        assert [p.id for p in filter_posts(posts, PostFilter(min_comments=1))] == ["p2"]
        assert [p.id for p in filter_posts(posts, PostFilter(has_media=True))] == ["p2"]

    def test_date_range(self):
        criteria = PostFilter(date_range=DateRange(start=NOW - timedelta(days=2)))
        assert [p.id for p in filter_posts(self._posts(), criteria)] == ["p1", "p3"]

    def test_no_criteria_keeps_everything(self):
        assert len(filter_posts(self._posts(), PostFilter())) == 3


class TestFilterDesabafos:
    def _items(self) -> list[Desabafo]:
        return [
            Desabafo(id="d1", content="cansada", reactions={"❤️": 1}, created_date=NOW - timedelta(days=1)),
            Desabafo(id="d2", content="feliz", reactions={"❤️": 3, "😂": 2}, created_date=NOW - timedelta(days=3),
                     comments=[DesabafoComment(id="c", content="!")]),
            Desabafo(id="d3", content="sem reações", created_date=NOW),
        ]

    def test_recent_order(self):
        assert [d.id for d in filter_desabafos(self._items(), DesabafoFilter())] == ["d3", "d1", "d2"]

    def test_popular_order(self):
        result = filter_desabafos(self._items(), DesabafoFilter(), sort_by="popular")
        assert [d.id for d in result] == ["d2", "d1", "d3"]

    def test_min_reactions_and_comments(self):
        assert [d.id for d in filter_desabafos(self._items(), DesabafoFilter(min_reactions=2))] == ["d2"]
        assert [d.id for d in filter_desabafos(self._items(), DesabafoFilter(min_comments=1))] == ["d2"]


class TestFilterTasks:
    def _tasks(self) -> list[Task]:
        return [
            Task(id="t1", title="Relatório", priority=Priority.URGENT, due_date=NOW,
                 tags=[Tag(id="g", name="Trabalho")]),
            Task(id="t2", title="Academia", is_completed=True, due_date=NOW + timedelta(days=30)),
            Task(id="t3", title="Ler", description="livro de relatórios"),
        ]

    def test_status_and_priority(self):
        tasks = self._tasks()
        assert [t.id for t in filter_tasks(tasks, TaskFilter(status="completed"))] == ["t2"]
        assert [t.id for t in filter_tasks(tasks, TaskFilter(status="pending"))] == ["t1", "t3"]
        assert [t.id for t in filter_tasks(tasks, TaskFilter(priority=Priority.URGENT))] == ["t1"]

    def test_search_title_and_description(self):
        assert [t.id for t in filter_tasks(self._tasks(), TaskFilter(search="relat"))] == ["t1", "t3"]

    def test_due_date_range_keeps_tasks_without_due_date(self):
        criteria = TaskFilter(due_date=DateRange(end=NOW + timedelta(days=1)))
        assert [t.id for t in filter_tasks(self._tasks(), criteria)] == ["t1", "t3"]

    def test_tag(self):
        assert [t.id for t in filter_tasks(self._tasks(), TaskFilter(tag="trab"))] == ["t1"]


class TestFilterCommunities:
    def test_privacy_members_category(self):
        communities = [
            Community(id="c1", name="Leitores", members_count=50, category="Livros"),
            Community(id="c2", name="Segredos", is_private=True, members_count=3, category="Outros"),
        ]
        assert [c.id for c in filter_communities(communities, CommunityFilter(privacy="private"))] == ["c2"]
        assert [c.id for c in filter_communities(communities, CommunityFilter(min_members=10))] == ["c1"]
        assert [c.id for c in filter_communities(communities, CommunityFilter(category="livros"))] == ["c1"]
        assert [c.id for c in filter_communities(communities, CommunityFilter(search="segr"))] == ["c2"]
