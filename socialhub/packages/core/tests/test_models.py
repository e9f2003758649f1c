"""Domain Models 单元测试

测试内容：
1. 话题标签解析
2. 反应计数非负校验
3. Task camelCase 别名兼容
4. Session 过期判断
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError
from socialhub.core.models import (
    Alignment,
    BorderStyle,
    Desabafo,
    Post,
    Priority,
    Session,
    SessionUser,
    Subtask,
    Task,
    parse_hashtags,
)


class TestHashtags:
    def test_extracts_words_starting_with_hash(self):
        assert parse_hashtags("hoje #feliz e #grato") == ["#feliz", "#grato"]

    def test_preserves_order(self):
        assert parse_hashtags("#b #a #c") == ["#b", "#a", "#c"]

    def test_empty_text(self):
        assert parse_hashtags("") == []
        assert parse_hashtags("   ") == []


class TestReactionMap:
    def test_negative_count_rejected_on_post(self):
        with pytest.raises(ValidationError):
            Post(id="p1", reactions={"❤️": -1})

    def test_negative_count_rejected_on_desabafo(self):
        with pytest.raises(ValidationError):
            Desabafo(id="d1", reactions={"😢": -3})

    def test_zero_count_allowed(self):
        post = Post(id="p1", reactions={"❤️": 0, "👍": 2})
        assert post.reactions == {"❤️": 0, "👍": 2}


class TestTaskModel:
    def test_defaults(self):
        task = Task(id="t1", title="Estudar")
        assert task.priority == Priority.MEDIUM
        assert task.is_public is True
        assert task.is_completed is False
        assert task.description == ""
        assert task.subtasks == []

    def test_accepts_camel_case_aliases(self):
        task = Task.model_validate(
            {
                "id": "t1",
                "title": "Estudar",
                "backgroundColor": "#fff",
                "borderStyle": "dashed",
                "titleAlignment": "center",
            }
        )
        assert task.background_color == "#fff"
        assert task.border_style == BorderStyle.DASHED
        assert task.title_alignment == Alignment.CENTER

    def test_accepts_field_names(self):
        task = Task(id="t1", title="Estudar", background_color="#000")
        assert task.background_color == "#000"

    def test_dump_by_alias(self):
        data = Task(id="t1", title="Estudar", background_color="#000").model_dump(by_alias=True)
        assert data["backgroundColor"] == "#000"
        assert "background_color" not in data

    def test_recursive_subtasks(self):
        task = Task.model_validate(
            {
                "id": "t1",
                "title": "Pai",
                "subtasks": [
                    {"id": "s1", "title": "A", "subtasks": [{"id": "s1a", "title": "A.1"}]},
                ],
            }
        )
        assert isinstance(task.subtasks[0].subtasks[0], Subtask)
        assert task.subtasks[0].subtasks[0].id == "s1a"

    def test_invalid_priority_rejected(self):
        with pytest.raises(ValidationError):
            Task(id="t1", title="x", priority="critical")


class TestSession:
    def test_not_expired(self):
        session = Session(
            user=SessionUser(id="u1", email="ana@example.com"),
            expires_at=datetime.now(UTC) + timedelta(hours=1),
        )
        assert session.is_expired() is False

    def test_expired(self):
        session = Session(
            user=SessionUser(id="u1", email="ana@example.com"),
            expires_at=datetime.now(UTC) - timedelta(seconds=1),
        )
        assert session.is_expired() is True

    def test_expiry_uses_given_now(self):
        expires_at = datetime(2025, 1, 1, tzinfo=UTC)
        session = Session(user=SessionUser(id="u1", email="a@b.c"), expires_at=expires_at)
        assert session.is_expired(now=expires_at - timedelta(seconds=1)) is False
        assert session.is_expired(now=expires_at) is True

    def test_naive_expiry_rejected(self):
        with pytest.raises(ValidationError):
            Session(user=SessionUser(id="u1", email="a@b.c"), expires_at=datetime(2030, 1, 1))
