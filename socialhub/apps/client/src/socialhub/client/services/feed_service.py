"""FeedService -- 动态帖子

所有变更都经过 OptimisticCoordinator：先改 PostStore，再写后端，失败回滚并提示。
点赞标记 post-like:<post>:<user> 只在后端写入成功后更新。
"""

from datetime import UTC, datetime

import structlog
from socialhub.backend.repositories import PostRepository
from socialhub.core.cancellation import CancellationToken, is_cancelled
from socialhub.core.coordinator import MutationResult, OptimisticCoordinator
from socialhub.core.ids import new_id
from socialhub.core.models import Comment, Post, User, parse_hashtags
from socialhub.core.reactions import LIKE_EMOJI, apply_reaction, has_marker, increment, post_like_key, set_marker
from socialhub.core.state import PostStore
from socialhub.core.storage import LocalStorage

log = structlog.get_logger()


class FeedService:
    """动态业务服务"""

    def __init__(
        self,
        posts: PostRepository,
        store: PostStore,
        coordinator: OptimisticCoordinator,
        storage: LocalStorage,
        fallback_posts: list[Post] | None = None,
    ) -> None:
        self._posts = posts
        self._store = store
        self._coordinator = coordinator
        self._storage = storage
        self._fallback_posts = list(fallback_posts or [])

    @property
    def store(self) -> PostStore:
        return self._store

    async def load_posts(self, token: CancellationToken | None = None) -> list[Post]:
        """加载帖子；后端无数据或失败时使用内置数据"""
        posts = await self._posts.get_posts()
        if not posts and self._fallback_posts:
            log.info("posts_fallback_used", count=len(self._fallback_posts))
            posts = [p.model_copy(deep=True) for p in self._fallback_posts]
        if is_cancelled(token):
            return []
        self._store.set_all(posts)
        return self._store.all()

    async def create_post(
        self,
        author: User,
        content: str,
        hashtags: str = "",
        image_url: str | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[Post]:
        """发布帖子（插入到最前），后端返回的 id 会替换占位 id"""
        post = Post(
            id=new_id("post"),
            author=author,
            content=content,
            image_url=image_url or None,
            hashtags=parse_hashtags(hashtags),
        )
        return await self._coordinator.mutate(
            self._store,
            post.id,
            lambda _current: post,
            self._posts.create_post,
            operation="create_post",
            error="Não foi possível publicar o post.",
            server_id=lambda created: created.id,
            token=token,
        )

    async def edit_post(
        self,
        post_id: str,
        content: str,
        hashtags: str | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult[Post]:
        self._require(post_id)
        values: dict = {"content": content, "updated_at": datetime.now(UTC)}
        if hashtags is not None:
            values["hashtags"] = parse_hashtags(hashtags)
        return await self._coordinator.mutate(
            self._store,
            post_id,
            lambda post: post.model_copy(update=values),
            lambda _post: self._posts.update_post(post_id, values),
            operation="edit_post",
            error="Não foi possível editar o post.",
            token=token,
        )

    async def add_comment(
        self,
        post_id: str,
        author: User,
        content: str,
        token: CancellationToken | None = None,
    ) -> MutationResult[Post]:
        """追加评论，同时维护 comments_count"""
        self._require(post_id)
        comment = Comment(id=new_id("comment"), author=author, content=content)

        def _apply(post: Post | None) -> Post:
            comments = [*post.comments, comment]
            return post.model_copy(update={"comments": comments, "comments_count": len(comments)})

        return await self._coordinator.mutate(
            self._store,
            post_id,
            _apply,
            lambda _post: self._posts.add_comment(post_id, comment),
            operation="add_post_comment",
            error="Não foi possível publicar o comentário.",
            token=token,
        )

    async def toggle_like(
        self,
        post_id: str,
        user_id: str,
        token: CancellationToken | None = None,
    ) -> MutationResult[Post]:
        """点赞/取消点赞：调整 👍 反应和点赞数，成功后更新本地标记"""
        self._require(post_id)
        key = post_like_key(post_id, user_id)
        # 在实体锁内读取标记，排队中的切换看到的是前一次成功后的状态
        state = {"liked": False}

        def _apply(post: Post | None) -> Post:
            liked = state["liked"] = has_marker(self._storage, key)
            likes = post.likes_count - 1 if liked else post.likes_count + 1
            return post.model_copy(
                update={
                    "reactions": apply_reaction(post.reactions, LIKE_EMOJI, liked),
                    "likes_count": max(0, likes),
                }
            )

        return await self._coordinator.mutate(
            self._store,
            post_id,
            _apply,
            lambda post: self._posts.update_reactions(post_id, post.reactions, post.likes_count),
            operation="toggle_post_like",
            error="Não foi possível registrar a curtida.",
            on_success=lambda _ok: set_marker(self._storage, key, not state["liked"]),
            token=token,
        )

    async def react(
        self,
        post_id: str,
        emoji: str,
        token: CancellationToken | None = None,
    ) -> MutationResult[Post]:
        """表情反应（只增不减）"""
        self._require(post_id)
        return await self._coordinator.mutate(
            self._store,
            post_id,
            lambda post: post.model_copy(update={"reactions": increment(post.reactions, emoji)}),
            lambda post: self._posts.update_reactions(post_id, post.reactions),
            operation="react_post",
            error="Não foi possível registrar a reação.",
            token=token,
        )

    async def delete_post(self, post_id: str, token: CancellationToken | None = None) -> MutationResult[Post]:
        self._require(post_id)
        return await self._coordinator.mutate(
            self._store,
            post_id,
            lambda _post: None,
            lambda _none: self._posts.delete_post(post_id),
            operation="delete_post",
            error="Não foi possível excluir o post.",
            token=token,
        )

    def _require(self, post_id: str) -> Post:
        post = self._store.get(post_id)
        if post is None:
            raise KeyError(post_id)
        return post
