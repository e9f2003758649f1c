"""PostRepository -- posts 表访问

作者信息不在 posts 表中冗余保存：先查帖子，再按 author_id 集合查 users。
"""

from socialhub.core.models import Comment, Post, ReactionMap, User

from ..rows import parse_post_row, parse_rows, parse_user_row, post_record
from .base import BaseRepository


class PostRepository(BaseRepository):
    """动态帖子读写"""

    async def _authors(self, author_ids: list[str]) -> dict[str, User]:
        ids = sorted({aid for aid in author_ids if aid})
        if not ids:
            return {}
        rows = await self._client.select("users", in_={"id": ids})
        return {u.id: u for u in parse_rows(rows, parse_user_row, "users")}

    async def get_posts(self, limit: int | None = None) -> list[Post]:
        """按创建时间倒序读取帖子（新帖在前）"""

        async def _run() -> list[Post]:
            rows = await self._client.select(
                "posts",
                order_by="created_date",
                descending=True,
                limit=limit,
            )
            authors = await self._authors([r.get("author_id") for r in rows])
            return parse_rows(rows, lambda r: parse_post_row(r, authors), "posts")

        return await self._call("get_posts", _run(), [])

    async def get_post(self, post_id: str) -> Post | None:
        async def _run() -> Post | None:
            rows = await self._client.select("posts", eq={"id": post_id}, limit=1)
            if not rows:
                return None
            authors = await self._authors([rows[0].get("author_id")])
            return parse_post_row(rows[0], authors)

        return await self._call("get_post", _run(), None)

    async def create_post(self, post: Post) -> Post | None:
        """插入帖子，返回后端保存后的帖子（id 可能与占位 id 不同）"""

        async def _run() -> Post:
            record = post_record(post)
            record["comments_count"] = len(post.comments)
            row = await self._client.insert("posts", record)
            authors = {post.author.id: post.author} if post.author else {}
            return parse_post_row(row, authors)

        return await self._call("create_post", _run(), None)

    async def add_comment(self, post_id: str, comment: Comment) -> Post | None:
        """追加评论（读-改-写），同时维护 comments_count == len(comments)"""

        async def _run() -> Post | None:
            rows = await self._client.select("posts", eq={"id": post_id}, limit=1)
            if not rows:
                return None
            current = parse_post_row(rows[0])
            comments = [c.model_dump(mode="json") for c in current.comments]
            comments.append(comment.model_dump(mode="json"))
            updated = await self._client.update(
                "posts",
                {"comments": comments, "comments_count": len(comments)},
                eq={"id": post_id},
            )
            if not updated:
                return None
            authors = await self._authors([updated[0].get("author_id")])
            return parse_post_row(updated[0], authors)

        return await self._call("add_comment", _run(), None)

    async def update_reactions(
        self,
        post_id: str,
        reactions: ReactionMap,
        likes_count: int | None = None,
    ) -> bool:
        """更新反应映射；likes_count 不为 None 时同时更新点赞数"""

        async def _run() -> bool:
            values: dict = {"reactions": reactions}
            if likes_count is not None:
                values["likes_count"] = max(0, likes_count)
            rows = await self._client.update("posts", values, eq={"id": post_id})
            return bool(rows)

        return await self._call("update_post_reactions", _run(), False)

    async def update_post(self, post_id: str, values: dict) -> bool:
        """部分更新帖子（编辑正文、配图、话题）"""

        async def _run() -> bool:
            rows = await self._client.update("posts", values, eq={"id": post_id})
            return bool(rows)

        return await self._call("update_post", _run(), False)

    async def delete_post(self, post_id: str) -> bool:
        async def _run() -> bool:
            return await self._client.delete("posts", eq={"id": post_id}) > 0

        return await self._call("delete_post", _run(), False)
