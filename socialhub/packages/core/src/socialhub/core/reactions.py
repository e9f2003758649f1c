"""表情反应映射操作 + 本地反应标记

反应计数永远是非负整数。
同一 (实体, emoji, 用户) 是否已反应由本地存储中的组合 key 标记，
标记只在持久化成功后写入/清除。
"""

from collections.abc import Mapping

from .storage import LocalStorage

REACTION_EMOJIS: tuple[str, ...] = ("❤️", "👍", "😂", "😢", "😠")
LIKE_EMOJI = "👍"


def desabafo_reaction_key(desabafo_id: str, emoji: str, user_id: str) -> str:
    """倾诉反应标记 key"""
    return f"desabafo-react:{desabafo_id}:{emoji}:{user_id}"


def post_like_key(post_id: str, user_id: str) -> str:
    """帖子点赞标记 key"""
    return f"post-like:{post_id}:{user_id}"


def increment(reactions: Mapping[str, int], emoji: str) -> dict[str, int]:
    """某个 emoji 计数 +1"""
    result = dict(reactions)
    result[emoji] = result.get(emoji, 0) + 1
    return result


def decrement(reactions: Mapping[str, int], emoji: str) -> dict[str, int]:
    """某个 emoji 计数 -1，下限为 0"""
    result = dict(reactions)
    result[emoji] = max(0, result.get(emoji, 0) - 1)
    return result


def apply_reaction(
    reactions: Mapping[str, int],
    emoji: str,
    already: bool,
    previous_emoji: str | None = None,
) -> dict[str, int]:
    """计算一次反应切换后的映射

    Args:
        reactions: 当前映射
        emoji: 本次点击的 emoji
        already: 当前用户是否已用该 emoji 反应过（是则撤销）
        previous_emoji: 当前用户之前使用的其他 emoji，会被撤销
    """
    result = decrement(reactions, emoji) if already else increment(reactions, emoji)
    if previous_emoji and previous_emoji != emoji:
        result = decrement(result, previous_emoji)
    return result


def has_marker(storage: LocalStorage, key: str) -> bool:
    """本地是否存在反应标记"""
    return bool(storage.get_item(key))


def set_marker(storage: LocalStorage, key: str, present: bool) -> None:
    """写入或清除反应标记"""
    if present:
        storage.set_item(key, "1")
    else:
        storage.remove_item(key)


def find_user_reaction(
    storage: LocalStorage,
    desabafo_id: str,
    user_id: str,
    emojis: tuple[str, ...] = REACTION_EMOJIS,
) -> str | None:
    """查找用户当前在某个倾诉上使用的 emoji"""
    for emoji in emojis:
        if has_marker(storage, desabafo_reaction_key(desabafo_id, emoji, user_id)):
            return emoji
    return None
