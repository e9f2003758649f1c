"""后端数据库初始化

PRAGMA 配置 + 表 DDL + 索引创建。
id 统一为 TEXT，时间为 ISO-8601 文本，嵌套数据（反应、评论、标签、子任务、附件）为 JSON 文本列。
使用 aiosqlite 异步操作。
"""

import aiosqlite

_USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL DEFAULT '',
    email           TEXT UNIQUE,
    profile_image   TEXT NOT NULL DEFAULT '',
    cover_image     TEXT NOT NULL DEFAULT '',
    bio             TEXT NOT NULL DEFAULT '',
    posts_count     INTEGER NOT NULL DEFAULT 0,
    followers_count INTEGER NOT NULL DEFAULT 0,
    following_count INTEGER NOT NULL DEFAULT 0,
    website         TEXT,
    interests       TEXT NOT NULL DEFAULT '[]'
);
"""

_POSTS_DDL = """
CREATE TABLE IF NOT EXISTS posts (
    id             TEXT PRIMARY KEY,
    author_id      TEXT,
    created_date   TEXT NOT NULL,
    content        TEXT NOT NULL DEFAULT '',
    image_url      TEXT,
    hashtags       TEXT NOT NULL DEFAULT '[]',
    likes_count    INTEGER NOT NULL DEFAULT 0,
    comments_count INTEGER NOT NULL DEFAULT 0,
    reactions      TEXT NOT NULL DEFAULT '{}',
    comments       TEXT NOT NULL DEFAULT '[]',
    updated_at     TEXT
);
"""

_COMMUNITIES_DDL = """
CREATE TABLE IF NOT EXISTS communities (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    description   TEXT NOT NULL DEFAULT '',
    image_url     TEXT NOT NULL DEFAULT '',
    members_count INTEGER NOT NULL DEFAULT 0,
    is_private    INTEGER NOT NULL DEFAULT 0,
    category      TEXT NOT NULL DEFAULT '',
    created_date  TEXT NOT NULL
);
"""

_TAGS_DDL = """
CREATE TABLE IF NOT EXISTS tags (
    id    TEXT PRIMARY KEY,
    name  TEXT NOT NULL,
    color TEXT NOT NULL DEFAULT '#8b5cf6'
);
"""

_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id                   TEXT PRIMARY KEY,
    user_id              TEXT,
    created_at           TEXT,
    title                TEXT NOT NULL,
    description          TEXT,
    is_completed         INTEGER NOT NULL DEFAULT 0,
    priority             TEXT,
    is_public            INTEGER NOT NULL DEFAULT 1,
    tags                 TEXT NOT NULL DEFAULT '[]',
    due_date             TEXT,
    start_time           TEXT,
    end_time             TEXT,
    subtasks             TEXT NOT NULL DEFAULT '[]',
    attachments          TEXT NOT NULL DEFAULT '[]',
    backgroundColor      TEXT,
    borderStyle          TEXT,
    titleAlignment       TEXT,
    descriptionAlignment TEXT
);
"""

_CONVERSATIONS_DDL = """
CREATE TABLE IF NOT EXISTS conversations (
    id                   TEXT PRIMARY KEY,
    participant_id       TEXT,
    last_message_preview TEXT NOT NULL DEFAULT '',
    last_message_date    TEXT,
    unread_count         INTEGER NOT NULL DEFAULT 0
);
"""

# messages.conversation_id 是唯一的外键：会话不存在时插入失败，由数据访问层先建会话再重试
_MESSAGES_DDL = """
CREATE TABLE IF NOT EXISTS messages (
    id              TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL,
    sender_id       TEXT NOT NULL,
    recipient_id    TEXT NOT NULL,
    content         TEXT NOT NULL DEFAULT '',
    created_date    TEXT NOT NULL,
    read            INTEGER NOT NULL DEFAULT 0,
    reactions       TEXT NOT NULL DEFAULT '{}',

    FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
);
"""

_DESABAFOS_DDL = """
CREATE TABLE IF NOT EXISTS desabafos (
    id         TEXT PRIMARY KEY,
    user_id    TEXT,
    created_at TEXT NOT NULL,
    content    TEXT NOT NULL DEFAULT '',
    image_url  TEXT,
    hashtags   TEXT NOT NULL DEFAULT '[]',
    reactions  TEXT NOT NULL DEFAULT '{}',
    comments   TEXT NOT NULL DEFAULT '[]',
    updated_at TEXT
);
"""

_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS events (
    id      TEXT PRIMARY KEY,
    title   TEXT NOT NULL DEFAULT '',
    date    TEXT NOT NULL,
    user_id TEXT
);
"""

_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_posts_author_id ON posts(author_id);",
    "CREATE INDEX IF NOT EXISTS idx_posts_created_date ON posts(created_date DESC);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_id ON tasks(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_conversations_participant_id ON conversations(participant_id);",
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation_id ON messages(conversation_id, created_date);",
    "CREATE INDEX IF NOT EXISTS idx_desabafos_created_at ON desabafos(created_at DESC);",
]

# 表名 -> JSON 文本列
JSON_COLUMNS: dict[str, frozenset[str]] = {
    "users": frozenset({"interests"}),
    "posts": frozenset({"hashtags", "reactions", "comments"}),
    "communities": frozenset(),
    "tags": frozenset(),
    "tasks": frozenset({"tags", "subtasks", "attachments"}),
    "conversations": frozenset(),
    "messages": frozenset({"reactions"}),
    "desabafos": frozenset({"hashtags", "reactions", "comments"}),
    "events": frozenset(),
}

# 表名 -> 布尔列（SQLite 以 0/1 存储）
BOOL_COLUMNS: dict[str, frozenset[str]] = {
    "communities": frozenset({"is_private"}),
    "tasks": frozenset({"is_completed", "is_public"}),
    "messages": frozenset({"read"}),
}

TABLES: frozenset[str] = frozenset(JSON_COLUMNS)


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    for ddl in (
        _USERS_DDL,
        _POSTS_DDL,
        _COMMUNITIES_DDL,
        _TAGS_DDL,
        _TASKS_DDL,
        _CONVERSATIONS_DDL,
        _MESSAGES_DDL,
        _DESABAFOS_DDL,
        _EVENTS_DDL,
    ):
        await conn.execute(ddl)

    for idx_sql in _INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()
