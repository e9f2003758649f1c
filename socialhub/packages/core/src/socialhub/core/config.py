"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、本地存储路径、会话有效期、子任务最大深度等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("SOCIALHUB_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取后端数据库路径"""
    return os.environ.get(
        "SOCIALHUB_DB_PATH",
        str(_get_base_dir() / "sqlite" / "socialhub.db"),
    )


def get_local_storage_path() -> Path:
    """获取本地持久化存储（浏览器 localStorage 的等价物）文件路径"""
    return Path(
        os.environ.get(
            "SOCIALHUB_LOCAL_STORAGE_PATH",
            str(_get_base_dir() / "local_storage.json"),
        )
    )


# 会话有效期（秒），默认 7 天
SESSION_TTL_S: int = int(os.environ.get("SOCIALHUB_SESSION_TTL_S", str(7 * 24 * 3600)))

# 子任务树最大深度（任务本身不计入，顶层子任务深度为 1）
MAX_SUBTASK_DEPTH: int = 3

# 会话预览截断长度
MESSAGE_PREVIEW_LENGTH: int = 200

# 本地存储 key
SESSION_STORAGE_KEY = "socialhub:session"
LOCAL_DESABAFOS_KEY = "local:desabafos"
LOCAL_TASKS_KEY = "local:tasks"
LOCAL_EVENTS_KEY = "local:events"
