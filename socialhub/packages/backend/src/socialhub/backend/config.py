"""BackendConfig -- 数据访问层配置加载

从环境变量加载配置。
"""

import os

import structlog
from pydantic import BaseModel, Field
from socialhub.core.config import get_db_path

log = structlog.get_logger()

DEFAULT_TIMEOUT_S = 10.0


class BackendConfig(BaseModel):
    """数据访问层配置 -- 从环境变量加载

    环境变量:
        SOCIALHUB_DB_PATH: 数据库路径
        SOCIALHUB_BACKEND_TIMEOUT_S: 单次调用超时（秒，默认 10）
        SOCIALHUB_LOCAL_FALLBACK: 后端失败时是否写入本地兜底（默认 true）
    """

    db_path: str = Field(description="数据库路径")
    timeout_s: float = Field(
        default=DEFAULT_TIMEOUT_S,
        gt=0,
        description="单次后端调用超时（秒）",
    )
    enable_local_fallback: bool = Field(
        default=True,
        description="倾诉写入失败时是否保存到本地存储",
    )


def load_backend_config() -> BackendConfig:
    """从环境变量加载 Backend 配置

    环境变量映射:
        SOCIALHUB_DB_PATH -> db_path (默认 data/sqlite/socialhub.db)
        SOCIALHUB_BACKEND_TIMEOUT_S -> timeout_s (默认 10)
        SOCIALHUB_LOCAL_FALLBACK -> enable_local_fallback (默认 true)

    Returns:
        BackendConfig 实例
    """
    kwargs: dict = {"db_path": get_db_path()}

    if val := os.environ.get("SOCIALHUB_BACKEND_TIMEOUT_S"):
        try:
            timeout_s = float(val)
            if timeout_s <= 0:
                raise ValueError(val)
            kwargs["timeout_s"] = timeout_s
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="SOCIALHUB_BACKEND_TIMEOUT_S",
                value=val,
                fallback=DEFAULT_TIMEOUT_S,
            )
            # 使用默认值，不阻塞启动

    if val := os.environ.get("SOCIALHUB_LOCAL_FALLBACK"):
        kwargs["enable_local_fallback"] = val.strip().lower() not in ("0", "false", "no", "off")

    return BackendConfig(**kwargs)
