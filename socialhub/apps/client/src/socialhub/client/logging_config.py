"""客户端日志配置

SOCIALHUB_LOG_FORMAT：dev（默认，控制台彩色输出）或 json
SOCIALHUB_LOG_LEVEL：日志级别（默认 INFO）

客户端嵌入在宿主应用中运行：只追加一个自己的 handler，不清理宿主已有的 handler。
"""

import logging
import os

import structlog

_HANDLER_NAME = "socialhub"


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog，重复调用只替换 SocialHub 自己的 handler

    Args:
        log_format: 覆盖 SOCIALHUB_LOG_FORMAT
        log_level: 覆盖 SOCIALHUB_LOG_LEVEL
    """
    log_format = log_format or os.environ.get("SOCIALHUB_LOG_FORMAT", "dev")
    level = getattr(logging, (log_level or os.environ.get("SOCIALHUB_LOG_LEVEL", "INFO")).upper(), logging.INFO)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=_renderer(log_format), foreign_pre_chain=pre_chain)
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    # aiosqlite 在 DEBUG 级别逐条记录语句
    logging.getLogger("aiosqlite").setLevel(max(level, logging.INFO))


def bind_session_context(user_id: str | None) -> None:
    """把当前登录用户绑定到日志上下文（登出时传 None 清除）"""
    if user_id:
        structlog.contextvars.bind_contextvars(user_id=user_id)
    else:
        structlog.contextvars.unbind_contextvars("user_id")
