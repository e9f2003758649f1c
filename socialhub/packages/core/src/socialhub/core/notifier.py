"""用户可见通知（toast）

Coordinator 在回滚时通过 Notifier 发出错误提示；
业务服务在成功操作后也可以发出提示。
"""

from typing import Literal, Protocol

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()


class Toast(BaseModel):
    """一条 toast 提示"""

    title: str = Field(description="标题")
    description: str = Field(default="", description="正文")
    variant: Literal["default", "destructive"] = Field(
        default="default",
        description="样式：default / destructive",
    )


def error_toast(description: str, title: str = "Erro") -> Toast:
    """构造错误提示"""
    return Toast(title=title, description=description, variant="destructive")


def success_toast(description: str, title: str = "Sucesso!") -> Toast:
    """构造成功提示"""
    return Toast(title=title, description=description)


class Notifier(Protocol):
    """toast 发送接口"""

    def notify(self, toast: Toast) -> None: ...


class ToastCenter:
    """内存 toast 收集器，界面层从 toasts 读取并展示"""

    def __init__(self) -> None:
        self.toasts: list[Toast] = []

    def notify(self, toast: Toast) -> None:
        self.toasts.append(toast)
        log.info(
            "toast_emitted",
            title=toast.title,
            variant=toast.variant,
        )

    def clear(self) -> None:
        self.toasts.clear()
