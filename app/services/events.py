"""
领域事件模块

生命周期服务只负责发出事件，通知等副作用由订阅者处理。
订阅者抛出的异常只记录日志，不影响已经完成的数据修改。
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict, List, Type

from loguru import logger

from app.models.applicant import ApplicantResponse


@dataclass(frozen=True)
class ApplicantSubmitted:
    """公开表单提交了新的申请"""
    applicant: ApplicantResponse


@dataclass(frozen=True)
class ApplicantStatusChanged:
    """应聘者状态发生变化"""
    applicant: ApplicantResponse
    previous_status: str
    new_status: str

    @property
    def applicant_id(self) -> str:
        return self.applicant.id


Handler = Callable[[Any], Awaitable[None]]


class EventBus:
    """
    进程内同步事件总线

    emit() 依次等待每个订阅者执行完成；单个订阅者失败不影响其他订阅者
    """

    def __init__(self):
        self._handlers: DefaultDict[Type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    async def emit(self, event: Any) -> None:
        name = type(event).__name__
        for handler in self._handlers.get(type(event), []):
            try:
                await handler(event)
            except Exception:
                logger.exception(f"事件处理失败: {name} -> {getattr(handler, '__name__', handler)}")
