"""数据表变更通知：按表订阅，回调收到 插入/更新/删除 事件。"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """变更类型。"""
    INSERTED = "inserted"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """单次变更：哪张表、什么变更、变更后的整行（删除时为删除前的整行）。"""
    type: ChangeType
    table: str
    record: dict = field(default_factory=dict)


Handler = Callable[[ChangeEvent], None]


class ChangeFeed:
    """进程内变更通知。"""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, table: str, handler: Handler) -> Callable[[], None]:
        """订阅某张表的变更，返回取消订阅函数。"""
        self._handlers[table].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[table]:
                self._handlers[table].remove(handler)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        # 单个订阅者出错不影响其他订阅者，也不影响已完成的写入
        for handler in list(self._handlers.get(event.table, ())):
            try:
                handler(event)
            except Exception:
                logger.exception("变更通知处理失败: table=%s type=%s", event.table, event.type.value)

    def subscriber_count(self, table: str) -> int:
        return len(self._handlers.get(table, ()))
