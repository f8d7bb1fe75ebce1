"""表镜像：先整表读取，再根据变更通知保持内存列表同步（如候诊列表）。"""
from typing import Callable, List, Optional

from vet_clinic.store.feed import ChangeEvent, ChangeType
from vet_clinic.store.records import RecordStore


class TableMirror:
    """订阅一张表，维护满足过滤条件的行列表。"""

    def __init__(
        self,
        store: RecordStore,
        table: str,
        on_change: Optional[Callable[[List[dict]], None]] = None,
        **filters,
    ):
        self.store = store
        self.table = table
        self.filters = filters
        self._on_change = on_change
        self.rows: List[dict] = store.select(table, **filters)
        self._unsubscribe = store.feed.subscribe(table, self._apply)

    def _wanted(self, row: dict) -> bool:
        return all(row.get(k) == v for k, v in self.filters.items())

    def _apply(self, event: ChangeEvent) -> None:
        record_id = event.record.get("id")
        rows = [r for r in self.rows if r.get("id") != record_id]
        if event.type != ChangeType.DELETED and self._wanted(event.record):
            if any(r.get("id") == record_id for r in self.rows):
                # 原位替换，保持顺序
                rows = [event.record if r.get("id") == record_id else r for r in self.rows]
            else:
                rows.append(event.record)
        self.rows = rows
        if self._on_change is not None:
            self._on_change(list(self.rows))

    def close(self) -> None:
        """取消订阅。"""
        self._unsubscribe()
