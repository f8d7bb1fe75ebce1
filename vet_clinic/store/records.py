"""记录存储：每张表一个 JSON 文件，支持按唯一键 upsert 与变更通知。"""
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from vet_clinic.config import RECORDS_DIR, ensure_dirs
from vet_clinic.store.feed import ChangeEvent, ChangeFeed, ChangeType

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _matches(row: dict, filters: dict) -> bool:
    return all(row.get(k) == v for k, v in filters.items())


class RecordStore:
    """表存储（JSON 文件）。并发写入以最后一次为准。"""

    def __init__(self, base_dir: Optional[Path] = None, feed: Optional[ChangeFeed] = None):
        if base_dir is None:
            ensure_dirs()
        self.base_dir = Path(base_dir or RECORDS_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.feed = feed or ChangeFeed()

    def _path(self, table: str) -> Path:
        return self.base_dir / f"{table}.json"

    def _load(self, table: str) -> List[dict]:
        path = self._path(table)
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data.get("rows", [])

    def _save(self, table: str, rows: List[dict]) -> None:
        with open(self._path(table), "w", encoding="utf-8") as f:
            json.dump({"rows": rows}, f, indent=2, ensure_ascii=False)

    def _emit(self, change: ChangeType, table: str, row: dict) -> None:
        self.feed.publish(ChangeEvent(type=change, table=table, record=dict(row)))

    def select(self, table: str, **filters) -> List[dict]:
        """按字段相等过滤，返回所有匹配行。"""
        return [r for r in self._load(table) if _matches(r, filters)]

    def get(self, table: str, **filters) -> Optional[dict]:
        """返回第一条匹配行。"""
        for row in self._load(table):
            if _matches(row, filters):
                return row
        return None

    def insert(self, table: str, row: dict) -> dict:
        """插入一行；没有 id 时自动生成。"""
        rows = self._load(table)
        new_row = dict(row)
        new_row.setdefault("id", uuid.uuid4().hex)
        new_row.setdefault("created_at", _now_iso())
        rows.append(new_row)
        self._save(table, rows)
        self._emit(ChangeType.INSERTED, table, new_row)
        return new_row

    def upsert(self, table: str, values: dict, on_conflict: Iterable[str]) -> dict:
        """按唯一键插入或更新。

        只写入 values 中出现的字段，未出现的字段保持原值；返回更新后的整行。
        """
        keys = tuple(on_conflict)
        missing = [k for k in keys if k not in values]
        if missing:
            raise ValueError(f"upsert 缺少唯一键字段: {', '.join(missing)}")
        key_filter = {k: values[k] for k in keys}
        rows = self._load(table)
        for i, row in enumerate(rows):
            if _matches(row, key_filter):
                merged = {**row, **values, "updated_at": _now_iso()}
                rows[i] = merged
                self._save(table, rows)
                self._emit(ChangeType.UPDATED, table, merged)
                return merged
        new_row = {"id": uuid.uuid4().hex, "created_at": _now_iso(), **values, "updated_at": _now_iso()}
        rows.append(new_row)
        self._save(table, rows)
        self._emit(ChangeType.INSERTED, table, new_row)
        return new_row

    def update(self, table: str, record_id: str, values: dict) -> Optional[dict]:
        """按 id 部分更新；不存在返回 None。"""
        rows = self._load(table)
        for i, row in enumerate(rows):
            if row.get("id") == record_id:
                merged = {**row, **values, "id": record_id, "updated_at": _now_iso()}
                rows[i] = merged
                self._save(table, rows)
                self._emit(ChangeType.UPDATED, table, merged)
                return merged
        return None

    def delete(self, table: str, record_id: str) -> bool:
        """按 id 删除。"""
        rows = self._load(table)
        for i, row in enumerate(rows):
            if row.get("id") == record_id:
                del rows[i]
                self._save(table, rows)
                self._emit(ChangeType.DELETED, table, row)
                return True
        logger.debug("删除时未找到记录: table=%s id=%s", table, record_id)
        return False
