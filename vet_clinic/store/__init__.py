"""记录存储与变更通知。"""
from vet_clinic.store.feed import ChangeEvent, ChangeFeed, ChangeType
from vet_clinic.store.mirror import TableMirror
from vet_clinic.store.records import RecordStore

__all__ = [
    "ChangeEvent",
    "ChangeFeed",
    "ChangeType",
    "RecordStore",
    "TableMirror",
]
