"""
Storefront Store - generic record access and per-record locking.
"""

from .base import DuplicateRecordError, RecordStore
from .memory import MemoryRecordStore
from .locks import KeyedLock

__all__ = ["DuplicateRecordError", "RecordStore", "MemoryRecordStore", "KeyedLock"]
