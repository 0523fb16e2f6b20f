"""Durable stores for sticky signals and score history."""

from narrative.storage.backends import JsonFileBackend, SqlBackend, StorageBackend, create_sql_engine
from narrative.storage.history import HistoryStats, HistoryStore
from narrative.storage.sticky import StickySignalStore

__all__ = [
    "HistoryStats",
    "HistoryStore",
    "JsonFileBackend",
    "SqlBackend",
    "StickySignalStore",
    "StorageBackend",
    "create_sql_engine",
]
