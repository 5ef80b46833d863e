"""
Key-value storage backends.

Dedup marks, rate-limit marks, symbol mappings and pending records each live
in their own namespace of a KeyValueStore with per-entry expiry.
"""
from .base import KeyValueStore, ListResult
from .memory import InMemoryKeyValueStore
from .sqlite_store import SqliteKeyValueStore

__all__ = ["KeyValueStore", "ListResult", "InMemoryKeyValueStore", "SqliteKeyValueStore"]
