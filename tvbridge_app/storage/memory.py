"""In-process key-value store with TTL expiry."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .base import KeyValueStore, ListResult, Predicate


@dataclass
class _Entry:
    value: str
    expires_at: Optional[float] = None


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dictionary-backed store for tests and single-process deployments.

    Every operation holds the store lock only for its own duration, which
    makes check_and_set atomic with respect to other callers.
    """

    def __init__(self, namespace: str = "default", clock: Optional[Callable[[], float]] = None):
        super().__init__(namespace)
        self.clock = clock or time.time
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _live_value(self, key: str) -> Optional[str]:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self.clock():
            del self._entries[key]
            return None
        return entry.value

    def _write(self, key: str, value: str, ttl_seconds: Optional[int]) -> None:
        expires_at = self.clock() + ttl_seconds if ttl_seconds else None
        self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._live_value(key)

    def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        with self._lock:
            self._write(key, value, ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def list(
        self,
        prefix: str = "",
        limit: int = 1000,
        cursor: Optional[str] = None
    ) -> ListResult:
        with self._lock:
            matching = sorted(
                key for key in list(self._entries)
                if key.startswith(prefix)
                and (cursor is None or key > cursor)
                and self._live_value(key) is not None
            )

        page = matching[:max(limit, 0)]
        next_cursor = page[-1] if page and len(matching) > len(page) else None
        return ListResult(keys=page, cursor=next_cursor)

    def check_and_set(
        self,
        key: str,
        predicate: Predicate,
        value: str,
        ttl_seconds: Optional[int] = None
    ) -> bool:
        with self._lock:
            if not predicate(self._live_value(key)):
                return False
            self._write(key, value, ttl_seconds)
            return True

    def clear(self) -> None:
        """Remove every entry (primarily for tests)."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._entries) if self._live_value(key) is not None)
