"""Base classes for key-value storage backends."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..errors import PersistenceError

# Receives the current (unexpired) value or None, returns True to write
Predicate = Callable[[Optional[str]], bool]


@dataclass(frozen=True)
class ListResult:
    """One page of keys from a prefix listing."""
    keys: list[str] = field(default_factory=list)
    cursor: Optional[str] = None   # pass back to continue; None when complete

    @property
    def list_complete(self) -> bool:
        return self.cursor is None


class KeyValueStore(ABC):
    """Namespaced string key-value store with optional per-entry TTL."""

    def __init__(self, namespace: str):
        self.namespace = namespace

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for key, None if absent or expired."""
        pass

    @abstractmethod
    def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """Write value under key, expiring after ttl_seconds when given."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; deleting an absent key is not an error."""
        pass

    @abstractmethod
    def list(
        self,
        prefix: str = "",
        limit: int = 1000,
        cursor: Optional[str] = None
    ) -> ListResult:
        """List unexpired keys starting with prefix in ascending key order."""
        pass

    @abstractmethod
    def check_and_set(
        self,
        key: str,
        predicate: Predicate,
        value: str,
        ttl_seconds: Optional[int] = None
    ) -> bool:
        """
        Atomically evaluate predicate on the current value and write if it holds.

        Returns:
            True if value was written, False if predicate rejected the write
        """
        pass

    def get_json(self, key: str) -> Optional[Any]:
        """Return the decoded JSON value for key, None if absent."""
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                f"Stored value is not valid JSON: {e}",
                operation="get_json",
                target=f"{self.namespace}:{key}"
            ) from e

    def put_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Encode value as JSON and write it under key."""
        self.put(key, json.dumps(value, default=str), ttl_seconds)
