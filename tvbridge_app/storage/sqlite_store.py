"""SQLite-backed key-value store with TTL expiry and namespaced tables."""

import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional

import structlog

from ..errors import StoreUnavailableError
from .base import KeyValueStore, ListResult, Predicate

logger = structlog.get_logger(__name__)


class SqliteKeyValueStore(KeyValueStore):
    """
    SQLite persistence for one key-value namespace.

    Several namespaces may share a database file. Each call opens its own
    connection; check_and_set runs inside a BEGIN IMMEDIATE transaction so
    concurrent writers (threads or processes) serialize on the database lock.
    """

    def __init__(
        self,
        db_path: str = "tvbridge.db",
        namespace: str = "default",
        timeout_seconds: float = 5.0,
        clock: Optional[Callable[[], float]] = None
    ):
        super().__init__(namespace)
        self.db_path = Path(db_path)
        self.timeout_seconds = timeout_seconds
        self.clock = clock or time.time
        self.logger = logger.bind(namespace=namespace)

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_entries (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    expires_at REAL,
                    PRIMARY KEY (namespace, key)
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_kv_entries_expires_at ON kv_entries(expires_at)
            """)

    @contextmanager
    def _get_connection(self, operation: str, key: Optional[str] = None):
        """Get database connection, translating driver errors to StoreUnavailableError."""
        conn = None
        try:
            # Autocommit mode; transactions are opened explicitly where needed
            conn = sqlite3.connect(self.db_path, timeout=self.timeout_seconds, isolation_level=None)
            yield conn
        except sqlite3.Error as e:
            if conn and conn.in_transaction:
                conn.rollback()
            self.logger.error("Key-value store error", operation=operation, key=key, error=str(e))
            raise StoreUnavailableError(
                f"SQLite {operation} failed: {e}",
                namespace=self.namespace,
                operation=operation,
                key=key
            ) from e
        finally:
            if conn:
                conn.close()

    def _expires_at(self, ttl_seconds: Optional[int]) -> Optional[float]:
        return self.clock() + ttl_seconds if ttl_seconds else None

    def _select_live(self, conn: sqlite3.Connection, key: str) -> Optional[str]:
        row = conn.execute("""
            SELECT value FROM kv_entries
            WHERE namespace = ? AND key = ? AND (expires_at IS NULL OR expires_at > ?)
        """, (self.namespace, key, self.clock())).fetchone()
        return row[0] if row else None

    def _upsert(self, conn: sqlite3.Connection, key: str, value: str, ttl_seconds: Optional[int]) -> None:
        conn.execute("""
            INSERT OR REPLACE INTO kv_entries (namespace, key, value, expires_at)
            VALUES (?, ?, ?, ?)
        """, (self.namespace, key, value, self._expires_at(ttl_seconds)))

    def get(self, key: str) -> Optional[str]:
        with self._get_connection("get", key) as conn:
            return self._select_live(conn, key)

    def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        with self._get_connection("put", key) as conn:
            self._upsert(conn, key, value, ttl_seconds)

    def delete(self, key: str) -> None:
        with self._get_connection("delete", key) as conn:
            conn.execute("""
                DELETE FROM kv_entries WHERE namespace = ? AND key = ?
            """, (self.namespace, key))

    def list(
        self,
        prefix: str = "",
        limit: int = 1000,
        cursor: Optional[str] = None
    ) -> ListResult:
        limit = max(limit, 0)
        with self._get_connection("list") as conn:
            # Fetch one extra row to learn whether another page exists
            rows = conn.execute("""
                SELECT key FROM kv_entries
                WHERE namespace = ?
                  AND substr(key, 1, ?) = ?
                  AND key > ?
                  AND (expires_at IS NULL OR expires_at > ?)
                ORDER BY key LIMIT ?
            """, (
                self.namespace,
                len(prefix),
                prefix,
                cursor if cursor is not None else "",
                self.clock(),
                limit + 1
            )).fetchall()

        keys = [row[0] for row in rows]
        page = keys[:limit]
        next_cursor = page[-1] if page and len(keys) > limit else None
        return ListResult(keys=page, cursor=next_cursor)

    def check_and_set(
        self,
        key: str,
        predicate: Predicate,
        value: str,
        ttl_seconds: Optional[int] = None
    ) -> bool:
        with self._get_connection("check_and_set", key) as conn:
            conn.execute("BEGIN IMMEDIATE")
            if not predicate(self._select_live(conn, key)):
                conn.rollback()
                return False
            self._upsert(conn, key, value, ttl_seconds)
            conn.commit()
            return True

    def purge_expired(self) -> int:
        """Remove expired entries of this namespace, returning the count."""
        with self._get_connection("purge_expired") as conn:
            cursor = conn.execute("""
                DELETE FROM kv_entries
                WHERE namespace = ? AND expires_at IS NOT NULL AND expires_at <= ?
            """, (self.namespace, self.clock()))
            deleted_count = cursor.rowcount

        self.logger.info("Purged expired entries", deleted_count=deleted_count)
        return deleted_count
