"""Pending directive store: staging, polling and acknowledgement of records."""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import structlog

from ..config.resolver import PipelineConfig
from ..config.validation import coerce_int
from ..data.models import PENDING_KEY_PREFIX, PendingSignalRecord
from ..errors import AcknowledgeRequestError
from ..storage.base import KeyValueStore

logger = structlog.get_logger(__name__)

PENDING_TTL_SECONDS = 60 * 60 * 24
DEFAULT_POLL_LIMIT = 10
MAX_POLL_LIMIT = 100
MAX_ACK_KEYS = 200


@dataclass(frozen=True)
class PollResult:
    """Records returned by one poll, oldest first."""
    items: list[PendingSignalRecord] = field(default_factory=list)
    cursor: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "cursor": self.cursor,
        }


@dataclass(frozen=True)
class AckResult:
    """Outcome counts of one acknowledge batch."""
    acknowledged: int = 0
    missing: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"acknowledged": self.acknowledged, "missing": self.missing}


def clamp_limit(
    limit: Any,
    default: int = DEFAULT_POLL_LIMIT,
    maximum: int = MAX_POLL_LIMIT
) -> int:
    """Clamp a requested poll limit to [1, maximum]; unparseable means default."""
    requested = coerce_int(limit)
    if requested is None:
        return default
    return min(max(requested, 1), maximum)


class PendingDirectiveStore:
    """Persists decided directives under time-ordered keys for downstream pickup."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: int = PENDING_TTL_SECONDS,
        default_poll_limit: int = DEFAULT_POLL_LIMIT,
        max_poll_limit: int = MAX_POLL_LIMIT,
        max_ack_keys: int = MAX_ACK_KEYS
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.default_poll_limit = default_poll_limit
        self.max_poll_limit = max_poll_limit
        self.max_ack_keys = max_ack_keys
        self.logger = logger

    @classmethod
    def from_config(cls, store: KeyValueStore, config: PipelineConfig) -> "PendingDirectiveStore":
        """Create a store using the retention and bounds of a resolved config."""
        return cls(
            store,
            ttl_seconds=config.pending_ttl_seconds,
            default_poll_limit=config.poll_default_limit,
            max_poll_limit=config.poll_max_limit,
            max_ack_keys=config.ack_max_keys,
        )

    def stage(self, record: PendingSignalRecord, ttl_seconds: Optional[int] = None) -> None:
        """Write a record under its composite key with the retention TTL."""
        self.store.put_json(record.key, record.to_dict(), ttl_seconds or self.ttl_seconds)

    def get(self, key: str) -> Optional[PendingSignalRecord]:
        data = self.store.get_json(key)
        if data is None:
            return None
        return PendingSignalRecord.from_dict(data)

    def list(
        self,
        symbol_filter: Optional[str] = None,
        limit: Any = None,
        cursor: Optional[str] = None
    ) -> PollResult:
        """
        Poll staged records.

        Args:
            symbol_filter: Resolved symbol to restrict to (case-insensitive)
            limit: Maximum records, clamped to [1, max_poll_limit]
            cursor: Continuation token from a previous poll

        Returns:
            PollResult sorted by ascending timestamp
        """
        symbol = (symbol_filter or "").strip().upper()
        prefix = f"{PENDING_KEY_PREFIX}{symbol}:" if symbol else PENDING_KEY_PREFIX
        page_size = clamp_limit(limit, default=self.default_poll_limit, maximum=self.max_poll_limit)

        listing = self.store.list(prefix=prefix, limit=page_size, cursor=cursor)

        items = []
        for key in listing.keys:
            record = self.get(key)
            # Expired or acknowledged between list and get
            if record is not None:
                items.append(record)

        items.sort(key=lambda record: (record.timestamp, record.key))

        self.logger.debug(
            "Polled pending signals",
            prefix=prefix,
            limit=page_size,
            returned=len(items),
            list_complete=listing.list_complete
        )

        return PollResult(items=items, cursor=listing.cursor)

    def acknowledge(self, keys: Iterable[Any]) -> AckResult:
        """
        Delete consumed records.

        Keys outside the pending namespace are skipped without being counted.

        Raises:
            AcknowledgeRequestError: batch is empty or exceeds max_ack_keys
        """
        keys = list(keys) if keys is not None else []

        if not keys:
            raise AcknowledgeRequestError("no keys provided", batch_size=0)
        if len(keys) > self.max_ack_keys:
            raise AcknowledgeRequestError(
                "too many keys",
                batch_size=len(keys),
                max_batch_size=self.max_ack_keys
            )

        acknowledged = 0
        missing = 0

        for key in keys:
            if not isinstance(key, str) or not key.startswith(PENDING_KEY_PREFIX):
                continue
            if self.store.get(key) is None:
                missing += 1
                continue
            self.store.delete(key)
            acknowledged += 1

        self.logger.info(
            "Acknowledged pending signals",
            requested=len(keys),
            acknowledged=acknowledged,
            missing=missing
        )

        return AckResult(acknowledged=acknowledged, missing=missing)
