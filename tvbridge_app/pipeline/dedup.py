"""Idempotency gate suppressing redelivered signals."""

from ..storage.base import KeyValueStore

DEDUP_MARK = "1"


class DeduplicationGate:
    """Marks idempotency keys in a short-lived store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def is_duplicate(self, key: str, ttl_seconds: int = 600) -> bool:
        """
        Check and mark an idempotency key in one atomic step.

        Returns False and establishes the mark when the key is new, True when
        a mark already exists. Store failures propagate to the caller.
        """
        marked = self.store.check_and_set(
            key,
            lambda current: current is None,
            DEDUP_MARK,
            ttl_seconds,
        )
        return not marked
