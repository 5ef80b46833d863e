"""Per-symbol minimum-interval gate."""

from typing import Optional

from ..storage.base import KeyValueStore


def _parse_timestamp(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class RateLimiter:
    """
    Sliding single-slot gate on the last accepted timestamp per symbol.

    A rejected attempt leaves the stored timestamp untouched, so the clock is
    never reset by signals that arrive too early.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def is_rate_limited(
        self,
        symbol: str,
        now_ms: int,
        min_interval_ms: int,
        ttl_seconds: int = 3600
    ) -> bool:
        if min_interval_ms <= 0:
            return False

        def slot_free(current: Optional[str]) -> bool:
            last = _parse_timestamp(current)
            return last is None or now_ms - last >= min_interval_ms

        accepted = self.store.check_and_set(symbol, slot_free, str(now_ms), ttl_seconds)
        return not accepted
