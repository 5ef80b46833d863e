"""
Time helpers for epoch-millisecond timestamps.

The pipeline never reads the clock directly: components accept a `clock`
callable returning epoch milliseconds, defaulting to `now_ms`.
"""

import time
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def ms_to_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


def format_ms(timestamp_ms: int) -> str:
    """ISO8601 rendering of an epoch-millisecond timestamp for logs."""
    return ms_to_datetime(timestamp_ms).isoformat()
