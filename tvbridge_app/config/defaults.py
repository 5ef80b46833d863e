"""Default configuration parameters for the signal staging pipeline."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DirectiveParams:
    """Trade directive sizing parameters."""
    default_lot: float = 0.1                 # Volume for LONG / SHORT opens
    tp_close_ratio: float = 0.5              # Fraction closed on TP signals


@dataclass(frozen=True)
class RateLimitParams:
    """Per-symbol rate limiting parameters."""
    min_interval_ms: int = 0                 # <= 0 disables rate limiting
    mark_ttl_seconds: int = 3600             # Retention of last-accepted timestamp


@dataclass(frozen=True)
class DedupParams:
    """Idempotency mark parameters."""
    mark_ttl_seconds: int = 600


@dataclass(frozen=True)
class PendingParams:
    """Pending directive store parameters."""
    ttl_seconds: int = 60 * 60 * 24          # Unacknowledged records expire after 24h
    poll_default_limit: int = 10
    poll_max_limit: int = 100
    ack_max_keys: int = 200


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    directive: DirectiveParams
    rate_limit: RateLimitParams
    dedup: DedupParams
    pending: PendingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        directive=DirectiveParams(),
        rate_limit=RateLimitParams(),
        dedup=DedupParams(),
        pending=PendingParams(),
    )
