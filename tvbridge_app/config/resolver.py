"""
Resolution of merged configuration into a validated pipeline configuration.

The batch processor calls resolve_pipeline_config once per batch. Invalid
values never fail a batch: each one is replaced by its documented fallback
and reported as a structured warning.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

from .defaults import DefaultConfig, get_default_config
from .validation import ConfigValidator, coerce_float, coerce_int

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Fully validated, read-only configuration for one batch."""
    default_lot: float = 0.1
    tp_close_ratio: float = 0.5
    min_interval_ms: int = 0
    dedup_ttl_seconds: int = 600
    rate_limit_ttl_seconds: int = 3600
    pending_ttl_seconds: int = 86400
    poll_default_limit: int = 10
    poll_max_limit: int = 100
    ack_max_keys: int = 200

    @property
    def rate_limit_enabled(self) -> bool:
        return self.min_interval_ms > 0


def resolve_pipeline_config(
    config: dict[str, Any],
    defaults: Optional[DefaultConfig] = None
) -> PipelineConfig:
    """
    Resolve a merged configuration dictionary into a PipelineConfig.

    Args:
        config: Merged configuration (see ConfigLoader.merge_config)
        defaults: Fallback values, the dataclass defaults when omitted

    Returns:
        PipelineConfig with every invalid or missing value replaced by its fallback
    """
    if defaults is None:
        defaults = get_default_config()

    errors = ConfigValidator.validate_config(config)
    invalid = {(error.section, error.field) for error in errors}
    invalid_sections = {error.section for error in errors if not error.field}

    for section in sorted(invalid_sections):
        logger.warning(
            "Invalid configuration section, using fallbacks",
            section=section,
            value=config.get(section)
        )

    def pick(section: str, name: str, coerce: Callable[[Any], Any]) -> Any:
        fallback = getattr(getattr(defaults, section), name)

        if section in invalid_sections:
            return fallback

        value = config.get(section, {}).get(name)

        if (section, name) in invalid:
            logger.warning(
                "Invalid configuration value, using fallback",
                section=section,
                field=name,
                value=value,
                fallback=fallback
            )
            return fallback

        if value is None:
            return fallback

        return coerce(value)

    return PipelineConfig(
        default_lot=pick("directive", "default_lot", coerce_float),
        tp_close_ratio=pick("directive", "tp_close_ratio", coerce_float),
        min_interval_ms=pick("rate_limit", "min_interval_ms", coerce_int),
        dedup_ttl_seconds=pick("dedup", "mark_ttl_seconds", coerce_int),
        rate_limit_ttl_seconds=pick("rate_limit", "mark_ttl_seconds", coerce_int),
        pending_ttl_seconds=pick("pending", "ttl_seconds", coerce_int),
        poll_default_limit=pick("pending", "poll_default_limit", coerce_int),
        poll_max_limit=pick("pending", "poll_max_limit", coerce_int),
        ack_max_keys=pick("pending", "ack_max_keys", coerce_int),
    )
