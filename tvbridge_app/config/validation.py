"""Configuration validation utilities."""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

SECTIONS = ("directive", "rate_limit", "dedup", "pending")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any
    section: str = ""


def coerce_float(value: Any) -> Optional[float]:
    """Parse a numeric config value (number or numeric string), None if unparseable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def coerce_int(value: Any) -> Optional[int]:
    """Parse an integer config value; fractional values are truncated."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    parsed = coerce_float(value)
    if parsed is None or not math.isfinite(parsed):
        return None
    return int(parsed)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_directive_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate directive sizing parameters."""
        errors = []

        # default_lot
        if "default_lot" in params:
            value = params["default_lot"]
            parsed = coerce_float(value)
            if parsed is None or not math.isfinite(parsed) or parsed <= 0:
                errors.append(ValidationError(
                    field="default_lot",
                    message="Must be a finite positive number",
                    value=value,
                    section="directive"
                ))

        # tp_close_ratio
        if "tp_close_ratio" in params:
            value = params["tp_close_ratio"]
            parsed = coerce_float(value)
            if parsed is None or not math.isfinite(parsed) or parsed <= 0 or parsed > 1:
                errors.append(ValidationError(
                    field="tp_close_ratio",
                    message="Must be a finite number in (0, 1]",
                    value=value,
                    section="directive"
                ))

        return errors

    @staticmethod
    def validate_rate_limit_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate rate limiting parameters."""
        errors = []

        # min_interval_ms: non-positive is valid and disables the limiter
        if "min_interval_ms" in params:
            value = params["min_interval_ms"]
            if value is not None and coerce_int(value) is None:
                errors.append(ValidationError(
                    field="min_interval_ms",
                    message="Must be an integer number of milliseconds",
                    value=value,
                    section="rate_limit"
                ))

        errors.extend(ConfigValidator._validate_positive_ints(
            "rate_limit", params, ("mark_ttl_seconds",)
        ))

        return errors

    @staticmethod
    def _validate_positive_ints(
        section: str,
        params: dict[str, Any],
        fields: tuple[str, ...]
    ) -> list[ValidationError]:
        errors = []

        for name in fields:
            if name not in params:
                continue
            value = params[name]
            parsed = coerce_int(value)
            if parsed is None or parsed <= 0:
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=value,
                    section=section
                ))

        return errors

    @staticmethod
    def validate_sections(config: dict[str, Any]) -> list[ValidationError]:
        """Report known sections that are present but not mappings (e.g. `directive:` left empty)."""
        errors = []

        for section in SECTIONS:
            if section in config and not isinstance(config[section], Mapping):
                errors.append(ValidationError(
                    field="",
                    message="Section must be a mapping",
                    value=config[section],
                    section=section
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = ConfigValidator.validate_sections(config)
        invalid_sections = {error.section for error in errors}
        config = {k: v for k, v in config.items() if k not in invalid_sections}

        if "directive" in config:
            errors.extend(ConfigValidator.validate_directive_params(config["directive"]))

        if "rate_limit" in config:
            errors.extend(ConfigValidator.validate_rate_limit_params(config["rate_limit"]))

        if "dedup" in config:
            errors.extend(ConfigValidator._validate_positive_ints(
                "dedup", config["dedup"], ("mark_ttl_seconds",)
            ))

        if "pending" in config:
            errors.extend(ConfigValidator._validate_positive_ints(
                "pending", config["pending"],
                ("ttl_seconds", "poll_default_limit", "poll_max_limit", "ack_max_keys")
            ))

        return errors
