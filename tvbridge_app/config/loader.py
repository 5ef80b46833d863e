"""Configuration loader with 3-tier parameter precedence."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog
import yaml

from .defaults import DefaultConfig, get_default_config
from .resolver import PipelineConfig, resolve_pipeline_config

logger = structlog.get_logger(__name__)

# Environment variable -> (section, field)
ENV_OVERRIDES = {
    "DEFAULT_LOT": ("directive", "default_lot"),
    "TP_CLOSE_RATIO": ("directive", "tp_close_ratio"),
    "MIN_INTERVAL_MS": ("rate_limit", "min_interval_ms"),
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig
    environ: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        config_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
            environ=dict(os.environ) if environ is None else dict(environ),
        )

    def _load_yaml(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename

        if not path.exists():
            return {}

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning("Unreadable configuration file, ignoring it", path=str(path), error=str(e))
            return {}

        return data if isinstance(data, dict) else {}

    def load_pipeline_config(self) -> dict[str, Any]:
        """Load pipeline overrides from pipeline.yaml."""
        return self._load_yaml("pipeline.yaml")

    def load_env_overrides(self) -> dict[str, Any]:
        """Collect overrides from environment variables."""
        overrides: dict[str, Any] = {}

        for env_name, (section, field_name) in ENV_OVERRIDES.items():
            if env_name in self.environ:
                overrides.setdefault(section, {})[field_name] = self.environ[env_name]

        return overrides

    def load_symbol_mappings(self) -> dict[str, str]:
        """Load raw -> canonical symbol mappings from symbols.yaml."""
        symbols = self._load_yaml("symbols.yaml").get("symbols") or {}
        if not isinstance(symbols, Mapping):
            logger.warning("symbols.yaml `symbols` must be a mapping, ignoring it", value=symbols)
            return {}
        return {
            str(raw).strip().upper(): str(canonical).strip()
            for raw, canonical in symbols.items()
            if raw is not None and canonical is not None
        }

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Environment variables / explicit overrides (highest priority)
        2. pipeline.yaml in the config directory
        3. Dataclass defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_pipeline_config())
        config = self._deep_merge(config, self.load_env_overrides())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def resolve(self, overrides: Optional[dict[str, Any]] = None) -> PipelineConfig:
        """Merge all tiers and resolve them into a validated PipelineConfig."""
        return resolve_pipeline_config(self.merge_config(overrides), self.defaults)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
