#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List, Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tvbridge_app.config.loader import ConfigLoader
from tvbridge_app.config.validation import ConfigValidator, ValidationError


def validate_pipeline_config(config_dir: Optional[Path] = None) -> List[ValidationError]:
    """Validate merged pipeline configuration (defaults, pipeline.yaml, env)."""
    loader = ConfigLoader.create(config_dir)
    config = loader.merge_config()
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)

    print(f"🔍 Validating TVBridge configuration in {loader.config_dir}...")

    errors = validate_pipeline_config(config_dir)
    if errors:
        print(f"❌ Found {len(errors)} validation errors (fallbacks will be used):")
        for error in errors:
            location = f"{error.section}.{error.field}" if error.field else error.section
            print(f"  • {location}: {error.message} (value: {error.value})")
    else:
        print("✅ Pipeline configuration is valid")

    resolved = loader.resolve()
    print("\n📋 Effective configuration:")
    print(f"  default_lot      = {resolved.default_lot}")
    print(f"  tp_close_ratio   = {resolved.tp_close_ratio}")
    print(f"  min_interval_ms  = {resolved.min_interval_ms}"
          f" ({'enabled' if resolved.rate_limit_enabled else 'disabled'})")

    mappings = loader.load_symbol_mappings()
    print(f"\n🔁 {len(mappings)} symbol mappings")
    for raw, canonical in sorted(mappings.items()):
        print(f"  {raw} -> {canonical}")

    if errors:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)

    print("\n🎉 All configuration validation passed!")
    sys.exit(0)


if __name__ == "__main__":
    main()
