#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from crowdfund_app.config.loader import ConfigLoader
from crowdfund_app.config.validation import ConfigValidator


def main(config_dir: Optional[str] = None):
    """Main validation function."""
    loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
    print(f"🔍 Validating crowdfund engine configuration in {loader.config_dir}...")

    try:
        config = loader.merge_config()
    except Exception as e:
        print(f"❌ Could not load configuration: {e}")
        sys.exit(1)

    errors = ConfigValidator.validate_config(config)

    for section, params in config.items():
        print(f"\n📋 {section}")
        if isinstance(params, dict):
            for key, value in params.items():
                print(f"  {key}: {value}")

    if errors:
        print(f"\n❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        sys.exit(1)

    print(f"\n🎉 Configuration validation passed!")
    sys.exit(0)


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
