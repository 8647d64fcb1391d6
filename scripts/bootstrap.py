#!/usr/bin/env python3
"""
CITZN District Resolver Setup
Run this once to prepare data directories, config and the cache database.
"""

import os
import sys
from pathlib import Path
import json
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def check_python_version():
    """Verify Python 3.10+."""
    if sys.version_info < (3, 10):
        print(f"❌ Python 3.10+ required (you have {sys.version_info.major}.{sys.version_info.minor})")
        sys.exit(1)
    print(f"✅ Python {sys.version_info.major}.{sys.version_info.minor}")


def check_api_key():
    """The geocoder is optional; without a key the table and heuristic still answer."""
    if os.getenv("GEOCODIO_API_KEY"):
        print("✅ GEOCODIO_API_KEY set")
        return True
    print("⚠️ GEOCODIO_API_KEY not set - geocoding fallback disabled")
    return False


def create_directories():
    for d in ("data", "config", "logs"):
        (PROJECT_ROOT / d).mkdir(exist_ok=True)
    print("✅ Directories created")


def create_default_config():
    """Write citzn.json with defaults unless one already exists."""
    config_file = PROJECT_ROOT / "citzn.json"

    if config_file.exists():
        print("✅ Configuration file exists")
        return

    default_config = {
        "geocoding": {
            "base_url": "https://api.geocod.io/v1.7",
            "timeout": 10,
            "max_retries": 3,
            "batch_size": 50,
            "rate_limit_requests": 1000,
            "congress_number": 119
        },
        "cache": {
            "cache_db": "data/district_cache.db",
            "ttl_seconds": 30 * 24 * 60 * 60,
            "jurisdiction_ttl_seconds": 24 * 60 * 60
        },
        "app": {
            "state": "CA",
            "log_level": "INFO",
            "enrich_table_hits": True,
            "overrides_path": "config/zip_overrides.json",
            "roster_path": "config/representatives.json"
        }
    }

    with open(config_file, 'w') as f:
        json.dump(default_config, f, indent=2)

    print(f"✅ Configuration created: {config_file}")


def init_cache():
    """Create the SQLite cache database."""
    sys.path.insert(0, str(PROJECT_ROOT / "src"))

    try:
        from citzn.resilience import CacheLayer
    except ImportError as e:
        print(f"❌ Cannot import cache layer: {e}")
        return False

    cache = CacheLayer(str(PROJECT_ROOT / "data" / "district_cache.db"))
    removed = cache.cleanup_expired()
    print(f"✅ Cache database ready ({removed} expired entries removed)")
    return True


def verify_dependencies():
    """Verify required Python packages."""
    required = {
        "requests": "HTTP client for the geocoder",
        "pandas": "Table audits",
    }

    missing = []
    for package, description in required.items():
        try:
            __import__(package)
            print(f"✅ {package}")
        except ImportError:
            missing.append(package)
            print(f"❌ {package} - {description}")

    if missing:
        print("\n❌ Missing required packages:")
        for pkg in missing:
            print(f"   pip install {pkg}")
        return False
    return True


def print_summary():
    print("\n" + "=" * 60)
    print("🗳️  CITZN SETUP COMPLETE")
    print("=" * 60)
    print("\n📋 Next Steps:")
    print("1. export GEOCODIO_API_KEY=... (optional)")
    print("2. python scripts/lookup_zip.py 94102")
    print("3. python scripts/audit_zip_table.py --output data/zip_audit.csv")
    print("\n💡 Configuration file: citzn.json")
    print("📊 Cache: data/district_cache.db")
    print("\n" + "=" * 60)


def main():
    print("🗳️  CITZN Setup\n")

    check_python_version()
    check_api_key()
    create_directories()
    create_default_config()

    if not verify_dependencies():
        print("\n⚠️ Install dependencies: pip install -e .")

    if not init_cache():
        print("⚠️ Cache initialization failed - it will be created on first lookup")

    print_summary()


if __name__ == "__main__":
    main()
