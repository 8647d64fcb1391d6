#!/usr/bin/env python3
"""Add or correct a ZIP code in the overrides file.

The ZIP is geocoded, the result is shown for review, and on confirmation
(or with --yes) it is written to config/zip_overrides.json. Manual values
can be given instead of, or on top of, the geocoder answer.

Usage:
    python scripts/add_zip_override.py 96161
    python scripts/add_zip_override.py 95060 --assembly 28 --yes
    python scripts/add_zip_override.py 95060 --no-geocoder --city "Santa Cruz" --congressional 19 --senate 17 --assembly 28
"""

import sys
import logging
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from citzn.config import get_config
from citzn.errors import DistrictLookupError
from citzn.geocoding import GeocodioClient
from citzn.validation import normalize_zip
from citzn.zip_table import ZipTable, extend_overrides

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_entry(args, client: GeocodioClient) -> dict:
    """Geocoder answer (if any) overlaid with the values given on the command line."""
    entry = {}
    if not args.no_geocoder:
        print("\n1. Geocoding...")
        try:
            mapping = client.lookup(args.zip)
        except DistrictLookupError as e:
            print(f"✗ Geocoder failed: {e.code} - {e.message}")
        else:
            print(f"✓ {mapping.city}, {mapping.county} (accuracy {mapping.accuracy})")
            entry = {
                "city": mapping.city,
                "county": mapping.county,
                "state": mapping.state,
                "congressional": mapping.congressional,
                "senate": mapping.senate,
                "assembly": mapping.assembly,
            }

    for field in ("city", "county", "state"):
        if getattr(args, field):
            entry[field] = getattr(args, field)
    for field in ("congressional", "senate", "assembly"):
        if getattr(args, field) is not None:
            entry[field] = getattr(args, field)

    # Drop empty values so a partial override keeps the built-in fields
    return {k: v for k, v in entry.items() if v not in (None, [], "")}


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Add a ZIP correction to the overrides file")
    parser.add_argument("zip", help="ZIP code to add or correct")
    parser.add_argument("--city")
    parser.add_argument("--county")
    parser.add_argument("--state")
    parser.add_argument("--congressional", type=int, nargs="+")
    parser.add_argument("--senate", type=int, nargs="+")
    parser.add_argument("--assembly", type=int, nargs="+")
    parser.add_argument("--no-geocoder", action="store_true", help="Use only the values given")
    parser.add_argument("--yes", action="store_true", help="Write without asking")
    args = parser.parse_args()

    try:
        args.zip = normalize_zip(args.zip)
    except DistrictLookupError as e:
        print(f"✗ {e.message}")
        sys.exit(1)

    cfg = get_config()
    table = ZipTable(cfg.overrides_path)

    print(f"\n{'='*60}")
    print(f"ZIP override for: {args.zip}")
    print('='*60)

    existing = table.lookup(args.zip)
    if existing:
        print(f"Current row: {existing.city}, {existing.county} "
              f"CD {existing.congressional} SD {existing.senate} AD {existing.assembly}")

    entry = build_entry(args, GeocodioClient(cfg.geocoding))
    if not entry:
        print("✗ Nothing to write")
        sys.exit(1)

    print(f"\n2. Proposed override: {entry}")
    if not args.yes:
        answer = input("Write to overrides file? [y/N] ").strip().lower()
        if answer != "y":
            print("Aborted")
            sys.exit(1)

    if extend_overrides({args.zip: entry}, cfg.overrides_path):
        print(f"✓ Saved to {cfg.overrides_path}")
        table.reload()
        saved = table.lookup(args.zip)
        if saved is None or not saved.corrected:
            print("⚠️ The saved entry was rejected on reload; check the log for the reason")
    else:
        print("✗ Failed to write overrides")
        sys.exit(1)


if __name__ == "__main__":
    main()
