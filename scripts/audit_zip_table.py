#!/usr/bin/env python3
"""
ZIP Table Audit

Compares the static ZIP table with the range heuristic (and optionally the
geocoder) and writes every row to CSV for review.

Usage:
    python scripts/audit_zip_table.py --output data/zip_audit.csv
    python scripts/audit_zip_table.py --geocoder --limit 25
"""

import sys
import logging
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pandas as pd

from citzn.audit import compare_with_heuristic, compare_with_geocoder, disagreements, summarize, export_csv
from citzn.config import get_config
from citzn.geocoding import GeocodioClient
from citzn.zip_table import ZipTable

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Audit the static ZIP table")
    parser.add_argument("--output", default="data/zip_audit.csv", help="CSV path for all comparison rows")
    parser.add_argument("--geocoder", action="store_true", help="Also compare against Geocodio")
    parser.add_argument("--limit", type=int, default=None, help="Max ZIPs sent to the geocoder")
    args = parser.parse_args()

    cfg = get_config()
    table = ZipTable(cfg.overrides_path)

    frames = [compare_with_heuristic(table)]
    if args.geocoder:
        client = GeocodioClient(cfg.geocoding)
        if not client.is_configured:
            logger.error("GEOCODIO_API_KEY is not set; skipping geocoder comparison")
        else:
            zips = table.zip_codes(state="CA")[:args.limit] if args.limit else None
            frames.append(compare_with_geocoder(table, client, zips))

    df = pd.concat(frames, ignore_index=True)
    export_csv(df, args.output)

    print("\nAgreement by source and level:")
    print(summarize(df).to_string(index=False))

    geocoder_rows = df[df["source"] == "geocoder"]
    if not geocoder_rows.empty:
        mismatches = disagreements(geocoder_rows)
        print(f"\n{len(mismatches)} table rows disagree with the geocoder:")
        if not mismatches.empty:
            print(mismatches.head(20).to_string(index=False))


if __name__ == "__main__":
    main()
