#!/usr/bin/env python3
"""
ZIP Code Lookup

Resolves ZIP codes to districts, jurisdiction, coverage level and elected
representatives.

Usage:
    python scripts/lookup_zip.py 94102
    python scripts/lookup_zip.py 90210 95814-1234 --json
    python scripts/lookup_zip.py 93241 --no-geocoder
"""

import sys
import json
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from citzn.config import get_config, get_logger
from citzn.coverage import coverage_for_mapping
from citzn.errors import DistrictLookupError
from citzn.jurisdiction import JurisdictionClassifier, area_description, representative_rules
from citzn.representatives import RepresentativeDirectory
from citzn.resolver import DistrictResolver

logger = get_logger()


def describe_zip(zip_code: str, resolver: DistrictResolver, classifier: JurisdictionClassifier,
                 directory: RepresentativeDirectory, allow_geocoder: bool = True) -> dict:
    """Everything the platform knows about one ZIP, as a plain dict."""
    mapping = resolver.resolve(zip_code, allow_geocoder=allow_geocoder)
    jurisdiction = classifier.classify(mapping.zip_code, mapping.city, mapping.county)
    coverage = coverage_for_mapping(mapping)
    reps = directory.representatives_for(mapping, jurisdiction, coverage)
    return {
        "mapping": mapping.to_dict(),
        "jurisdiction": jurisdiction.to_dict(),
        "area": area_description(jurisdiction),
        "rules": representative_rules(jurisdiction),
        "coverage": coverage.to_dict(),
        "representatives": [r.to_dict() for r in reps],
    }


def print_profile(profile: dict) -> None:
    m = profile["mapping"]
    area = profile["area"]
    print(f"\n{'='*60}")
    print(f"ZIP {m['zip_code']}  ({m['source']}, accuracy {m['accuracy']:.1f}"
          f"{', cached' if m['from_cache'] else ''})")
    print('='*60)
    print(f"  State:         {m['state'] or '-'}")
    print(f"  City:          {m['city'] or '-'}")
    print(f"  County:        {m['county'] or '-'}")
    print(f"  Congressional: {', '.join(map(str, m['congressional'])) or '-'}")
    print(f"  State Senate:  {', '.join(map(str, m['senate'])) or '-'}")
    print(f"  Assembly:      {', '.join(map(str, m['assembly'])) or '-'}")
    if m["is_multi_district"]:
        print("  ⚠️ ZIP spans more than one district; first listed is primary")
    print(f"\n  {area['title']}: {area['description']}")
    print(f"  {profile['coverage']['message']}")
    if profile["coverage"].get("expand_message"):
        print(f"  {profile['coverage']['expand_message']}")

    reps = profile["representatives"]
    if reps:
        print("\n  Representatives:")
        for r in reps:
            district = f" (District {r['district']})" if r.get("district") else ""
            print(f"    [{r['level']}] {r['title']}{district}: {r['name']}")


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Resolve ZIP codes to districts and representatives")
    parser.add_argument("zips", nargs="+", help="5-digit ZIP or ZIP+4 codes")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--no-geocoder", action="store_true", help="Skip the Geocodio fallback")
    parser.add_argument("--no-cache", action="store_true", help="Clear cached mappings first")
    args = parser.parse_args()

    cfg = get_config()
    resolver = DistrictResolver(cfg)
    if args.no_cache:
        resolver.clear_caches()
    classifier = JurisdictionClassifier(resolver.cache, cfg.cache.jurisdiction_ttl_seconds)
    directory = RepresentativeDirectory(roster_path=cfg.roster_path)

    profiles = []
    failures = 0
    for zip_code in args.zips:
        try:
            profile = describe_zip(zip_code, resolver, classifier, directory, not args.no_geocoder)
        except DistrictLookupError as e:
            failures += 1
            if args.json:
                profiles.append(e.to_dict())
            else:
                print(f"✗ {zip_code}: {e.code} - {e.message}")
            continue
        profiles.append(profile)
        if not args.json:
            print_profile(profile)

    if args.json:
        print(json.dumps(profiles, indent=2, ensure_ascii=False))

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
