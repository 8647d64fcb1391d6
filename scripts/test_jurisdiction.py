#!/usr/bin/env python3
"""Tests for jurisdiction classification and the shared cache layer."""
import sys
import tempfile
from pathlib import Path

# add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from citzn.jurisdiction import (
    JurisdictionClassifier,
    INCORPORATED_CITY,
    CENSUS_DESIGNATED_PLACE,
    UNINCORPORATED_AREA,
    representative_rules,
    area_description,
)
from citzn.resilience import CacheLayer


def test_known_tables():
    print("Testing known city and CDP tables...")
    classifier = JurisdictionClassifier()

    bh = classifier.classify("90210", "Beverly Hills", "Los Angeles County")
    assert bh.jurisdiction_type == INCORPORATED_CITY and bh.confidence == 1.0
    assert bh.has_local_representatives
    assert bh.source == "known_city"

    # Resolved city says "Los Angeles" but the ZIP is the East LA CDP
    ela = classifier.classify("90022", "Los Angeles", "Los Angeles County")
    assert ela.jurisdiction_type == CENSUS_DESIGNATED_PLACE, f"Got {ela.jurisdiction_type}"
    assert ela.name == "East Los Angeles"
    assert not ela.has_local_representatives

    lamont = classifier.classify("93241")
    assert lamont.name == "Lamont" and lamont.county == "Kern County"
    print("✓ Known tables work")


def test_neighbouring_zips_not_claimed():
    print("Testing ZIPs just outside known cities...")
    classifier = JurisdictionClassifier()

    coronado = classifier.classify("92118", "Coronado", "San Diego County")
    assert coronado.name == "Coronado", f"92118 claimed by {coronado.name}"
    assert coronado.source != "known_city" and coronado.confidence < 1.0

    # Arden-Arcade mail is addressed to Sacramento but the area is unincorporated
    for zip_code in ["95821", "95825"]:
        r = classifier.classify(zip_code, "Sacramento", "Sacramento County")
        assert r.source != "known_city", f"{zip_code} treated as inside Sacramento"
        assert r.confidence < 1.0

    assert classifier.classify("95814").source == "known_city"
    print("✓ Neighbouring ZIPs fall through to inference")


def test_inference():
    print("Testing name-based inference...")
    classifier = JurisdictionClassifier()

    r = classifier.classify("95060", "City of Santa Cruz", "Santa Cruz County")
    assert r.jurisdiction_type == INCORPORATED_CITY and r.confidence == 0.7
    assert r.name == "Santa Cruz", "Naming prefix not stripped"

    r = classifier.classify("93230", "Hanford CDP", "Kings County")
    assert r.jurisdiction_type == UNINCORPORATED_AREA and r.confidence == 0.6

    r = classifier.classify("95977", "Yuba County Area", "Yuba County")
    assert r.jurisdiction_type == UNINCORPORATED_AREA

    r = classifier.classify("96001", None, "Shasta County")
    assert r.jurisdiction_type == UNINCORPORATED_AREA and r.confidence == 0.6
    assert r.name == "Unincorporated Shasta County"

    r = classifier.classify("95014", "Cupertino", "Santa Clara County")
    assert r.jurisdiction_type == INCORPORATED_CITY and r.confidence == 0.5
    print("✓ Inference works")


def test_fallback():
    print("Testing fallback...")
    r = JurisdictionClassifier().classify("96199", None, None)
    assert r.jurisdiction_type == UNINCORPORATED_AREA
    assert r.confidence == 0.3
    assert r.source == "fallback"
    assert "Unknown" not in r.name
    print("✓ Fallback works")


def test_rules_and_description():
    print("Testing representative rules and descriptions...")
    classifier = JurisdictionClassifier()

    city = classifier.classify("94102", "San Francisco", "San Francisco County")
    rules = representative_rules(city)
    assert rules["excluded_levels"] == []
    assert [l["level"] for l in rules["applicable_levels"]] == ["federal", "state", "county", "municipal"]
    assert area_description(city)["title"] == "City of San Francisco"

    cdp = classifier.classify("91001")
    rules = representative_rules(cdp)
    assert rules["excluded_levels"] == ["municipal"]
    municipal = [l for l in rules["applicable_levels"] if l["level"] == "municipal"][0]
    assert municipal["applicable"] is False
    assert area_description(cdp)["title"] == "Altadena (Unincorporated)"
    print("✓ Rules and descriptions work")


def test_classification_cached():
    print("Testing jurisdiction cache...")
    with tempfile.TemporaryDirectory() as tmpdir:
        cache = CacheLayer(str(Path(tmpdir) / "cache.db"))
        classifier = JurisdictionClassifier(cache, ttl_seconds=3600)

        first = classifier.classify("95014", "Cupertino", "Santa Clara County")
        stats = cache.get_stats()
        assert stats["jurisdiction"]["valid"] == 1, f"Result not cached: {stats}"

        second = classifier.classify("95014", "Cupertino", "Santa Clara County")
        assert second == first, "Cached result differs"

        assert cache.clear("jurisdiction") == 1
        assert cache.get_stats() == {}
    print("✓ Jurisdiction cache works")


def test_cache_expiry():
    print("Testing cache TTL...")
    with tempfile.TemporaryDirectory() as tmpdir:
        cache = CacheLayer(str(Path(tmpdir) / "cache.db"))
        cache.set("k", "v", ttl_seconds=-1, cache_type="district")
        assert cache.get("k") is None, "Expired entry returned"
        assert cache.cleanup_expired() == 1
        cache.set("k2", "v2", ttl_seconds=60, cache_type="district")
        assert cache.get("k2") == "v2"
    print("✓ Cache TTL works")


def main():
    print("=" * 60)
    print("JURISDICTION TEST SUITE")
    print("=" * 60)

    test_known_tables()
    test_neighbouring_zips_not_claimed()
    test_inference()
    test_fallback()
    test_rules_and_description()
    test_classification_cached()
    test_cache_expiry()

    print("=" * 60)
    print("✓ ALL TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    main()
