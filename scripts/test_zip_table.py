#!/usr/bin/env python3
"""Tests for ZIP validation, the static table and the overrides file."""
import sys
import json
import tempfile
from pathlib import Path

# add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from citzn.errors import InvalidZipError
from citzn.validation import validate_zip, normalize_zip, SimpleRateLimiter
from citzn.zip_table import ZipTable, load_overrides, extend_overrides


def test_validate_zip():
    """Test accepted and rejected ZIP formats."""
    print("Testing ZIP validation...")
    assert validate_zip("94102"), "5-digit ZIP rejected"
    assert validate_zip("94102-1234"), "ZIP+4 rejected"
    assert validate_zip("  90210 "), "Whitespace not trimmed"
    for bad in ["9410", "941021", "94I02", "94102-12", "", None, 94102, "94102 1234"]:
        assert not validate_zip(bad), f"Accepted invalid ZIP {bad!r}"
    print("✓ ZIP validation works")


def test_normalize_zip():
    """Test ZIP+4 suffix dropping and error details."""
    print("Testing ZIP normalization...")
    assert normalize_zip("95814-1234") == "95814", "ZIP+4 suffix not dropped"
    assert normalize_zip(" 90210") == "90210", "Whitespace not trimmed"

    try:
        normalize_zip("abcde")
        assert False, "Invalid ZIP did not raise"
    except InvalidZipError as e:
        assert e.code == "INVALID_ZIP_FORMAT", f"Unexpected code {e.code}"
        assert e.zip_code == "abcde", "Error lost the offending input"
        assert isinstance(e, ValueError), "InvalidZipError should be a ValueError"

    try:
        normalize_zip(None)
        assert False, "None did not raise"
    except InvalidZipError as e:
        assert e.zip_code is None

    # Unicode digits outside ASCII are not ZIP codes
    for foreign in ["٩٤١٠٢", "９４１０２", "94102-١٢٣٤"]:
        assert not validate_zip(foreign), f"Accepted non-ASCII ZIP {foreign!r}"
        try:
            normalize_zip(foreign)
            assert False, f"{foreign!r} normalized"
        except InvalidZipError:
            pass
    print("✓ ZIP normalization works")


def test_rate_limiter():
    """Test sliding-window limiter."""
    print("Testing rate limiter...")
    limiter = SimpleRateLimiter(max_requests=2, window_sec=60)
    assert limiter.remaining("geocodio") == 2
    assert limiter.is_allowed("geocodio"), "First request blocked"
    assert limiter.is_allowed("geocodio"), "Second request blocked"
    assert not limiter.is_allowed("geocodio"), "Third request allowed"
    assert limiter.remaining("geocodio") == 0
    assert limiter.is_allowed("other"), "Keys are not independent"
    print("✓ Rate limiter works")


def test_builtin_lookup():
    """Test lookups against built-in rows."""
    print("Testing built-in table...")
    with tempfile.TemporaryDirectory() as tmpdir:
        table = ZipTable(str(Path(tmpdir) / "missing.json"))

        record = table.lookup("94102")
        assert record is not None, "94102 missing from table"
        assert record.city == "San Francisco"
        assert record.county == "San Francisco County"
        assert record.congressional == [11] and record.senate == [11] and record.assembly == [17]

        mapping = record.to_mapping()
        assert mapping.source == "table" and mapping.accuracy == 1.0
        assert mapping.state == "CA"

        ny = table.lookup("10001")
        assert ny is not None and ny.state == "NY", "National place row missing"
        assert not ny.has_districts, "National rows should carry no districts"

        assert table.lookup("00000") is None
    print("✓ Built-in table works")


def test_zips_for_district():
    """Test reverse lookups and range checks."""
    print("Testing reverse district lookup...")
    with tempfile.TemporaryDirectory() as tmpdir:
        table = ZipTable(str(Path(tmpdir) / "missing.json"))
        zips = table.zips_for_district("assembly", 17)
        assert "94102" in zips, "94102 not listed for AD-17"
        assert zips == sorted(zips), "Reverse lookup not sorted"

        for kind, number in [("congressional", 53), ("senate", 41), ("assembly", 0), ("assembly", 81)]:
            try:
                table.zips_for_district(kind, number)
                assert False, f"{kind} {number} accepted"
            except ValueError:
                pass

        try:
            table.zips_for_district("county", 1)
            assert False, "Unknown district kind accepted"
        except ValueError:
            pass
    print("✓ Reverse district lookup works")


def test_all_rows_in_range():
    """Every built-in California row must use valid district numbers."""
    print("Testing built-in district ranges...")
    with tempfile.TemporaryDirectory() as tmpdir:
        table = ZipTable(str(Path(tmpdir) / "missing.json"))
        for zip_code in table.zip_codes(state="CA"):
            r = table.lookup(zip_code)
            assert all(1 <= d <= 52 for d in r.congressional), f"{zip_code} CD out of range"
            assert all(1 <= d <= 40 for d in r.senate), f"{zip_code} SD out of range"
            assert all(1 <= d <= 80 for d in r.assembly), f"{zip_code} AD out of range"
    print("✓ Built-in district ranges valid")


def test_overrides_merge():
    """Test partial corrections and new rows from the overrides file."""
    print("Testing overrides...")
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "zip_overrides.json"
        path.write_text(json.dumps({
            "zips": {
                "94102": {"assembly": 19},
                "96161": {"city": "Truckee", "county": "Nevada County",
                          "congressional": 3, "senate": [1, 4], "assembly": 1},
            }
        }))
        table = ZipTable(str(path))

        sf = table.lookup("94102")
        assert sf.assembly == [19], "Override not applied"
        assert sf.city == "San Francisco", "Partial override wiped other fields"
        assert sf.congressional == [11]
        assert sf.corrected

        truckee = table.lookup("96161")
        assert truckee is not None, "New override row missing"
        assert truckee.senate == [1, 4], "List override not kept"
        assert truckee.to_mapping().is_multi_district

        stats = table.coverage_statistics()
        assert stats["corrected_rows"] == 2
    print("✓ Overrides work")


def test_extend_overrides():
    """Test writing corrections and merging into existing entries."""
    print("Testing extend_overrides...")
    with tempfile.TemporaryDirectory() as tmpdir:
        path = str(Path(tmpdir) / "config" / "zip_overrides.json")
        assert load_overrides(path) == {}, "Missing file should load as empty"

        assert extend_overrides({"95060": {"assembly": 28}}, path)
        assert extend_overrides({"95060": {"city": "Santa Cruz"}}, path)
        data = load_overrides(path)
        assert data["95060"] == {"assembly": 28, "city": "Santa Cruz"}, f"Bad merge: {data}"

        table = ZipTable(path)
        assert table.lookup("95060").assembly == [28]
    print("✓ extend_overrides works")


def test_malformed_overrides_skipped():
    """Bad entries are logged and skipped; good ones still load."""
    print("Testing malformed overrides...")
    with tempfile.TemporaryDirectory() as tmpdir:
        builtin = ZipTable(str(Path(tmpdir) / "missing.json"))
        path = Path(tmpdir) / "zip_overrides.json"
        path.write_text(json.dumps({
            "zips": {
                "95060": {"assembly": "28a"},
                "94102": {"congressional": 60, "assembly": 19},
                "95814": "oops",
                "9610": {"assembly": 1},
                "96161": {"city": "Truckee", "congressional": 3, "senate": 1, "assembly": 1},
            }
        }))
        table = ZipTable(str(path))

        assert table.lookup("95060") == builtin.lookup("95060"), "Bad assembly value applied"
        sf = table.lookup("94102")
        assert sf.congressional == [11] and sf.assembly == [17], "Out-of-range entry partly applied"
        assert not sf.corrected
        assert table.lookup("95814") == builtin.lookup("95814")
        assert table.lookup("9610") is None
        assert table.lookup("96161").congressional == [3], "Valid entry dropped"
        assert table.coverage_statistics()["corrected_rows"] == 1

        path.write_text(json.dumps(["not", "an", "object"]))
        assert load_overrides(str(path)) == {}
        assert len(ZipTable(str(path))) == len(builtin)
    print("✓ Malformed overrides skipped")


def test_coverage_statistics():
    print("Testing coverage statistics...")
    with tempfile.TemporaryDirectory() as tmpdir:
        stats = ZipTable(str(Path(tmpdir) / "missing.json")).coverage_statistics()
        assert stats["total_zip_codes"] > 100, "Table unexpectedly small"
        assert 0 < stats["congressional_districts_covered"] <= 52
        assert 0 < stats["senate_districts_covered"] <= 40
        assert 0 < stats["assembly_districts_covered"] <= 80
        assert stats["corrected_rows"] == 0
    print("✓ Coverage statistics work")


def main():
    print("=" * 60)
    print("ZIP TABLE TEST SUITE")
    print("=" * 60)

    test_validate_zip()
    test_normalize_zip()
    test_rate_limiter()
    test_builtin_lookup()
    test_zips_for_district()
    test_all_rows_in_range()
    test_overrides_merge()
    test_extend_overrides()
    test_malformed_overrides_skipped()
    test_coverage_statistics()

    print("=" * 60)
    print("✓ ALL TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    main()
