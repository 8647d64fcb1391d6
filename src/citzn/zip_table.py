"""Hand-curated California ZIP code table.

Maps ZIP codes to city, county and district numbers (congressional, state
senate, state assembly). Corrections live in ``config/zip_overrides.json``
and are merged over the built-in rows at load time, so a bad row can be fixed
without a code change:

    {
      "zips": {
        "95060": {"city": "Santa Cruz", "assembly": 28},
        "96161": {"city": "Truckee", "county": "Nevada County",
                  "congressional": 3, "senate": 1, "assembly": 1}
      }
    }

District values in overrides may be a single number or a list when the ZIP
is split between districts (first entry is the primary district).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Any

from citzn.config import CA_DISTRICT_LIMITS
from citzn.mapping import DistrictMapping, SOURCE_TABLE, SOURCE_ACCURACY, clean_place
from citzn.validation import validate_zip

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# zip: (city, county, congressional, senate, assembly)
# Sources: California Citizens Redistricting Commission 2021 maps (simplified).
CA_ZIP_TABLE = {
    "90001": ("Los Angeles", "Los Angeles County", 44, 35, 64),
    "90002": ("Los Angeles", "Los Angeles County", 44, 35, 64),
    "90003": ("Los Angeles", "Los Angeles County", 44, 35, 64),
    "90004": ("Los Angeles", "Los Angeles County", 34, 30, 54),
    "90005": ("Los Angeles", "Los Angeles County", 34, 30, 54),
    "90006": ("Los Angeles", "Los Angeles County", 34, 30, 54),
    "90007": ("Los Angeles", "Los Angeles County", 37, 30, 53),
    "90008": ("Los Angeles", "Los Angeles County", 37, 35, 62),
    "90010": ("Los Angeles", "Los Angeles County", 34, 30, 54),
    "90011": ("Los Angeles", "Los Angeles County", 44, 35, 64),
    "90012": ("Los Angeles", "Los Angeles County", 34, 24, 53),
    "90013": ("Los Angeles", "Los Angeles County", 34, 24, 53),
    "90014": ("Los Angeles", "Los Angeles County", 34, 24, 53),
    "90015": ("Los Angeles", "Los Angeles County", 34, 24, 53),
    "90016": ("Los Angeles", "Los Angeles County", 37, 30, 54),
    "90017": ("Los Angeles", "Los Angeles County", 34, 24, 53),
    "90018": ("Los Angeles", "Los Angeles County", 37, 30, 54),
    "90019": ("Los Angeles", "Los Angeles County", 37, 30, 54),
    "90020": ("Los Angeles", "Los Angeles County", 34, 30, 54),
    "90210": ("Beverly Hills", "Los Angeles County", 30, 26, 50),
    "90211": ("Beverly Hills", "Los Angeles County", 30, 26, 50),
    "90212": ("Beverly Hills", "Los Angeles County", 30, 26, 50),
    "90291": ("Los Angeles", "Los Angeles County", 36, 26, 62),
    "90401": ("Santa Monica", "Los Angeles County", 36, 26, 50),
    "90402": ("Santa Monica", "Los Angeles County", 36, 26, 50),
    "90403": ("Santa Monica", "Los Angeles County", 36, 26, 50),
    "90404": ("Santa Monica", "Los Angeles County", 36, 26, 50),
    "90405": ("Santa Monica", "Los Angeles County", 36, 26, 50),
    "91101": ("Pasadena", "Los Angeles County", 28, 25, 41),
    "91102": ("Pasadena", "Los Angeles County", 28, 25, 41),
    "91103": ("Pasadena", "Los Angeles County", 28, 25, 41),
    "91104": ("Pasadena", "Los Angeles County", 28, 25, 41),
    "91105": ("Pasadena", "Los Angeles County", 28, 25, 41),
    "91106": ("Pasadena", "Los Angeles County", 28, 25, 41),
    "92101": ("San Diego", "San Diego County", 51, 39, 78),
    "92102": ("San Diego", "San Diego County", 51, 39, 78),
    "92103": ("San Diego", "San Diego County", 51, 39, 78),
    "92104": ("San Diego", "San Diego County", 51, 39, 78),
    "92105": ("San Diego", "San Diego County", 51, 39, 78),
    "92106": ("San Diego", "San Diego County", 52, 39, 78),
    "92107": ("San Diego", "San Diego County", 52, 39, 78),
    "92108": ("San Diego", "San Diego County", 52, 39, 78),
    "92109": ("San Diego", "San Diego County", 52, 39, 77),
    "92110": ("San Diego", "San Diego County", 52, 39, 78),
    "92111": ("San Diego", "San Diego County", 52, 38, 77),
    "92113": ("San Diego", "San Diego County", 51, 40, 79),
    "92114": ("San Diego", "San Diego County", 51, 40, 79),
    "92115": ("San Diego", "San Diego County", 51, 39, 78),
    "92602": ("Irvine", "Orange County", 47, 37, 74),
    "92603": ("Irvine", "Orange County", 47, 37, 74),
    "92604": ("Irvine", "Orange County", 47, 37, 74),
    "92606": ("Irvine", "Orange County", 47, 37, 74),
    "92612": ("Irvine", "Orange County", 47, 37, 74),
    "92614": ("Irvine", "Orange County", 47, 37, 74),
    "92618": ("Irvine", "Orange County", 47, 37, 74),
    "92620": ("Irvine", "Orange County", 47, 37, 74),
    "92701": ("Santa Ana", "Orange County", 46, 34, 69),
    "92702": ("Santa Ana", "Orange County", 46, 34, 69),
    "92703": ("Santa Ana", "Orange County", 46, 34, 69),
    "92704": ("Santa Ana", "Orange County", 46, 34, 69),
    "92705": ("Santa Ana", "Orange County", 46, 34, 69),
    "92801": ("Anaheim", "Orange County", 46, 29, 65),
    "92802": ("Anaheim", "Orange County", 46, 29, 65),
    "92804": ("Anaheim", "Orange County", 46, 29, 65),
    "92805": ("Anaheim", "Orange County", 46, 29, 65),
    "93701": ("Fresno", "Fresno County", 13, 8, 31),
    "93702": ("Fresno", "Fresno County", 13, 8, 31),
    "93703": ("Fresno", "Fresno County", 13, 8, 31),
    "93704": ("Fresno", "Fresno County", 13, 8, 31),
    "93705": ("Fresno", "Fresno County", 13, 8, 31),
    "93706": ("Fresno", "Fresno County", 13, 8, 31),
    "94102": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94103": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94104": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94105": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94107": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94108": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94109": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94110": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94111": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94112": ("San Francisco", "San Francisco County", 11, 11, 19),
    "94114": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94115": ("San Francisco", "San Francisco County", 11, 11, 19),
    "94116": ("San Francisco", "San Francisco County", 11, 11, 19),
    "94117": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94118": ("San Francisco", "San Francisco County", 11, 11, 19),
    "94121": ("San Francisco", "San Francisco County", 11, 11, 19),
    "94122": ("San Francisco", "San Francisco County", 11, 11, 19),
    "94123": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94124": ("San Francisco", "San Francisco County", 11, 11, 17),
    "94301": ("Palo Alto", "Santa Clara County", 16, 13, 24),
    "94302": ("Palo Alto", "Santa Clara County", 16, 13, 24),
    "94303": ("Palo Alto", "Santa Clara County", 16, 13, 24),
    "94304": ("Palo Alto", "Santa Clara County", 16, 13, 24),
    "94305": ("Palo Alto", "Santa Clara County", 16, 13, 24),
    "94601": ("Oakland", "Alameda County", 13, 9, 18),
    "94602": ("Oakland", "Alameda County", 13, 9, 18),
    "94603": ("Oakland", "Alameda County", 13, 9, 18),
    "94605": ("Oakland", "Alameda County", 13, 9, 18),
    "94606": ("Oakland", "Alameda County", 13, 9, 18),
    "94607": ("Oakland", "Alameda County", 13, 9, 18),
    "94608": ("Oakland", "Alameda County", 13, 9, 15),
    "94609": ("Oakland", "Alameda County", 13, 9, 15),
    "94610": ("Oakland", "Alameda County", 13, 9, 15),
    "94611": ("Oakland", "Alameda County", 13, 9, 15),
    "94612": ("Oakland", "Alameda County", 13, 9, 15),
    "94901": ("San Rafael", "Marin County", 2, 2, 10),
    "94903": ("San Rafael", "Marin County", 2, 2, 10),
    "94904": ("San Rafael", "Marin County", 2, 2, 10),
    "95014": ("Cupertino", "Santa Clara County", 16, 15, 28),
    "95060": ("Santa Cruz", "Santa Cruz County", 18, 17, 29),
    "95062": ("Santa Cruz", "Santa Cruz County", 18, 17, 29),
    "95064": ("Santa Cruz", "Santa Cruz County", 18, 17, 29),
    "95110": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95111": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95112": ("San Jose", "Santa Clara County", 16, 15, 25),
    "95113": ("San Jose", "Santa Clara County", 16, 15, 25),
    "95116": ("San Jose", "Santa Clara County", 16, 15, 25),
    "95117": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95118": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95119": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95120": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95121": ("San Jose", "Santa Clara County", 16, 15, 25),
    "95122": ("San Jose", "Santa Clara County", 16, 15, 25),
    "95123": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95124": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95125": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95126": ("San Jose", "Santa Clara County", 16, 15, 25),
    "95127": ("San Jose", "Santa Clara County", 16, 15, 25),
    "95128": ("San Jose", "Santa Clara County", 16, 15, 28),
    "95814": ("Sacramento", "Sacramento County", 7, 6, 7),
    "95815": ("Sacramento", "Sacramento County", 7, 6, 7),
    "95816": ("Sacramento", "Sacramento County", 7, 6, 7),
    "95817": ("Sacramento", "Sacramento County", 7, 6, 7),
    "95818": ("Sacramento", "Sacramento County", 7, 6, 9),
    "95819": ("Sacramento", "Sacramento County", 7, 6, 7),
    "95820": ("Sacramento", "Sacramento County", 7, 6, 9),
    "95821": ("Sacramento", "Sacramento County", 3, 6, 8),
    "95822": ("Sacramento", "Sacramento County", 7, 6, 9),
    "95823": ("Sacramento", "Sacramento County", 7, 6, 9),
    "95824": ("Sacramento", "Sacramento County", 7, 6, 9),
    "95825": ("Sacramento", "Sacramento County", 7, 6, 8),
    "95826": ("Sacramento", "Sacramento County", 7, 6, 8),
    "95827": ("Sacramento", "Sacramento County", 7, 6, 8),
    "95828": ("Sacramento", "Sacramento County", 7, 6, 8),
    "95829": ("Sacramento", "Sacramento County", 7, 6, 8),
    "95831": ("Sacramento", "Sacramento County", 7, 6, 9),
    "95832": ("Sacramento", "Sacramento County", 7, 6, 9),
    "95833": ("Sacramento", "Sacramento County", 3, 6, 8),
    "95834": ("Sacramento", "Sacramento County", 3, 6, 8),
    "95835": ("Sacramento", "Sacramento County", 3, 6, 8),
}

# ZIP codes outside California that the platform recognises by place only.
# No district data: state and local coverage is California-only.
NATIONAL_ZIP_LOCATIONS = {
    "10001": ("New York", "New York County", "NY"),
    "10013": ("New York", "New York County", "NY"),
    "11201": ("Brooklyn", "Kings County", "NY"),
    "14201": ("Buffalo", "Erie County", "NY"),
    "75201": ("Dallas", "Dallas County", "TX"),
    "77001": ("Houston", "Harris County", "TX"),
    "78701": ("Austin", "Travis County", "TX"),
    "78210": ("San Antonio", "Bexar County", "TX"),
    "33101": ("Miami", "Miami-Dade County", "FL"),
    "32801": ("Orlando", "Orange County", "FL"),
    "33601": ("Tampa", "Hillsborough County", "FL"),
    "60601": ("Chicago", "Cook County", "IL"),
    "62701": ("Springfield", "Sangamon County", "IL"),
    "98101": ("Seattle", "King County", "WA"),
    "98501": ("Olympia", "Thurston County", "WA"),
    "02108": ("Boston", "Suffolk County", "MA"),
    "02139": ("Cambridge", "Middlesex County", "MA"),
    "85001": ("Phoenix", "Maricopa County", "AZ"),
    "85701": ("Tucson", "Pima County", "AZ"),
    "80202": ("Denver", "Denver County", "CO"),
    "80301": ("Boulder", "Boulder County", "CO"),
    "19101": ("Philadelphia", "Philadelphia County", "PA"),
    "15201": ("Pittsburgh", "Allegheny County", "PA"),
}

DISTRICT_KINDS = ("congressional", "senate", "assembly")


def _as_district_list(value) -> List[int]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [int(v) for v in value if v is not None]
    return [int(value)]


@dataclass
class ZipRecord:
    """One row of the static table."""
    zip_code: str
    city: Optional[str]
    county: Optional[str]
    state: str = "CA"
    congressional: List[int] = field(default_factory=list)
    senate: List[int] = field(default_factory=list)
    assembly: List[int] = field(default_factory=list)
    corrected: bool = False

    @property
    def has_districts(self) -> bool:
        return bool(self.congressional or self.senate or self.assembly)

    def to_mapping(self) -> DistrictMapping:
        return DistrictMapping(
            zip_code=self.zip_code,
            state=self.state,
            congressional=list(self.congressional),
            senate=list(self.senate),
            assembly=list(self.assembly),
            county=clean_place(self.county),
            city=clean_place(self.city),
            accuracy=SOURCE_ACCURACY[SOURCE_TABLE],
            source=SOURCE_TABLE,
        )


def _builtin_records() -> Dict[str, ZipRecord]:
    records = {}
    for zip_code, (city, county, cd, sd, ad) in CA_ZIP_TABLE.items():
        records[zip_code] = ZipRecord(
            zip_code=zip_code,
            city=city,
            county=county,
            congressional=[cd],
            senate=[sd],
            assembly=[ad],
        )
    for zip_code, (city, county, state) in NATIONAL_ZIP_LOCATIONS.items():
        records[zip_code] = ZipRecord(zip_code=zip_code, city=city, county=county, state=state)
    return records


def _resolve_path(path: str) -> Path:
    config_file = Path(path)
    if not config_file.exists() and not config_file.is_absolute():
        candidate = PROJECT_ROOT / path
        if candidate.exists():
            return candidate
    return config_file


def load_overrides(path: str = "config/zip_overrides.json") -> Dict[str, Dict[str, Any]]:
    """Load ZIP corrections. Returns an empty dict if the file is missing."""
    config_file = _resolve_path(path)
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load ZIP overrides from {config_file}: {e}")
        return {}
    zips = data.get("zips", {}) if isinstance(data, dict) else None
    if not isinstance(zips, dict):
        logger.warning(f"Ignoring {config_file}: expected {{\"zips\": {{...}}}}")
        return {}
    return zips


def extend_overrides(entries: Dict[str, Dict[str, Any]], path: str = "config/zip_overrides.json") -> bool:
    """Merge new corrections into the overrides file.

    Returns:
        True if the file was written, False otherwise
    """
    config_file = _resolve_path(path)
    try:
        if config_file.exists():
            with open(config_file, "r") as f:
                config = json.load(f)
        else:
            config = {"zips": {}}

        zips = config.setdefault("zips", {})
        for zip_code, entry in entries.items():
            zips.setdefault(zip_code, {}).update(entry)

        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            json.dump(config, f, indent=2, sort_keys=True)

        logger.info(f"Extended ZIP overrides with {len(entries)} entries")
        return True
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to extend ZIP overrides: {e}")
        return False


def _apply_override(record: Optional[ZipRecord], zip_code: str, entry: Dict[str, Any]) -> ZipRecord:
    """Merge one correction into a row.

    Raises:
        ValueError: malformed ZIP, entry or district number. The row is left
            untouched in that case.
    """
    if not validate_zip(zip_code) or len(zip_code) != 5:
        raise ValueError("key is not a 5-digit ZIP")
    if not isinstance(entry, dict):
        raise ValueError("entry is not an object")

    state = entry.get("state") or (record.state if record is not None else "CA")
    districts = {}
    for kind in DISTRICT_KINDS:
        if kind not in entry:
            continue
        try:
            numbers = _as_district_list(entry[kind])
        except (TypeError, ValueError):
            raise ValueError(f"{kind} value {entry[kind]!r} is not a district number")
        if state == "CA":
            limit = CA_DISTRICT_LIMITS[kind]
            for number in numbers:
                if number < 1 or number > limit:
                    raise ValueError(f"{kind} district {number} outside 1-{limit}")
        districts[kind] = numbers

    if record is None:
        record = ZipRecord(zip_code=zip_code, city=None, county=None, state=state)
    if "city" in entry:
        record.city = entry["city"]
    if "county" in entry:
        record.county = entry["county"]
    record.state = state
    for kind, numbers in districts.items():
        setattr(record, kind, numbers)
    record.corrected = True
    return record


class ZipTable:
    """Built-in rows plus corrections, indexed by ZIP."""

    def __init__(self, overrides_path: str = "config/zip_overrides.json"):
        self.overrides_path = overrides_path
        self.records: Dict[str, ZipRecord] = {}
        self.reload()

    def reload(self) -> None:
        records = _builtin_records()
        overrides = load_overrides(self.overrides_path)
        applied = 0
        for zip_code, entry in overrides.items():
            try:
                records[zip_code] = _apply_override(records.get(zip_code), zip_code, entry)
            except ValueError as e:
                logger.warning(f"Skipping ZIP override {zip_code!r}: {e}")
                continue
            applied += 1
        self.records = records
        if overrides:
            logger.info(f"Loaded {applied}/{len(overrides)} ZIP overrides from {self.overrides_path}")

    def lookup(self, zip_code: str) -> Optional[ZipRecord]:
        return self.records.get(zip_code)

    def __contains__(self, zip_code: str) -> bool:
        return zip_code in self.records

    def __len__(self) -> int:
        return len(self.records)

    def zip_codes(self, state: Optional[str] = None) -> List[str]:
        return sorted(
            z for z, r in self.records.items()
            if state is None or r.state == state
        )

    def zips_for_district(self, kind: str, number: int) -> List[str]:
        """All table ZIPs that touch the given California district."""
        if kind not in CA_DISTRICT_LIMITS:
            raise ValueError(f"Unknown district kind: {kind}")
        limit = CA_DISTRICT_LIMITS[kind]
        if number < 1 or number > limit:
            raise ValueError(f"Invalid {kind} district: {number}. Must be 1-{limit}.")
        return sorted(
            z for z, r in self.records.items()
            if r.state == "CA" and number in getattr(r, kind)
        )

    def coverage_statistics(self) -> Dict[str, int]:
        ca_rows = [r for r in self.records.values() if r.state == "CA" and r.has_districts]
        return {
            "total_zip_codes": len(ca_rows),
            "congressional_districts_covered": len({d for r in ca_rows for d in r.congressional}),
            "senate_districts_covered": len({d for r in ca_rows for d in r.senate}),
            "assembly_districts_covered": len({d for r in ca_rows for d in r.assembly}),
            "corrected_rows": sum(1 for r in self.records.values() if r.corrected),
        }


__all__ = [
    "CA_ZIP_TABLE",
    "NATIONAL_ZIP_LOCATIONS",
    "DISTRICT_KINDS",
    "ZipRecord",
    "ZipTable",
    "load_overrides",
    "extend_overrides",
]
