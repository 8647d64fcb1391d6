"""Incorporated vs. unincorporated classification for resolved ZIP codes.

A ZIP inside an incorporated city has a mayor and city council; a census
designated place or other unincorporated area is governed by the county
board alone. The classifier checks curated city and CDP tables first, then
infers from the resolved city name, and finally falls back to an
"Unincorporated <county>" answer with low confidence.
"""
import json
import logging
import re
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

from citzn.resilience import CacheLayer

logger = logging.getLogger(__name__)

INCORPORATED_CITY = "incorporated_city"
CENSUS_DESIGNATED_PLACE = "census_designated_place"
UNINCORPORATED_AREA = "unincorporated_area"

CACHE_TYPE = "jurisdiction"


# name -> (county, government type, ZIPs). Only ZIPs that sit inside the city
# limits; ZIPs shared with neighbours or unincorporated areas are left out.
KNOWN_CITIES = {
    "Beverly Hills": ("Los Angeles County", "city", ["90210", "90211", "90212"]),
    "Los Angeles": ("Los Angeles County", "charter_city", [
        "90001", "90002", "90003", "90004", "90005", "90006", "90007", "90008",
        "90010", "90011", "90012", "90013", "90014", "90015", "90016", "90017",
        "90018", "90019", "90020", "90021", "90024", "90025", "90026", "90027",
        "90028", "90029", "90031", "90032", "90033", "90034", "90035", "90036",
        "90037", "90038", "90039", "90041", "90042", "90043", "90045", "90046",
        "90047", "90048", "90049", "90057", "90062", "90064", "90065", "90066",
        "90067", "90068", "90071", "90077",
    ]),
    "San Francisco": ("San Francisco County", "charter_city", [
        "94102", "94103", "94104", "94105", "94107", "94108", "94109", "94110",
        "94111", "94112", "94114", "94115", "94116", "94117", "94118", "94121",
        "94122", "94123", "94124", "94127", "94129", "94130", "94131", "94132",
        "94133", "94134", "94158",
    ]),
    "San Diego": ("San Diego County", "charter_city", [
        "92101", "92102", "92103", "92104", "92105", "92106", "92107", "92108",
        "92109", "92110", "92111", "92113", "92114", "92115", "92116", "92117",
        "92119", "92120", "92121", "92122", "92123", "92124", "92126", "92127",
        "92128", "92129", "92130", "92131",
    ]),
    "Sacramento": ("Sacramento County", "charter_city", [
        "95811", "95814", "95816", "95817", "95818", "95819", "95820", "95822",
        "95831", "95833", "95834", "95835",
    ]),
    "San Jose": ("Santa Clara County", "charter_city", [
        "95110", "95111", "95112", "95113", "95116", "95117", "95118", "95119",
        "95120", "95121", "95122", "95123", "95125", "95126", "95131", "95132",
        "95133", "95134", "95135", "95136", "95138", "95139", "95148",
    ]),
    "Pasadena": ("Los Angeles County", "city", ["91101", "91103", "91104", "91105", "91106", "91107"]),
}

# name -> (county, population, ZIPs)
KNOWN_CDPS = {
    "East Los Angeles": ("Los Angeles County", 120000, ["90022", "90023"]),
    "Altadena": ("Los Angeles County", 42000, ["91001", "91002"]),
    "West Athens": ("Los Angeles County", 9000, ["90044"]),
    "Lamont": ("Kern County", 15000, ["93241"]),
}

_INCORPORATED_PREFIX = re.compile(r"^(City of |Town of |Village of |Municipality of )", re.IGNORECASE)
_UNINCORPORATED_MARKERS = (
    "unincorporated",
    "cdp",
    "census designated place",
    "county area",
    "rural",
)


@dataclass
class JurisdictionResult:
    zip_code: str
    name: str
    jurisdiction_type: str
    county: Optional[str]
    confidence: float
    has_local_representatives: bool
    description: str
    government_type: Optional[str] = None
    source: str = "inferred"

    @property
    def is_incorporated(self) -> bool:
        return self.jurisdiction_type == INCORPORATED_CITY

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JurisdictionResult":
        return cls(**data)


def _county_label(county: Optional[str]) -> str:
    return county or "the county"


def _known_city(zip_code: str) -> Optional[JurisdictionResult]:
    for name, (county, gov_type, zips) in KNOWN_CITIES.items():
        if zip_code in zips:
            return JurisdictionResult(
                zip_code=zip_code,
                name=name,
                jurisdiction_type=INCORPORATED_CITY,
                county=county,
                confidence=1.0,
                has_local_representatives=True,
                description=f"Incorporated {gov_type} with full municipal services",
                government_type=gov_type,
                source="known_city",
            )
    return None


def _known_cdp(zip_code: str) -> Optional[JurisdictionResult]:
    for name, (county, _population, zips) in KNOWN_CDPS.items():
        if zip_code in zips:
            return JurisdictionResult(
                zip_code=zip_code,
                name=name,
                jurisdiction_type=CENSUS_DESIGNATED_PLACE,
                county=county,
                confidence=1.0,
                has_local_representatives=False,
                description=f"Unincorporated community governed by {county}",
                government_type="county",
                source="known_cdp",
            )
    return None


def infer_from_city(zip_code: str, city: Optional[str], county: Optional[str]) -> Optional[JurisdictionResult]:
    """Guess the jurisdiction from the resolved city name alone."""
    city = (city or "").strip()
    lowered = city.lower()
    if not city and not county:
        return None

    if city and _INCORPORATED_PREFIX.match(city):
        return JurisdictionResult(
            zip_code=zip_code,
            name=_INCORPORATED_PREFIX.sub("", city),
            jurisdiction_type=INCORPORATED_CITY,
            county=county,
            confidence=0.7,
            has_local_representatives=True,
            description="Likely incorporated city based on naming pattern",
            government_type="city",
        )

    if not city or "county" in lowered or any(m in lowered for m in _UNINCORPORATED_MARKERS):
        return JurisdictionResult(
            zip_code=zip_code,
            name=city or f"Unincorporated {_county_label(county)}",
            jurisdiction_type=UNINCORPORATED_AREA,
            county=county,
            confidence=0.6,
            has_local_representatives=False,
            description=f"Unincorporated area in {_county_label(county)}",
            government_type="county",
        )

    return JurisdictionResult(
        zip_code=zip_code,
        name=city,
        jurisdiction_type=INCORPORATED_CITY,
        county=county,
        confidence=0.5,
        has_local_representatives=True,
        description="Likely incorporated city",
        government_type="city",
    )


def fallback_result(zip_code: str, county: Optional[str]) -> JurisdictionResult:
    return JurisdictionResult(
        zip_code=zip_code,
        name=f"Unincorporated {county}" if county else "Unincorporated area",
        jurisdiction_type=UNINCORPORATED_AREA,
        county=county,
        confidence=0.3,
        has_local_representatives=False,
        description=f"Area in {_county_label(county)} (jurisdiction unknown)",
        government_type="county",
        source="fallback",
    )


class JurisdictionClassifier:
    """Classify ZIPs, caching answers in the shared cache layer."""

    def __init__(self, cache: Optional[CacheLayer] = None, ttl_seconds: int = 24 * 60 * 60):
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    def _cache_key(self, zip_code: str, city: Optional[str], county: Optional[str]) -> str:
        return f"jurisdiction:{zip_code}:{(city or '').lower()}:{(county or '').lower()}"

    def classify(self, zip_code: str, city: Optional[str] = None, county: Optional[str] = None) -> JurisdictionResult:
        key = self._cache_key(zip_code, city, county)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached:
                try:
                    return JurisdictionResult.from_dict(json.loads(cached))
                except (json.JSONDecodeError, TypeError) as e:
                    logger.warning(f"Dropping unreadable jurisdiction cache entry {key}: {e}")
                    self.cache.delete(key)

        result = self._classify(zip_code, city, county)

        if self.cache is not None:
            self.cache.set(key, json.dumps(result.to_dict()), self.ttl_seconds, CACHE_TYPE)
        return result

    def _classify(self, zip_code: str, city: Optional[str], county: Optional[str]) -> JurisdictionResult:
        result = _known_city(zip_code) or _known_cdp(zip_code)
        if result:
            return result

        return infer_from_city(zip_code, city, county) or fallback_result(zip_code, county)


def representative_rules(result: JurisdictionResult) -> Dict[str, Any]:
    """Which representative levels apply to this jurisdiction."""
    levels = [
        {"level": "federal", "applicable": True, "reason": "All areas have federal representatives"},
        {"level": "state", "applicable": True, "reason": "All areas have state representatives"},
        {"level": "county", "applicable": True, "reason": "All areas are within county jurisdiction"},
        {
            "level": "municipal",
            "applicable": result.has_local_representatives,
            "reason": (
                f"{result.name} is an incorporated city with local government"
                if result.has_local_representatives
                else f"{result.name} is unincorporated and governed at the county level"
            ),
        },
    ]

    excluded = []
    special = []
    if not result.has_local_representatives:
        excluded.append("municipal")
        special.append("Display county-level representatives only for local government")
        special.append(f"Show message: \"This is an unincorporated area of {_county_label(result.county)}\"")

    return {
        "zip_code": result.zip_code,
        "applicable_levels": levels,
        "excluded_levels": excluded,
        "special_rules": special,
    }


def area_description(result: JurisdictionResult) -> Dict[str, str]:
    county = _county_label(result.county)
    if result.jurisdiction_type == INCORPORATED_CITY:
        return {
            "title": f"City of {result.name}",
            "description": f"{result.name} is an incorporated city in {county}.",
            "government_structure": "This city has its own local government with a mayor and city council.",
        }
    if result.jurisdiction_type == CENSUS_DESIGNATED_PLACE:
        return {
            "title": f"{result.name} (Unincorporated)",
            "description": f"{result.name} is a census designated place in {county}.",
            "government_structure": "This community is unincorporated and governed by the county.",
        }
    return {
        "title": result.name,
        "description": f"{result.name} is an unincorporated area in {county}.",
        "government_structure": "This area is governed directly by the county government.",
    }


__all__ = [
    "INCORPORATED_CITY",
    "CENSUS_DESIGNATED_PLACE",
    "UNINCORPORATED_AREA",
    "KNOWN_CITIES",
    "KNOWN_CDPS",
    "JurisdictionResult",
    "JurisdictionClassifier",
    "infer_from_city",
    "fallback_result",
    "representative_rules",
    "area_description",
]
