"""Heuristic ZIP range fallback.

Last resort when neither the static table nor the geocoder can place a ZIP.
Maps the numeric value of a 5-digit ZIP to a state abbreviation, and for
California estimates county and district numbers from coarse ranges.

Usage:
    from citzn.zip_prefix_fallback import lookup_state_for_zip, guess_mapping
    state = lookup_state_for_zip("10001")  # -> "NY"
    mapping = guess_mapping("93001")       # low-accuracy CA estimate

Estimates are approximate: the ranges follow population centres, not the
2021 district lines. Callers must treat results as accuracy 0.3 and never
cache them over better data.
"""

import math
from typing import Optional, List, Tuple

from citzn.config import CA_DISTRICT_LIMITS
from citzn.mapping import DistrictMapping, SOURCE_HEURISTIC, SOURCE_ACCURACY

# Inclusive numeric ranges of 5-digit ZIPs per state.
# Sources: USPS ZIP allocation references (simplified).
ZIP_RANGES_TO_STATE: List[Tuple[int, int, str]] = [
    (1000, 2799, "MA"), (2800, 2999, "RI"), (3000, 3899, "NH"), (3900, 4999, "ME"),
    (5000, 5999, "VT"), (6000, 6999, "CT"), (7000, 8999, "NJ"),
    (10000, 14999, "NY"), (15000, 19699, "PA"), (19700, 19999, "DE"),
    (20000, 20599, "DC"), (20600, 21999, "MD"), (22000, 24699, "VA"), (24700, 26899, "WV"),
    (27000, 28999, "NC"), (29000, 29999, "SC"), (30000, 31999, "GA"), (32000, 34999, "FL"),
    (35000, 36999, "AL"), (37000, 38599, "TN"), (38600, 39799, "MS"),
    (40000, 42799, "KY"), (43000, 45999, "OH"), (46000, 47999, "IN"), (48000, 49999, "MI"),
    (50000, 52899, "IA"), (53000, 54999, "WI"), (55000, 56799, "MN"),
    (57000, 57899, "SD"), (58000, 58899, "ND"), (59000, 59999, "MT"),
    (60000, 62999, "IL"), (63000, 65899, "MO"), (66000, 67999, "KS"),
    (68000, 69399, "NE"), (70000, 71599, "LA"), (71600, 72999, "AR"),
    (73000, 74999, "OK"), (75000, 79999, "TX"), (80000, 81699, "CO"),
    (82000, 83199, "WY"), (83200, 83899, "ID"), (84000, 84799, "UT"),
    (85000, 86599, "AZ"), (87000, 88499, "NM"), (88500, 88599, "TX"),
    (88900, 89899, "NV"), (90000, 96199, "CA"), (96700, 96899, "HI"),
    (97000, 97999, "OR"), (98000, 99499, "WA"), (99500, 99999, "AK"),
]

# California 3-digit prefixes that sit inside a single county.
# Prefixes split across counties are left out on purpose.
CA_PREFIX_TO_COUNTY = {
    "900": "Los Angeles County", "901": "Los Angeles County", "902": "Los Angeles County",
    "903": "Los Angeles County", "904": "Los Angeles County", "905": "Los Angeles County",
    "906": "Los Angeles County", "907": "Los Angeles County", "908": "Los Angeles County",
    "910": "Los Angeles County", "911": "Los Angeles County", "912": "Los Angeles County",
    "913": "Los Angeles County", "914": "Los Angeles County", "915": "Los Angeles County",
    "916": "Los Angeles County", "917": "Los Angeles County", "918": "Los Angeles County",
    "919": "San Diego County", "920": "San Diego County", "921": "San Diego County",
    "922": "Riverside County", "923": "San Bernardino County", "924": "San Bernardino County",
    "925": "Riverside County",
    "926": "Orange County", "927": "Orange County", "928": "Orange County",
    "930": "Ventura County", "931": "Santa Barbara County",
    "932": "Kern County", "933": "Kern County",
    "936": "Fresno County", "937": "Fresno County", "938": "Fresno County",
    "939": "Monterey County",
    "940": "San Mateo County", "941": "San Francisco County",
    "942": "Sacramento County", "943": "Santa Clara County", "944": "San Mateo County",
    "946": "Alameda County", "947": "Alameda County", "948": "Contra Costa County",
    "949": "Marin County",
    "950": "Santa Clara County", "951": "Santa Clara County",
    "952": "San Joaquin County", "953": "Stanislaus County", "954": "Sonoma County",
    "955": "Humboldt County",
    "956": "Sacramento County", "957": "Sacramento County", "958": "Sacramento County",
    "959": "Butte County", "960": "Shasta County",
}

# (lo, hi, district) special cases inside the Los Angeles ranges
_LA_SENATE_SPECIALS = [(90210, 90212, 26), (90401, 90411, 26), (91101, 91199, 25)]
_LA_CONGRESS_SPECIALS = [(90210, 90212, 30), (90401, 90411, 36), (91101, 91199, 28)]

_SACRAMENTO_CORE = (95814, 95834)


def _zip_number(zip_code: str) -> Optional[int]:
    if not zip_code or len(zip_code) < 5 or not zip_code[:5].isdigit():
        return None
    return int(zip_code[:5])


def _clamp(value: int, kind: str) -> int:
    return max(1, min(value, CA_DISTRICT_LIMITS[kind]))


def lookup_state_for_zip(zip_code: str) -> Optional[str]:
    """Return state abbreviation from the numeric ZIP range.

    Args:
        zip_code: 5-digit ZIP as string (a ZIP+4 suffix is ignored)

    Returns:
        Two-letter state code, or None for unassigned ranges (territories,
        military mail, gaps).
    """
    number = _zip_number(zip_code)
    if number is None:
        return None
    for lo, hi, state in ZIP_RANGES_TO_STATE:
        if lo <= number <= hi:
            return state
    return None


def estimate_assembly(zip_code: str) -> Optional[int]:
    number = _zip_number(zip_code)
    if number is None or lookup_state_for_zip(zip_code) != "CA":
        return None

    if 90000 <= number <= 91999:
        if 90210 <= number <= 90299 or 90400 <= number <= 90499:
            return 50
        if 91100 <= number <= 91199:
            return 41
        district = min(50 + (number - 90000) // 200, 80)
    elif 92000 <= number <= 92999:
        if 92101 <= number <= 92115:
            return 78
        district = min(75 + (number - 92000) // 300, 80)
    elif 93000 <= number <= 93999:
        district = min(26 + (number - 93000) // 200, 35)
    elif 94000 <= number <= 94999:
        if 94102 <= number <= 94124:
            return 17
        district = min(15 + (number - 94000) // 200, 24)
    elif 95000 <= number <= 95999:
        if _SACRAMENTO_CORE[0] <= number <= _SACRAMENTO_CORE[1]:
            return 7
        district = min(5 + (number - 95000) // 200, 12)
    elif 96000 <= number <= 96199:
        district = min(1 + (number - 96000) // 500, 4)
    else:
        district = 1
    return _clamp(district, "assembly")


def estimate_senate(zip_code: str) -> Optional[int]:
    number = _zip_number(zip_code)
    assembly = estimate_assembly(zip_code)
    if number is None or assembly is None:
        return None

    for lo, hi, district in _LA_SENATE_SPECIALS:
        if lo <= number <= hi:
            return district
    if 92000 <= number <= 92999:
        return _clamp(min(38 + (number - 92000) // 500, 40), "senate")
    if 94000 <= number <= 94999:
        return 11
    if _SACRAMENTO_CORE[0] <= number <= _SACRAMENTO_CORE[1]:
        return 6
    # Two assembly districts nest in each senate district
    return _clamp(math.ceil(assembly / 2), "senate")


def estimate_congressional(zip_code: str) -> Optional[int]:
    number = _zip_number(zip_code)
    if number is None or lookup_state_for_zip(zip_code) != "CA":
        return None

    if 90000 <= number <= 91999:
        for lo, hi, district in _LA_CONGRESS_SPECIALS:
            if lo <= number <= hi:
                return district
        district = min(28 + (number - 90000) // 300, 44)
    elif 92000 <= number <= 92999:
        district = min(50 + (number - 92000) // 400, 53)
    elif 94000 <= number <= 94999:
        district = 11
    elif _SACRAMENTO_CORE[0] <= number <= _SACRAMENTO_CORE[1]:
        district = 7
    elif 93000 <= number <= 93999:
        district = min(13 + (number - 93000) // 500, 22)
    elif 95000 <= number <= 95199:
        district = 16
    else:
        district = min((number - 90000) // 1000 + 1, 52)
    return _clamp(district, "congressional")


def estimate_county(zip_code: str) -> Optional[str]:
    """County for CA prefixes that map to one county, else None."""
    if lookup_state_for_zip(zip_code) != "CA":
        return None
    return CA_PREFIX_TO_COUNTY.get(zip_code[:3])


def guess_mapping(zip_code: str) -> Optional[DistrictMapping]:
    """Low-accuracy mapping built only from ZIP ranges.

    California ZIPs get estimated districts and, where the prefix allows it,
    a county. Other states get the state alone. Unassigned ranges give None.
    """
    state = lookup_state_for_zip(zip_code)
    if state is None:
        return None

    mapping = DistrictMapping(
        zip_code=zip_code[:5],
        state=state,
        accuracy=SOURCE_ACCURACY[SOURCE_HEURISTIC],
        source=SOURCE_HEURISTIC,
    )
    if state == "CA":
        mapping.congressional = [estimate_congressional(zip_code)]
        mapping.senate = [estimate_senate(zip_code)]
        mapping.assembly = [estimate_assembly(zip_code)]
        mapping.county = estimate_county(zip_code)
    return mapping


__all__ = [
    "ZIP_RANGES_TO_STATE",
    "CA_PREFIX_TO_COUNTY",
    "lookup_state_for_zip",
    "estimate_assembly",
    "estimate_senate",
    "estimate_congressional",
    "estimate_county",
    "guess_mapping",
]
