"""What the platform can show for a resolved location."""
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

from citzn.mapping import DistrictMapping

FULL_COVERAGE = "full_coverage"
FEDERAL_ONLY = "federal_only"
NOT_SUPPORTED = "not_supported"

STATE_NAMES = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho",
    "IL": "Illinois", "IN": "Indiana", "IA": "Iowa", "KS": "Kansas",
    "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
    "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
    "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah",
    "VT": "Vermont", "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming", "DC": "Washington D.C.",
}

_NAME_TO_CODE = {name.lower(): code for code, name in STATE_NAMES.items()}
_NAME_TO_CODE.update({"washington dc": "DC", "district of columbia": "DC"})

# Phase 1: California only
FULL_COVERAGE_STATES = {"CA"}


@dataclass
class CoverageLevel:
    type: str
    show_federal: bool
    show_state: bool
    show_local: bool
    message: str
    collect_email: bool = False
    expand_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_state(state: Optional[str]) -> Optional[str]:
    """Two-letter code for a state code or full name (case-insensitive)."""
    if not state:
        return None
    cleaned = state.strip()
    return _NAME_TO_CODE.get(cleaned.lower(), cleaned.upper())


def state_name(code: str) -> str:
    return STATE_NAMES.get(code, code)


def determine_coverage(state: Optional[str], city: Optional[str] = None) -> CoverageLevel:
    code = normalize_state(state)
    place = f"{city}, " if city else ""

    if code in FULL_COVERAGE_STATES:
        return CoverageLevel(
            type=FULL_COVERAGE,
            show_federal=True,
            show_state=True,
            show_local=True,
            message=f"Complete political information for {place}{code}",
        )

    if code in STATE_NAMES:
        name = state_name(code)
        return CoverageLevel(
            type=FEDERAL_ONLY,
            show_federal=True,
            show_state=False,
            show_local=False,
            message=f"Federal representatives for {place}{name}",
            collect_email=True,
            expand_message=f"We're working to add {name} state and local data - join the waitlist!",
        )

    return CoverageLevel(
        type=NOT_SUPPORTED,
        show_federal=False,
        show_state=False,
        show_local=False,
        message="Location not supported",
        collect_email=True,
        expand_message="Help us expand to your area - let us know where you'd like to see coverage!",
    )


def coverage_for_mapping(mapping: DistrictMapping) -> CoverageLevel:
    return determine_coverage(mapping.state, mapping.city)


def federal_only_states():
    return sorted(code for code in STATE_NAMES if code not in FULL_COVERAGE_STATES)


__all__ = [
    "FULL_COVERAGE",
    "FEDERAL_ONLY",
    "NOT_SUPPORTED",
    "STATE_NAMES",
    "CoverageLevel",
    "normalize_state",
    "state_name",
    "determine_coverage",
    "coverage_for_mapping",
    "federal_only_states",
]
