"""Elected officials for a resolved ZIP code.

The roster lives in ``config/representatives.json``; county boards come from
the built-in county table. A district with no real roster entry produces no
representative at all. Stand-ins such as "Assembly Member (District 7)" or
555 phone numbers are rejected wherever they show up.
"""
import json
import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, List, Dict, Any

from citzn.counties import find_county
from citzn.coverage import CoverageLevel, coverage_for_mapping
from citzn.jurisdiction import JurisdictionResult
from citzn.mapping import DistrictMapping

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

PLACEHOLDER_NAME_PATTERNS = [
    re.compile(r"placeholder", re.IGNORECASE),
    re.compile(r"\bTBD\b"),
    re.compile(r"Assembly Member\s*\(?District", re.IGNORECASE),
    re.compile(r"Senator\s*\(?District", re.IGNORECASE),
    re.compile(r"Representative\s*\(?District", re.IGNORECASE),
    re.compile(r"^\s*(Council Member\s+|Supervisor\s+|Mayor\s+)?District\s+\d+\b", re.IGNORECASE),
]
# Compared against the trailing digits of a phone number
PLACEHOLDER_PHONES = ("5555555555", "5551234")
PLACEHOLDER_EMAIL_MARKERS = ("example.com", "placeholder")


@dataclass
class Representative:
    name: str
    title: str
    level: str
    party: Optional[str] = None
    district: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    office: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def placeholder_problems(entry: Dict[str, Any]) -> List[str]:
    """Reasons a roster entry looks fabricated; empty when it looks real."""
    problems = []
    name = entry.get("name") or ""
    if not name.strip():
        problems.append("missing name")
    elif any(p.search(name) for p in PLACEHOLDER_NAME_PATTERNS):
        problems.append(f"placeholder name '{name}'")

    phone = entry.get("phone") or ""
    digits = re.sub(r"\D", "", phone)
    if digits and any(digits.endswith(fake) for fake in PLACEHOLDER_PHONES):
        problems.append(f"placeholder phone '{phone}'")

    email = (entry.get("email") or "").lower()
    if any(marker in email for marker in PLACEHOLDER_EMAIL_MARKERS):
        problems.append(f"placeholder email '{email}'")
    return problems


def load_roster(path: str = "config/representatives.json") -> Dict[str, Any]:
    """Load the roster JSON, returning an empty roster if the file is missing."""
    roster_file = Path(path)
    if not roster_file.exists() and not roster_file.is_absolute():
        candidate = PROJECT_ROOT / path
        if candidate.exists():
            roster_file = candidate
    if not roster_file.exists():
        logger.warning(f"Roster file not found: {path}")
        return {}
    try:
        with open(roster_file, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Failed to load roster from {roster_file}: {e}")
        return {}


def _iter_entries(roster: Dict[str, Any]):
    federal = roster.get("federal", {})
    for state, senators in federal.get("senators", {}).items():
        for entry in senators:
            yield f"federal.senators.{state}", entry
    for state, districts in federal.get("house", {}).items():
        for district, entry in districts.items():
            yield f"federal.house.{state}.{district}", entry
    for state, chambers in roster.get("state", {}).items():
        for chamber, districts in chambers.items():
            for district, entry in districts.items():
                yield f"state.{state}.{chamber}.{district}", entry
    for city, officials in roster.get("municipal", {}).items():
        for entry in officials:
            yield f"municipal.{city}", entry


def validate_roster(roster: Dict[str, Any]) -> List[Dict[str, str]]:
    """List every roster entry that carries placeholder data."""
    issues = []
    for location, entry in _iter_entries(roster):
        for problem in placeholder_problems(entry):
            issues.append({"location": location, "name": entry.get("name") or "", "problem": problem})
    return issues


class RepresentativeDirectory:
    """Look up officials for a mapping and its jurisdiction."""

    def __init__(self, roster: Optional[Dict[str, Any]] = None, roster_path: str = "config/representatives.json"):
        self.roster = roster if roster is not None else load_roster(roster_path)
        issues = validate_roster(self.roster)
        for issue in issues:
            logger.warning(f"Roster entry {issue['location']} rejected: {issue['problem']}")

    def _make(self, entry: Dict[str, Any], title: str, level: str, district: Optional[str] = None) -> Optional[Representative]:
        if placeholder_problems(entry):
            return None
        return Representative(
            name=entry["name"].strip(),
            title=entry.get("title", title),
            level=level,
            party=entry.get("party"),
            district=district,
            phone=entry.get("phone"),
            email=entry.get("email"),
            website=entry.get("website"),
            office=entry.get("office"),
        )

    def federal(self, mapping: DistrictMapping) -> List[Representative]:
        federal = self.roster.get("federal", {})
        reps = []
        for entry in federal.get("senators", {}).get(mapping.state or "", []):
            rep = self._make(entry, "U.S. Senator", "federal")
            if rep:
                reps.append(rep)

        house = federal.get("house", {}).get(mapping.state or "", {})
        for district in mapping.congressional:
            entry = house.get(str(district))
            rep = self._make(entry, "U.S. Representative", "federal", str(district)) if entry else None
            if rep:
                reps.append(rep)
            else:
                logger.warning(f"No representative on file for {mapping.state}-{district}")
        return reps

    def state(self, mapping: DistrictMapping) -> List[Representative]:
        chambers = self.roster.get("state", {}).get(mapping.state or "", {})
        reps = []
        for chamber, districts, title in (
            ("senate", mapping.senate, "State Senator"),
            ("assembly", mapping.assembly, "Assembly Member"),
        ):
            for district in districts:
                entry = chambers.get(chamber, {}).get(str(district))
                rep = self._make(entry, title, "state", str(district)) if entry else None
                if rep:
                    reps.append(rep)
                else:
                    logger.warning(f"No {chamber} member on file for {mapping.state} district {district}")
        return reps

    def county(self, mapping: DistrictMapping) -> List[Representative]:
        if mapping.state != "CA":
            return []
        county = find_county(mapping.county)
        if county is None:
            if mapping.county:
                logger.warning(f"Unknown California county: {mapping.county}")
            return []
        return [Representative(
            name=county.board_name,
            title="Board of Supervisors",
            level="county",
            phone=county.phone,
            website=county.website,
            office=county.seat_city,
        )]

    def municipal(self, jurisdiction: JurisdictionResult) -> List[Representative]:
        if not jurisdiction.has_local_representatives:
            return []
        reps = []
        for entry in self.roster.get("municipal", {}).get(jurisdiction.name, []):
            rep = self._make(entry, "Mayor", "municipal")
            if rep:
                reps.append(rep)
        return reps

    def representatives_for(
        self,
        mapping: DistrictMapping,
        jurisdiction: Optional[JurisdictionResult] = None,
        coverage: Optional[CoverageLevel] = None,
    ) -> List[Representative]:
        """Officials for a mapping, ordered federal, state, county, municipal."""
        coverage = coverage or coverage_for_mapping(mapping)
        reps = []
        if coverage.show_federal:
            reps.extend(self.federal(mapping))
        if coverage.show_state:
            reps.extend(self.state(mapping))
        if coverage.show_local:
            reps.extend(self.county(mapping))
            if jurisdiction is not None:
                reps.extend(self.municipal(jurisdiction))
        return reps


__all__ = [
    "Representative",
    "RepresentativeDirectory",
    "placeholder_problems",
    "load_roster",
    "validate_roster",
]
