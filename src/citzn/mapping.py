"""District mapping record shared by every lookup source."""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Any

# Source labels in order of trust
SOURCE_TABLE = "table"
SOURCE_GEOCODER = "geocoder"
SOURCE_HEURISTIC = "heuristic"

SOURCE_ACCURACY = {
    SOURCE_TABLE: 1.0,
    SOURCE_HEURISTIC: 0.3,
}

# Values older revisions emitted in place of real data
PLACEHOLDER_PLACE_NAMES = {
    "unknown city",
    "unknown county",
    "unknown california county",
    "united states",
}


def is_placeholder_place(name: Optional[str]) -> bool:
    """True for stand-in city/county names such as "Unknown City" or "Los Angeles Area"."""
    if not name:
        return True
    lowered = name.strip().lower()
    return lowered in PLACEHOLDER_PLACE_NAMES or lowered.endswith(" area")


def clean_place(name: Optional[str]) -> Optional[str]:
    """Return the name, or None when it is empty or a placeholder."""
    if is_placeholder_place(name):
        return None
    return name.strip()


@dataclass
class DistrictMapping:
    """Political geography for one ZIP code.

    District lists hold every district the ZIP touches; the first entry is
    the primary district. A ZIP spanning more than one district at any level
    is a multi-district mapping.
    """
    zip_code: str
    state: Optional[str]
    congressional: List[int] = field(default_factory=list)
    senate: List[int] = field(default_factory=list)
    assembly: List[int] = field(default_factory=list)
    county: Optional[str] = None
    city: Optional[str] = None
    coordinates: Optional[Tuple[float, float]] = None  # (lng, lat)
    accuracy: float = 0.0
    source: str = SOURCE_TABLE
    last_updated: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    from_cache: bool = False

    @property
    def is_multi_district(self) -> bool:
        return any(len(levels) > 1 for levels in (self.congressional, self.senate, self.assembly))

    @property
    def primary_congressional(self) -> Optional[int]:
        return self.congressional[0] if self.congressional else None

    @property
    def primary_senate(self) -> Optional[int]:
        return self.senate[0] if self.senate else None

    @property
    def primary_assembly(self) -> Optional[int]:
        return self.assembly[0] if self.assembly else None

    def primary_districts(self) -> Dict[str, Optional[int]]:
        return {
            "congressional": self.primary_congressional,
            "senate": self.primary_senate,
            "assembly": self.primary_assembly,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["coordinates"] = list(self.coordinates) if self.coordinates else None
        data["is_multi_district"] = self.is_multi_district
        data["primary_districts"] = self.primary_districts()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DistrictMapping":
        coords = data.get("coordinates")
        return cls(
            zip_code=data["zip_code"],
            state=data.get("state"),
            congressional=list(data.get("congressional") or []),
            senate=list(data.get("senate") or []),
            assembly=list(data.get("assembly") or []),
            county=data.get("county"),
            city=data.get("city"),
            coordinates=tuple(coords) if coords else None,
            accuracy=float(data.get("accuracy", 0.0)),
            source=data.get("source", SOURCE_TABLE),
            last_updated=data.get("last_updated") or datetime.utcnow().isoformat(),
        )


__all__ = [
    "SOURCE_TABLE",
    "SOURCE_GEOCODER",
    "SOURCE_HEURISTIC",
    "SOURCE_ACCURACY",
    "DistrictMapping",
    "is_placeholder_place",
    "clean_place",
]
