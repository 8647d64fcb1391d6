"""ZIP to district resolution chain.

Sources are tried in order of trust:

    cache -> static table -> Geocodio -> ZIP range heuristic

Only geocoder answers that carry districts are cached. Table rows are read
from memory on every call, so a new override takes effect at once; a cached
geocoder answer is dropped once the table gains districts for that ZIP.
Heuristic guesses are never cached, so a later geocoder success is not
hidden behind a stale estimate.
"""
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Iterable, Any

from citzn.config import AppConfig, get_config
from citzn.errors import (
    DistrictLookupError,
    GeocodingError,
    GeocodingUnavailable,
    ZipNotFound,
)
from citzn.geocoding import GeocodioClient
from citzn.mapping import DistrictMapping, SOURCE_GEOCODER
from citzn.resilience import CacheLayer
from citzn.validation import normalize_zip, validate_zip
from citzn.zip_prefix_fallback import guess_mapping, lookup_state_for_zip
from citzn.zip_table import ZipTable

logger = logging.getLogger(__name__)

CACHE_TYPE = "district"


@dataclass
class BatchResult:
    """Outcome of resolving many ZIPs."""
    results: List[DistrictMapping] = field(default_factory=list)
    errors: List[Dict[str, Optional[str]]] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def successful(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "successful": self.successful,
            "failed": self.failed,
            "results": [m.to_dict() for m in self.results],
            "errors": list(self.errors),
        }


class DistrictResolver:
    """Resolve ZIP codes to districts through the fallback chain."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        table: Optional[ZipTable] = None,
        geocoder: Optional[GeocodioClient] = None,
        cache: Optional[CacheLayer] = None,
    ):
        self.config = config or get_config()
        self.table = table or ZipTable(self.config.overrides_path)
        self.geocoder = geocoder or GeocodioClient(self.config.geocoding)
        self.cache = cache if cache is not None else CacheLayer(self.config.cache.cache_db)
        self.counters = Counter()

    def resolve(
        self,
        zip_code: str,
        use_cache: bool = True,
        allow_geocoder: bool = True,
        allow_heuristic: bool = True,
    ) -> DistrictMapping:
        """Resolve one ZIP (5-digit or ZIP+4).

        Raises:
            InvalidZipError: malformed input
            ZipNotFound: no enabled source could place the ZIP
        """
        zip5 = normalize_zip(zip_code)
        self.counters["requests"] += 1

        if use_cache:
            cached = self._load_cached(zip5)
            if cached is not None:
                self.counters["cache_hits"] += 1
                return cached

        record = self.table.lookup(zip5)
        if record is not None and record.has_districts:
            mapping = record.to_mapping()
            if allow_geocoder and self.config.enrich_table_hits and (mapping.city is None or mapping.county is None):
                self._enrich(mapping)
            return self._finish(mapping)

        geocoded = None
        if allow_geocoder:
            geocoded = self._try_geocoder(zip5)
            if geocoded is not None:
                if record is not None:
                    place = record.to_mapping()
                    geocoded.city = geocoded.city or place.city
                    geocoded.county = geocoded.county or place.county
                if not self._missing_ca_districts(geocoded):
                    return self._finish(geocoded)
                logger.info(f"Geocoder returned no districts for California ZIP {zip5}")

        if record is not None and record.state != "CA":
            # Place-only row (outside California); no districts to offer
            return self._finish(record.to_mapping())

        if allow_heuristic:
            mapping = guess_mapping(zip5)
            if mapping is not None:
                for known in (geocoded, record.to_mapping() if record is not None else None):
                    if known is not None:
                        mapping.city = mapping.city or known.city
                        mapping.county = mapping.county or known.county
                        mapping.coordinates = mapping.coordinates or known.coordinates
                logger.info(f"Using range estimate for {zip5} (accuracy {mapping.accuracy})")
                return self._finish(mapping)

        # Place names without districts beat no answer at all
        if geocoded is not None:
            return self._finish(geocoded)
        if record is not None:
            return self._finish(record.to_mapping())

        self.counters["not_found"] += 1
        raise ZipNotFound(f"ZIP code {zip5} could not be resolved", zip_code=zip5)

    def resolve_many(self, zip_codes: Iterable[str], **kwargs) -> BatchResult:
        """Resolve ZIPs in batches, collecting per-ZIP failures instead of raising."""
        zips = list(zip_codes)
        batch_size = max(1, self.config.geocoding.batch_size)
        outcome = BatchResult()

        for start in range(0, len(zips), batch_size):
            batch = zips[start:start + batch_size]
            logger.info(f"Resolving batch {start // batch_size + 1} ({len(batch)} ZIPs)")
            for raw in batch:
                try:
                    outcome.results.append(self.resolve(raw, **kwargs))
                except DistrictLookupError as e:
                    outcome.errors.append({
                        "zip_code": e.zip_code or (raw if isinstance(raw, str) else None),
                        "error": e.code,
                        "message": e.message,
                    })

        logger.info(f"Resolved {outcome.successful}/{outcome.processed} ZIPs")
        return outcome

    def is_california_zip(self, zip_code: str) -> bool:
        if not validate_zip(zip_code):
            return False
        zip5 = normalize_zip(zip_code)
        record = self.table.lookup(zip5)
        if record is not None:
            return record.state == "CA"
        return lookup_state_for_zip(zip5) == "CA"

    def clear_caches(self) -> int:
        removed = self.cache.clear(CACHE_TYPE)
        logger.info(f"Cleared {removed} cached district mappings")
        return removed

    def stats(self) -> Dict[str, Any]:
        return {
            "counters": dict(self.counters),
            "cache": self.cache.get_stats(),
            "table": self.table.coverage_statistics(),
            "geocoder": {
                "configured": self.geocoder.is_configured,
                "remaining_requests": self.geocoder.remaining_requests(),
                "breaker": self.geocoder.breaker.get_status(),
            },
        }

    def _try_geocoder(self, zip5: str) -> Optional[DistrictMapping]:
        try:
            return self.geocoder.lookup(zip5)
        except ZipNotFound:
            logger.info(f"Geocoder has no result for {zip5}")
        except GeocodingUnavailable as e:
            logger.debug(f"Geocoder unavailable for {zip5}: {e.message}")
        except GeocodingError as e:
            logger.warning(f"Geocoder failed for {zip5}: {e.message}")
        return None

    def _enrich(self, mapping: DistrictMapping) -> None:
        """Fill missing city/county from the geocoder; table districts are kept."""
        geocoded = self._try_geocoder(mapping.zip_code)
        if geocoded is None:
            return
        mapping.city = mapping.city or geocoded.city
        mapping.county = mapping.county or geocoded.county
        mapping.coordinates = mapping.coordinates or geocoded.coordinates
        if geocoded.primary_districts() != mapping.primary_districts():
            logger.info(
                f"Geocoder disagrees with table for {mapping.zip_code}: "
                f"table {mapping.primary_districts()} geocoder {geocoded.primary_districts()}"
            )

    def _finish(self, mapping: DistrictMapping) -> DistrictMapping:
        self.counters[mapping.source] += 1
        if self._should_cache(mapping):
            self.cache.set(
                self._cache_key(mapping.zip_code),
                json.dumps(mapping.to_dict()),
                self.config.cache.ttl_seconds,
                CACHE_TYPE,
            )
        return mapping

    @staticmethod
    def _has_districts(mapping: DistrictMapping) -> bool:
        return bool(mapping.congressional or mapping.senate or mapping.assembly)

    def _missing_ca_districts(self, mapping: DistrictMapping) -> bool:
        state = mapping.state or lookup_state_for_zip(mapping.zip_code)
        return state == "CA" and not self._has_districts(mapping)

    def _should_cache(self, mapping: DistrictMapping) -> bool:
        return mapping.source == SOURCE_GEOCODER and self._has_districts(mapping)

    @staticmethod
    def _cache_key(zip5: str) -> str:
        return f"district:{zip5}"

    def _load_cached(self, zip5: str) -> Optional[DistrictMapping]:
        key = self._cache_key(zip5)
        raw = self.cache.get(key)
        if not raw:
            return None
        try:
            mapping = DistrictMapping.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Dropping unreadable cache entry for {zip5}: {e}")
            self.cache.delete(key)
            return None
        record = self.table.lookup(zip5)
        if record is not None and record.has_districts:
            logger.info(f"Table covers {zip5}; dropping cached {mapping.source} answer")
            self.cache.delete(key)
            return None
        mapping.from_cache = True
        return mapping


_resolver: Optional[DistrictResolver] = None


def get_resolver() -> DistrictResolver:
    """Get or initialize the shared resolver."""
    global _resolver
    if _resolver is None:
        _resolver = DistrictResolver()
    return _resolver


def resolve_zip(zip_code: str, **kwargs) -> DistrictMapping:
    return get_resolver().resolve(zip_code, **kwargs)


__all__ = ["BatchResult", "DistrictResolver", "get_resolver", "resolve_zip"]
