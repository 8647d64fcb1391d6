"""Geocodio client used when the static table has no row for a ZIP.

The client asks Geocodio for the congressional (``cd``) and state
legislative (``stateleg``) fields of a postal code and converts the best
result into a ``DistrictMapping``. Requests are capped by a local daily
limiter and wrapped in the shared ``geocodio`` circuit breaker.
"""
import time
import logging
from typing import Optional, Dict, Any, List, Callable

import requests

from citzn.config import GeocodingConfig, get_config
from citzn.errors import GeocodingUnavailable, GeocodingError, ZipNotFound
from citzn.mapping import DistrictMapping, SOURCE_GEOCODER, clean_place
from citzn.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpenError,
    get_circuit_breaker,
    with_exponential_backoff,
)
from citzn.validation import SimpleRateLimiter

logger = logging.getLogger(__name__)

BREAKER_NAME = "geocodio"
RATE_LIMIT_KEY = "geocodio"


def _district_numbers(entries: List[Dict[str, Any]]) -> List[int]:
    numbers = []
    for entry in entries or []:
        try:
            number = int(entry.get("district_number"))
        except (TypeError, ValueError):
            continue
        if number not in numbers:
            numbers.append(number)
    return numbers


def parse_result(result: Dict[str, Any], zip_code: str, congress_number: int = 119) -> DistrictMapping:
    """Convert one Geocodio result into a mapping.

    Only congressional districts drawn for ``congress_number`` are kept; older
    entries describe superseded lines.
    """
    fields = result.get("fields") or {}
    components = result.get("address_components") or {}
    location = result.get("location") or {}

    congressional = _district_numbers([
        d for d in fields.get("congressional_districts") or []
        if congress_number in (d.get("congress_numbers") or [])
    ])
    stateleg = fields.get("state_legislative_districts") or {}
    senate = _district_numbers(stateleg.get("senate"))
    assembly = _district_numbers(stateleg.get("house"))

    county = (fields.get("county") or {}).get("name") or components.get("county")
    coordinates = None
    if location.get("lng") is not None and location.get("lat") is not None:
        coordinates = (float(location["lng"]), float(location["lat"]))

    return DistrictMapping(
        zip_code=zip_code,
        state=components.get("state"),
        congressional=congressional,
        senate=senate,
        assembly=assembly,
        county=clean_place(county),
        city=clean_place(components.get("city")),
        coordinates=coordinates,
        accuracy=float(result.get("accuracy") or 0.0),
        source=SOURCE_GEOCODER,
    )


def parse_response(data: Dict[str, Any], zip_code: str, congress_number: int = 119) -> DistrictMapping:
    """Pick the most accurate result from a geocode response.

    Raises:
        ZipNotFound: when the response carries no results.
    """
    results = data.get("results") or []
    if not results:
        raise ZipNotFound(f"No geocoding results for ZIP {zip_code}", zip_code=zip_code)
    best = max(results, key=lambda r: r.get("accuracy") or 0.0)
    return parse_result(best, zip_code, congress_number)


def _retry_after_seconds(headers, default: int, cap: int) -> float:
    raw = (headers or {}).get("Retry-After")
    try:
        seconds = float(raw) if raw is not None else float(default)
    except (TypeError, ValueError):
        seconds = float(default)
    return max(0.0, min(seconds, float(cap)))


class GeocodioClient:
    """Postal-code lookups against the Geocodio API."""

    def __init__(
        self,
        config: Optional[GeocodingConfig] = None,
        session: Optional[requests.Session] = None,
        breaker: Optional[CircuitBreaker] = None,
        rate_limiter: Optional[SimpleRateLimiter] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or get_config().geocoding
        self.session = session or requests.Session()
        self.breaker = breaker or get_circuit_breaker(
            BREAKER_NAME,
            CircuitBreakerConfig(ignored_exceptions=(ZipNotFound, GeocodingUnavailable)),
        )
        self.rate_limiter = rate_limiter or SimpleRateLimiter(
            self.config.rate_limit_requests, self.config.rate_limit_window
        )
        self.sleep = sleep
        self.request_count = 0

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    def remaining_requests(self) -> int:
        return self.rate_limiter.remaining(RATE_LIMIT_KEY)

    def lookup(self, zip_code: str) -> DistrictMapping:
        """Geocode a normalized 5-digit ZIP.

        Raises:
            GeocodingUnavailable: no API key, local limit reached, or breaker open
            GeocodingError: the request failed after retries
            ZipNotFound: Geocodio returned no results
        """
        if not self.is_configured:
            raise GeocodingUnavailable("Geocodio API key is not configured", zip_code=zip_code)

        try:
            data = self.breaker.call(self._request, zip_code)
        except CircuitBreakerOpenError as e:
            raise GeocodingUnavailable(str(e), zip_code=zip_code)

        mapping = parse_response(data, zip_code, self.config.congress_number)
        logger.debug(
            f"Geocoded {zip_code}: CD {mapping.congressional} SD {mapping.senate} "
            f"AD {mapping.assembly} (accuracy {mapping.accuracy})"
        )
        return mapping

    def _request(self, zip_code: str) -> Dict[str, Any]:
        url = f"{self.config.base_url}/geocode"
        params = {"postal_code": zip_code, "fields": "cd,stateleg"}

        for attempt in range(self.config.max_retries + 1):
            if not self.rate_limiter.is_allowed(RATE_LIMIT_KEY):
                raise GeocodingUnavailable(
                    "Geocoding rate limit exceeded. Please try again later.", zip_code=zip_code
                )
            self.request_count += 1

            try:
                resp = self._send(url, params)
            except requests.exceptions.Timeout:
                if attempt < self.config.max_retries:
                    logger.warning(f"Geocodio timeout for {zip_code}, retry {attempt + 1}")
                    self.sleep(1.0 * (attempt + 1))
                    continue
                raise GeocodingError("Geocoding request timed out", zip_code=zip_code)
            except requests.RequestException as e:
                raise GeocodingError(f"Geocoding request failed: {e}", zip_code=zip_code)

            if resp.status_code == 429 and attempt < self.config.max_retries:
                delay = _retry_after_seconds(resp.headers, 60, self.config.max_retry_after)
                logger.warning(f"Geocodio rate limited (429), waiting {delay:.0f}s")
                self.sleep(delay)
                continue

            if resp.status_code == 422:
                raise ZipNotFound(f"Geocodio could not parse ZIP {zip_code}", zip_code=zip_code)

            if resp.status_code != 200:
                try:
                    message = resp.json().get("error")
                except ValueError:
                    message = None
                raise GeocodingError(
                    message or f"API request failed: {resp.status_code}",
                    zip_code=zip_code,
                    status_code=resp.status_code,
                )

            try:
                return resp.json()
            except ValueError as e:
                raise GeocodingError(f"Invalid JSON from Geocodio: {e}", zip_code=zip_code)

        raise GeocodingError("Geocoding retries exhausted", zip_code=zip_code, status_code=429)

    @with_exponential_backoff(max_retries=2, base_delay=0.5, retry_on=(requests.exceptions.ConnectionError,))
    def _send(self, url: str, params: Dict[str, str]):
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        return self.session.get(url, params=params, headers=headers, timeout=self.config.timeout)


__all__ = [
    "GeocodioClient",
    "parse_result",
    "parse_response",
    "BREAKER_NAME",
]
