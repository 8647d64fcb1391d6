#!/usr/bin/env python3
"""Tests for the Geocodio client using a fake HTTP session."""
import sys
from pathlib import Path

# add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import requests

from citzn.config import GeocodingConfig
from citzn.errors import GeocodingUnavailable, GeocodingError, ZipNotFound
from citzn.geocoding import GeocodioClient, parse_response
from citzn.resilience import CircuitBreaker, CircuitBreakerConfig, CircuitState


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.headers = headers or {}

    def json(self):
        return self._payload


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def sf_payload():
    return {
        "results": [
            {
                "accuracy": 0.8,
                "address_components": {"city": "San Francisco Area", "county": "San Francisco County", "state": "CA"},
                "location": {"lat": 37.0, "lng": -122.0},
                "fields": {},
            },
            {
                "accuracy": 1,
                "address_components": {"city": "San Francisco", "county": "San Francisco County", "state": "CA"},
                "location": {"lat": 37.7793, "lng": -122.4193},
                "fields": {
                    "congressional_districts": [
                        {"district_number": 11, "congress_numbers": [119]},
                        {"district_number": 12, "congress_numbers": [117]},
                    ],
                    "state_legislative_districts": {
                        "senate": [{"district_number": "11"}],
                        "house": [{"district_number": "17"}, {"district_number": "19"}],
                    },
                },
            },
        ]
    }


def make_client(responses, **config_overrides):
    cfg = GeocodingConfig(api_key="test-key", max_retries=2, **config_overrides)
    breaker = CircuitBreaker(
        "geocodio-test",
        CircuitBreakerConfig(failure_threshold=2, ignored_exceptions=(ZipNotFound, GeocodingUnavailable)),
    )
    sleeps = []
    client = GeocodioClient(cfg, session=FakeSession(responses), breaker=breaker, sleep=sleeps.append)
    return client, sleeps


def test_parse_response():
    """Test best-result selection, congress filtering and multi-district handling."""
    print("Testing response parsing...")
    mapping = parse_response(sf_payload(), "94102")
    assert mapping.source == "geocoder"
    assert mapping.accuracy == 1.0, "Did not pick most accurate result"
    assert mapping.congressional == [11], "Old congress districts not filtered"
    assert mapping.senate == [11]
    assert mapping.assembly == [17, 19]
    assert mapping.is_multi_district, "Two assembly districts should be multi-district"
    assert mapping.primary_assembly == 17, "First district should be primary"
    assert mapping.city == "San Francisco"
    assert mapping.coordinates == (-122.4193, 37.7793), "Coordinates should be (lng, lat)"

    try:
        parse_response({"results": []}, "00000")
        assert False, "Empty results did not raise"
    except ZipNotFound as e:
        assert e.code == "ZIP_NOT_FOUND"
    print("✓ Response parsing works")


def test_placeholder_city_dropped():
    print("Testing placeholder names from geocoder...")
    payload = {"results": [{
        "accuracy": 0.5,
        "address_components": {"city": "Unknown City", "county": "Unknown County", "state": "CA"},
        "location": {},
        "fields": {},
    }]}
    mapping = parse_response(payload, "96000")
    assert mapping.city is None and mapping.county is None, "Placeholder names leaked"
    assert mapping.coordinates is None
    print("✓ Placeholder names dropped")


def test_no_api_key():
    print("Testing missing API key...")
    session = FakeSession([])
    client = GeocodioClient(GeocodingConfig(api_key=None), session=session,
                            breaker=CircuitBreaker("nokey"), sleep=lambda s: None)
    try:
        client.lookup("94102")
        assert False, "Lookup without API key did not raise"
    except GeocodingUnavailable as e:
        assert e.code == "SERVICE_UNAVAILABLE"
    assert session.calls == [], "Network call made without API key"
    print("✓ Missing API key handled")


def test_request_shape():
    print("Testing request shape...")
    client, _ = make_client([FakeResponse(200, sf_payload())])
    client.lookup("94102")
    call = client.session.calls[0]
    assert call["url"] == "https://api.geocod.io/v1.7/geocode"
    assert call["params"] == {"postal_code": "94102", "fields": "cd,stateleg"}
    assert call["headers"]["Authorization"] == "Bearer test-key"
    assert call["timeout"] == 10
    print("✓ Request shape correct")


def test_retry_after_on_429():
    print("Testing 429 handling...")
    client, sleeps = make_client([
        FakeResponse(429, headers={"Retry-After": "5"}),
        FakeResponse(429, headers={}),
        FakeResponse(200, sf_payload()),
    ], max_retry_after=30)
    mapping = client.lookup("94102")
    assert mapping.congressional == [11]
    assert sleeps == [5.0, 30.0], f"Unexpected waits {sleeps}"
    assert len(client.session.calls) == 3
    print("✓ 429 retry works")


def test_429_exhausted():
    print("Testing exhausted 429 retries...")
    client, _ = make_client([FakeResponse(429, headers={"Retry-After": "1"})] * 3)
    try:
        client.lookup("94102")
        assert False, "Exhausted retries did not raise"
    except GeocodingError as e:
        assert e.status_code == 429
    print("✓ Exhausted retries raise")


def test_timeout_backoff():
    print("Testing timeout retries...")
    client, sleeps = make_client([
        requests.exceptions.ReadTimeout("slow"),
        requests.exceptions.ReadTimeout("slow"),
        FakeResponse(200, sf_payload()),
    ])
    client.lookup("94102")
    assert sleeps == [1.0, 2.0], f"Expected linear backoff, got {sleeps}"

    client, _ = make_client([requests.exceptions.ReadTimeout("slow")] * 3)
    try:
        client.lookup("94102")
        assert False, "Repeated timeouts did not raise"
    except GeocodingError as e:
        assert e.code == "NETWORK_ERROR"
    print("✓ Timeout retries work")


def test_http_error():
    print("Testing HTTP errors...")
    client, _ = make_client([FakeResponse(403, {"error": "Invalid API key"})])
    try:
        client.lookup("94102")
        assert False, "403 did not raise"
    except GeocodingError as e:
        assert e.status_code == 403
        assert e.message == "Invalid API key"
    print("✓ HTTP errors raise GeocodingError")


def test_rate_limit():
    print("Testing local rate limit...")
    client, _ = make_client([FakeResponse(200, sf_payload())], rate_limit_requests=1)
    client.lookup("94102")
    assert client.remaining_requests() == 0
    try:
        client.lookup("94103")
        assert False, "Rate limit not enforced"
    except GeocodingUnavailable:
        pass
    assert len(client.session.calls) == 1, "Request sent past the limit"
    print("✓ Rate limit enforced")


def test_circuit_breaker():
    print("Testing circuit breaker...")
    client, _ = make_client([FakeResponse(500), FakeResponse(500)])
    for _ in range(2):
        try:
            client.lookup("94102")
        except GeocodingError:
            pass
    assert client.breaker.state == CircuitState.OPEN, "Breaker did not open"
    try:
        client.lookup("94102")
        assert False, "Open breaker let a call through"
    except GeocodingUnavailable:
        pass
    assert len(client.session.calls) == 2

    # Not-found answers are not service failures
    client, _ = make_client([FakeResponse(200, {"results": []})] * 3)
    for _ in range(3):
        try:
            client.lookup("00000")
        except ZipNotFound:
            pass
    assert client.breaker.state == CircuitState.CLOSED, "ZipNotFound tripped the breaker"
    print("✓ Circuit breaker works")


def main():
    print("=" * 60)
    print("GEOCODING TEST SUITE")
    print("=" * 60)

    test_parse_response()
    test_placeholder_city_dropped()
    test_no_api_key()
    test_request_shape()
    test_retry_after_on_429()
    test_429_exhausted()
    test_timeout_backoff()
    test_http_error()
    test_rate_limit()
    test_circuit_breaker()

    print("=" * 60)
    print("✓ ALL TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    main()
