"""Input validation and rate limiting for ZIP lookups."""
import re
from time import time
from collections import defaultdict

from citzn.errors import InvalidZipError

ZIP_PATTERN = re.compile(r"^[0-9]{5}(-[0-9]{4})?$")


def validate_zip(raw) -> bool:
    """Return True for a 5-digit ZIP or ZIP+4 (surrounding whitespace allowed)."""
    if not isinstance(raw, str):
        return False
    return bool(ZIP_PATTERN.match(raw.strip()))


def normalize_zip(raw) -> str:
    """Return the 5-digit form of a ZIP code, dropping any +4 suffix.

    Raises:
        InvalidZipError: when the input is not a well-formed ZIP.
    """
    if not validate_zip(raw):
        shown = raw.strip() if isinstance(raw, str) else raw
        raise InvalidZipError(
            "Invalid ZIP code format. Expected 5 digits.",
            zip_code=str(shown) if shown is not None else None,
        )
    return raw.strip()[:5]


class SimpleRateLimiter:
    """Simple in-memory rate limiter per key."""

    def __init__(self, max_requests: int = 10, window_sec: int = 60):
        self.max_requests = max_requests
        self.window_sec = window_sec
        self.requests = defaultdict(list)

    def is_allowed(self, key: str) -> bool:
        now = time()
        # prune old requests outside window
        self.requests[key] = [ts for ts in self.requests[key] if now - ts < self.window_sec]
        if len(self.requests[key]) >= self.max_requests:
            return False
        self.requests[key].append(now)
        return True

    def remaining(self, key: str) -> int:
        now = time()
        live = [ts for ts in self.requests[key] if now - ts < self.window_sec]
        return max(self.max_requests - len(live), 0)


__all__ = ["ZIP_PATTERN", "validate_zip", "normalize_zip", "SimpleRateLimiter"]
