"""Exceptions raised by the district lookup chain."""
from typing import Optional


class DistrictLookupError(Exception):
    """Base class for ZIP resolution failures."""
    code = "LOOKUP_ERROR"

    def __init__(self, message: str, zip_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.zip_code = zip_code

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "zip_code": self.zip_code}


class InvalidZipError(DistrictLookupError, ValueError):
    """Input is not a 5-digit ZIP or ZIP+4."""
    code = "INVALID_ZIP_FORMAT"


class ZipNotFound(DistrictLookupError):
    """No enabled source could place the ZIP code."""
    code = "ZIP_NOT_FOUND"


class GeocodingUnavailable(DistrictLookupError):
    """Geocoder not configured, rate limited, or circuit open."""
    code = "SERVICE_UNAVAILABLE"


class GeocodingError(DistrictLookupError):
    """Geocoder request failed after retries."""
    code = "NETWORK_ERROR"

    def __init__(self, message: str, zip_code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, zip_code)
        self.status_code = status_code


__all__ = [
    "DistrictLookupError",
    "InvalidZipError",
    "ZipNotFound",
    "GeocodingUnavailable",
    "GeocodingError",
]
