from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class GeocodingUnavailable(Exception):
    """
    Raised when an address could not be resolved for a coordinate pair.

    Covers both a failing provider call and an empty/None response.
    Callers recover locally (see app.utils.geocoding); it is never
    surfaced to API clients.
    """

    def __init__(self, latitude, longitude, reason: str = "no result"):
        self.latitude = latitude
        self.longitude = longitude
        self.reason = reason
        super().__init__(f"Geocoding unavailable for ({latitude}, {longitude}): {reason}")


class GeocodingProvider(ABC):
    """
    Abstract geocoding provider.

    Contract:
    - reverse_geocode(latitude, longitude) returns a dict with well-known keys:
      {
        "address": str | None,
        "city": str | None,
        "state": str | None,
        "zipCode": str | None,
        "country": str | None,
        "provider": str
      }
      or None when the location cannot be resolved.
    - forward_geocode(address) returns the same dict plus
      "coordinates": {"latitude": float, "longitude": float}, or None.
    - Implementations log upstream failures and return None.
    - Implementations should enforce a network timeout.
    """

    name = "base"

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Dict]:
        raise NotImplementedError

    @abstractmethod
    def forward_geocode(self, address: str) -> Optional[Dict]:
        raise NotImplementedError


def build_result(
    provider: str,
    address: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    zip_code: Optional[str] = None,
    country: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    return {
        "address": address,
        "city": city,
        "state": state,
        "zipCode": zip_code,
        "country": country,
        "provider": provider,
    }
