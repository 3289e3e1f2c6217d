import logging
from typing import Dict, Any, Optional

import requests

from .base import GeocodingProvider, build_result

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim geocoding provider.

    - No API key required.
    - Includes a User-Agent header as required by Nominatim usage policy.
    - Never raises upstream exceptions; returns None on failure.
    """

    name = "nominatim"
    BASE_URL = "https://nominatim.openstreetmap.org"

    def __init__(self, user_agent: str = "road-hazard-watch/1.0", timeout: float = 3.0):
        self.user_agent = user_agent
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Dict]:
        data = self._get("/reverse", {"lat": latitude, "lon": longitude})
        if not data or "error" in data:
            return None
        return self._to_result(data)

    def forward_geocode(self, address: str) -> Optional[Dict]:
        data = self._get("/search", {"q": address, "limit": 1})
        if not data:
            return None

        first = data[0]
        try:
            coordinates = {
                "latitude": float(first["lat"]),
                "longitude": float(first["lon"]),
            }
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Nominatim search returned unusable coordinates: {e}")
            return None

        result = self._to_result(first)
        result["coordinates"] = coordinates
        return result

    def _get(self, path: str, params: Dict[str, Any]):
        try:
            params = dict(params, format="json", addressdetails=1)
            headers = {
                "User-Agent": self.user_agent,
            }
            resp = requests.get(self.BASE_URL + path, params=params, headers=headers, timeout=self.timeout)
            if resp.status_code != 200:
                logger.warning(f"Nominatim {path} failed with status {resp.status_code}")
                return None
            return resp.json()
        except Exception as e:
            # Fail gracefully; the caller falls back to a formatted coordinate string.
            logger.warning(f"Nominatim {path} error: {e}")
            return None

    @staticmethod
    def _to_result(data: Dict[str, Any]) -> Dict:
        address = data.get("address") or {}
        city = (
            address.get("city")
            or address.get("town")
            or address.get("village")
            or address.get("suburb")
            or address.get("neighbourhood")
        )
        return build_result(
            "nominatim",
            address=data.get("display_name"),
            city=city,
            state=address.get("state"),
            zip_code=address.get("postcode"),
            country=address.get("country"),
        )
