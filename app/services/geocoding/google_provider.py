import logging
from typing import Dict, Any, Optional

import requests

from .base import GeocodingProvider, build_result

logger = logging.getLogger(__name__)


class GoogleMapsProvider(GeocodingProvider):
    """
    Google Maps geocoding provider.

    - Used only when GEOCODING_PROVIDER=google AND GOOGLE_MAPS_API_KEY is set.
    - Same output schema as other providers.
    - Fails gracefully and never raises upstream exceptions.
    """

    name = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: Optional[str], timeout: float = 3.0):
        self.api_key = api_key
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Dict]:
        first = self._first_result({"latlng": f"{latitude},{longitude}"})
        if first is None:
            return None
        return self._to_result(first)

    def forward_geocode(self, address: str) -> Optional[Dict]:
        first = self._first_result({"address": address})
        if first is None:
            return None

        location = (first.get("geometry") or {}).get("location") or {}
        if "lat" not in location or "lng" not in location:
            return None

        result = self._to_result(first)
        result["coordinates"] = {"latitude": location["lat"], "longitude": location["lng"]}
        return result

    def _first_result(self, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        if not self.api_key:
            logger.info("GoogleMapsProvider called without API key; returning no result.")
            return None

        try:
            resp = requests.get(self.BASE_URL, params=dict(params, key=self.api_key), timeout=self.timeout)
            if resp.status_code != 200:
                logger.warning(f"Google Maps geocode failed with status {resp.status_code}")
                return None

            data: Dict[str, Any] = resp.json()
            results = data.get("results") or []
            if not results:
                return None
            return results[0]
        except Exception as e:
            logger.warning(f"Google Maps geocode error: {e}")
            return None

    @staticmethod
    def _to_result(first: Dict[str, Any]) -> Dict:
        components = first.get("address_components") or []

        def _get_component(types):
            for c in components:
                if any(t in c.get("types", []) for t in types):
                    return c.get("long_name")
            return None

        return build_result(
            "google",
            address=first.get("formatted_address"),
            city=_get_component(["locality", "postal_town"]),
            state=_get_component(["administrative_area_level_1"]),
            zip_code=_get_component(["postal_code"]),
            country=_get_component(["country"]),
        )
