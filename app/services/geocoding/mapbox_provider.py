import logging
from typing import Dict, Any, List, Optional
from urllib.parse import quote

import requests

from .base import GeocodingProvider, build_result

logger = logging.getLogger(__name__)


class MapboxProvider(GeocodingProvider):
    """
    Mapbox Places geocoding provider.

    - Requires MAPBOX_ACCESS_TOKEN; without it every lookup returns None.
    - Only the best match is requested (limit=1).
    - City/state/zip/country are read from the feature's context entries.
    - Never raises upstream exceptions; returns None on failure.
    """

    name = "mapbox"
    BASE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"
    FEATURE_TYPES = "address,poi,neighborhood,place"

    def __init__(self, access_token: Optional[str], timeout: float = 3.0):
        self.access_token = access_token
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Dict]:
        feature = self._first_feature(f"{longitude},{latitude}")
        if feature is None:
            return None
        return self._feature_to_result(feature)

    def forward_geocode(self, address: str) -> Optional[Dict]:
        feature = self._first_feature(quote(address, safe=""))
        if feature is None:
            return None

        center = feature.get("center") or []
        if len(center) < 2:
            logger.warning(f"Mapbox feature for '{address}' has no center")
            return None

        longitude, latitude = center[0], center[1]
        result = self._feature_to_result(feature)
        result["coordinates"] = {"latitude": latitude, "longitude": longitude}
        return result

    def _first_feature(self, query: str) -> Optional[Dict[str, Any]]:
        if not self.access_token:
            logger.warning("Mapbox access token not configured for geocoding")
            return None

        try:
            url = f"{self.BASE_URL}/{query}.json"
            params = {
                "access_token": self.access_token,
                "types": self.FEATURE_TYPES,
                "limit": 1,
            }
            resp = requests.get(url, params=params, timeout=self.timeout)
            if resp.status_code != 200:
                logger.warning(f"Mapbox geocode failed with status {resp.status_code}")
                return None

            data: Dict[str, Any] = resp.json()
            features = data.get("features") or []
            if not features:
                return None
            return features[0]
        except Exception as e:
            logger.warning(f"Mapbox geocode error: {e}")
            return None

    def _feature_to_result(self, feature: Dict[str, Any]) -> Dict:
        context = feature.get("context")
        return build_result(
            "mapbox",
            address=feature.get("place_name"),
            city=extract_context(context, "place", "neighborhood"),
            state=extract_context(context, "region"),
            zip_code=extract_context(context, "postcode"),
            country=extract_context(context, "country"),
        )


def extract_context(context: Optional[List[Dict[str, Any]]], *kinds: str) -> Optional[str]:
    """Return the text of the first context entry whose id contains one of ``kinds``."""
    if not context:
        return None
    for item in context:
        item_id = item.get("id", "")
        if any(kind in item_id for kind in kinds):
            return item.get("text")
    return None
