import logging
from typing import Optional

from app.core.settings import settings
from .base import GeocodingProvider
from .google_provider import GoogleMapsProvider
from .mapbox_provider import MapboxProvider
from .nominatim_provider import NominatimProvider

logger = logging.getLogger(__name__)

_provider_instance: Optional[GeocodingProvider] = None


def get_geocoding_provider() -> GeocodingProvider:
    """
    Resolve the active geocoding provider based on settings.

    Rules:
    - Default: Mapbox when MAPBOX_ACCESS_TOKEN is set.
    - GEOCODING_PROVIDER='google' uses Google when GOOGLE_MAPS_API_KEY is set.
    - Anything else, or a missing key, falls back to Nominatim (no key required).
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    provider_name = (settings.GEOCODING_PROVIDER or "nominatim").lower()
    timeout = settings.GEOCODING_TIMEOUT_SECONDS

    if provider_name == "mapbox":
        if settings.MAPBOX_ACCESS_TOKEN:
            _provider_instance = MapboxProvider(settings.MAPBOX_ACCESS_TOKEN, timeout=timeout)
            logger.info("Geocoding provider initialized: mapbox")
            return _provider_instance
        logger.warning("MAPBOX_ACCESS_TOKEN not set. Falling back to Nominatim.")

    elif provider_name == "google":
        if settings.GOOGLE_MAPS_API_KEY:
            _provider_instance = GoogleMapsProvider(settings.GOOGLE_MAPS_API_KEY, timeout=timeout)
            logger.info("Geocoding provider initialized: google")
            return _provider_instance
        logger.warning("GOOGLE_MAPS_API_KEY not set. Falling back to Nominatim.")

    elif provider_name != "nominatim":
        logger.warning(f"Unknown geocoding provider '{provider_name}'. Falling back to Nominatim.")

    _provider_instance = NominatimProvider(user_agent=settings.NOMINATIM_USER_AGENT, timeout=timeout)
    logger.info("Geocoding provider initialized: nominatim")
    return _provider_instance


def reset_geocoding_provider() -> None:
    """Drop the cached provider so the next call re-reads settings."""
    global _provider_instance
    _provider_instance = None
