from .base import GeocodingProvider, GeocodingUnavailable
from .resolver import get_geocoding_provider, reset_geocoding_provider

__all__ = [
    "GeocodingProvider",
    "GeocodingUnavailable",
    "get_geocoding_provider",
    "reset_geocoding_provider",
]
