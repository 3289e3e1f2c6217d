"""
Async geocoding facade.

Providers are blocking (requests), so each call is run in the default
thread pool executor to keep the event loop free.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from .resolver import get_geocoding_provider

logger = logging.getLogger(__name__)


async def reverse_geocode(latitude: float, longitude: float) -> Optional[Dict]:
    """Convert coordinates to an address dict, or None if not found."""
    provider = get_geocoding_provider()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, provider.reverse_geocode, latitude, longitude)


async def forward_geocode(address: str) -> Optional[Dict]:
    """Convert an address to coordinates plus address details, or None."""
    provider = get_geocoding_provider()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, provider.forward_geocode, address)


async def batch_reverse_geocode(coordinates: List[Dict]) -> List[Dict]:
    """
    Reverse geocode a list of {"latitude", "longitude"} dicts one by one.

    Each entry yields {"coordinates": <input>, "address": <result or None>};
    a failing entry gets address None and does not abort the batch.
    """
    results = []
    for coord in coordinates:
        try:
            address = await reverse_geocode(coord["latitude"], coord["longitude"])
        except Exception as e:
            logger.error(f"Error geocoding coordinates {coord}: {e}")
            address = None
        results.append({"coordinates": coord, "address": address})
    return results
