"""
Address normalization for stored reports.

Reports submitted from a phone without a resolved address carry the raw
"lat, lng" pair in location.address. Before reports are returned to
clients, such placeholders are replaced with a reverse-geocoded address,
or with a readable coordinate string when geocoding is unavailable.
"""

import asyncio
import copy
import inspect
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from app.services.geocoding.base import GeocodingUnavailable

logger = logging.getLogger(__name__)

# "<signed decimal>, <signed decimal>", fractional part required on both sides.
# Numeric range is not checked ("200.0, -400.0" matches).
COORDINATE_ADDRESS_RE = re.compile(r"-?[0-9]+\.[0-9]+,\s*-?[0-9]+\.[0-9]+")

LOCATION_MARKER = "📍"

ReverseGeocoder = Callable[[float, float], Union[Optional[Dict], Awaitable[Optional[Dict]]]]
Record = Dict[str, Any]


def is_coordinate_address(address: Optional[str]) -> bool:
    """Return True if ``address`` is a bare "lat, lng" pair rather than a street address."""
    if not isinstance(address, str):
        return False
    return COORDINATE_ADDRESS_RE.fullmatch(address) is not None


def _format_coordinate(value: Any) -> str:
    try:
        return f"{float(value):.6f}"
    except (TypeError, ValueError):
        return "NaN"


def format_coordinate_fallback(latitude: Any, longitude: Any) -> str:
    """
    Build the display address used when a location cannot be resolved.

    >>> format_coordinate_fallback(40.7128, -74.006)
    '📍 Location (40.712800, -74.006000)'
    """
    return f"{LOCATION_MARKER} Location ({_format_coordinate(latitude)}, {_format_coordinate(longitude)})"


def _as_record(report: Any) -> Any:
    """Return a detached copy of ``report`` that can be modified freely."""
    if hasattr(report, "model_dump"):
        return report.model_dump(by_alias=True)
    if isinstance(report, dict):
        return copy.deepcopy(report)
    return report


def _default_geocoder() -> ReverseGeocoder:
    from app.services.geocoding.service import reverse_geocode
    return reverse_geocode


async def _lookup(geocoder: ReverseGeocoder, latitude: Any, longitude: Any) -> Dict:
    try:
        result = geocoder(latitude, longitude)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        raise GeocodingUnavailable(latitude, longitude, reason=str(e)) from e

    if not result:
        raise GeocodingUnavailable(latitude, longitude)
    if not isinstance(result, dict):
        raise GeocodingUnavailable(latitude, longitude, reason=f"unexpected result type {type(result).__name__}")
    return result


async def process_single_report_with_geocoding(
    report: Any,
    geocoder: Optional[ReverseGeocoder] = None,
) -> Any:
    """
    Replace a coordinate placeholder address on one report.

    Reports whose address is not a coordinate pair are returned as-is.
    Otherwise the report's coordinates are reverse geocoded and address,
    city, state and zipCode are taken from the result. If the lookup
    fails or finds nothing, only the address is replaced, with
    format_coordinate_fallback(). Never raises for geocoding failures.
    """
    if not report:
        return report

    record = _as_record(report)
    location = record.get("location") if isinstance(record, dict) else None
    if not isinstance(location, dict) or not is_coordinate_address(location.get("address")):
        return record

    coordinates = location.get("coordinates")
    if not isinstance(coordinates, dict):
        coordinates = {}
    latitude = coordinates.get("latitude")
    longitude = coordinates.get("longitude")

    try:
        geocoded = await _lookup(geocoder or _default_geocoder(), latitude, longitude)
    except GeocodingUnavailable as e:
        report_id = record.get("_id") or record.get("id")
        logger.warning(f"Error geocoding report {report_id}: {e.reason}")
        location["address"] = format_coordinate_fallback(latitude, longitude)
        return record

    location["address"] = geocoded.get("address")
    location["city"] = geocoded.get("city")
    location["state"] = geocoded.get("state")
    location["zipCode"] = geocoded.get("zipCode")
    return record


async def process_reports_with_geocoding(
    reports: Any,
    geocoder: Optional[ReverseGeocoder] = None,
) -> Any:
    """
    Normalize a list of reports concurrently.

    One lookup is started per coordinate-address report and all are awaited
    together; the output order matches the input order. Non-list input is
    returned unchanged.
    """
    if not isinstance(reports, (list, tuple)):
        return reports

    return list(await asyncio.gather(
        *(process_single_report_with_geocoding(report, geocoder) for report in reports)
    ))


async def normalize_report_addresses(
    reports: Union[Record, Sequence[Record], None],
    geocoder: Optional[ReverseGeocoder] = None,
) -> Union[Record, List[Record], None]:
    """Normalize either a single report or a sequence of reports."""
    if isinstance(reports, (list, tuple)):
        return await process_reports_with_geocoding(reports, geocoder)
    return await process_single_report_with_geocoding(reports, geocoder)
