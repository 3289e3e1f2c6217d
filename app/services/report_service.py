"""
Report service - read hazard reports from Firestore for the API.

Firestore calls are blocking, so the public coroutines run them in the
default executor. Addresses are normalized (see app.utils.geocoding)
before reports leave this module.
"""

import asyncio
import logging
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.config.firebase import get_db
from app.core.settings import settings
from app.models.report import Report
from app.utils.firestore_helpers import where_filter
from app.utils.geocoding import (
    process_reports_with_geocoding,
    process_single_report_with_geocoding,
)

logger = logging.getLogger(__name__)

# Metres per degree of latitude, used for the approximate bounding box.
METERS_PER_DEGREE = 111000

DEFAULT_RADIUS_METERS = 10000
DEFAULT_LIMIT = 100

NEARBY_RADIUS_METERS = 5000
NEARBY_LIMIT = 20
STATS_RADIUS_METERS = 50000

DEFAULT_PAGE_SIZE = 20
SORT_FIELDS = ("createdAt", "priority", "type", "status", "severity")
HIGH_PRIORITY = 7

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class ReportNotFound(Exception):
    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(f"Report not found: {report_id}")


def bounding_box(lat: float, lng: float, radius: float) -> Dict[str, float]:
    """
    Approximate a circle of ``radius`` metres around (lat, lng) with a box.
    """
    lat_delta = radius / METERS_PER_DEGREE
    lng_delta = radius / (METERS_PER_DEGREE * math.cos(math.radians(lat)))
    return {
        "min_lat": lat - lat_delta,
        "max_lat": lat + lat_delta,
        "min_lng": lng - abs(lng_delta),
        "max_lng": lng + abs(lng_delta),
    }


def _in_box(report: Report, box: Dict[str, float]) -> bool:
    coords = report.location.coordinates
    return (
        box["min_lat"] <= coords.latitude <= box["max_lat"]
        and box["min_lng"] <= coords.longitude <= box["max_lng"]
    )


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse datetimes, ISO strings and Firestore timestamps to aware UTC datetimes.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parse_timestamp(dt)
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    return None


def _created_at(report: Report) -> datetime:
    return parse_timestamp(report.created_at) or _EPOCH


def _priority_key(report: Report):
    return (report.priority, _created_at(report))


def _field_key(field: str):
    if field == "createdAt":
        return _created_at
    if field == "priority":
        return lambda report: report.priority
    return lambda report: getattr(report, field).value


def _matches_text(report: Report, needle: str) -> bool:
    location = report.location
    haystacks = (location.address, report.description, location.city, location.state)
    return any(needle in text.casefold() for text in haystacks if text)


def _doc_to_report(doc) -> Optional[Report]:
    data = doc.to_dict() or {}
    data["id"] = doc.id
    try:
        return Report.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Skipping malformed report {doc.id}: {e.error_count()} validation error(s)")
        return None


def fetch_reports(
    type: Optional[str] = None,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: float = DEFAULT_RADIUS_METERS,
    q: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[Report]:
    """
    Query reports with equality filters in Firestore and everything else in memory.

    Firestore allows range filters on a single field only, so the
    latitude/longitude box, the createdAt range and the text search
    (case-insensitive substring of address, description, city or state)
    are applied after the query. Results are sorted by priority, then
    creation time, newest first.
    """
    db = get_db()
    query = db.collection(settings.REPORTS_COLLECTION)
    for field, value in (("type", type), ("status", status), ("severity", severity)):
        if value:
            query = where_filter(query, field, "==", value)

    reports = [r for r in (_doc_to_report(doc) for doc in query.stream()) if r is not None]

    if lat is not None and lng is not None:
        box = bounding_box(lat, lng, radius)
        reports = [r for r in reports if _in_box(r, box)]

    if date_from is not None or date_to is not None:
        start = parse_timestamp(date_from)
        end = parse_timestamp(date_to)
        reports = [
            r for r in reports
            if r.created_at is not None
            and (start is None or _created_at(r) >= start)
            and (end is None or _created_at(r) <= end)
        ]

    if q:
        needle = q.casefold()
        reports = [r for r in reports if _matches_text(r, needle)]

    reports.sort(key=_priority_key, reverse=True)
    logger.info(f"Found {len(reports)} reports")
    return reports


def fetch_report(report_id: str) -> Report:
    db = get_db()
    doc = db.collection(settings.REPORTS_COLLECTION).document(report_id).get()
    if not doc.exists:
        raise ReportNotFound(report_id)
    report = _doc_to_report(doc)
    if report is None:
        raise ReportNotFound(report_id)
    return report


def sort_reports(reports: List[Report], sort: str = "createdAt", order: str = "desc") -> List[Report]:
    if sort not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by '{sort}'")
    return sorted(reports, key=_field_key(sort), reverse=(order == "desc"))


def paginate(reports: List[Report], page: int, limit: int):
    """Return the requested page and the pagination block for the response."""
    total = len(reports)
    start = (page - 1) * limit
    return reports[start:start + limit], {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
    }


def compute_stats(reports: List[Report]) -> Dict[str, int]:
    """Count reports per status and severity for the map sidebar."""
    stats = {
        "total": len(reports),
        "pending": 0,
        "verified": 0,
        "inProgress": 0,
        "resolved": 0,
        "critical": 0,
        "high": 0,
        "medium": 0,
        "low": 0,
    }
    status_keys = {"pending": "pending", "verified": "verified", "in-progress": "inProgress", "resolved": "resolved"}
    for report in reports:
        status_key = status_keys.get(report.status.value)
        if status_key:
            stats[status_key] += 1
        stats[report.severity.value] += 1
    return stats


def _resolution_millis(report: Report) -> Optional[float]:
    resolution = getattr(report, "resolution", None)
    if not isinstance(resolution, dict) or report.created_at is None:
        return None
    resolved_at = parse_timestamp(resolution.get("resolvedAt"))
    if resolved_at is None:
        return None
    return (resolved_at - _created_at(report)).total_seconds() * 1000


def _counts_by(reports: List[Report], field: str) -> List[Dict[str, Any]]:
    counts = Counter(getattr(r, field).value for r in reports)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [{"_id": value, "count": count} for value, count in ranked]


def compute_area_stats(reports: List[Report]) -> Dict[str, Any]:
    """
    Summary for the map statistics panel.

    avgResolutionTime is in milliseconds, averaged over reports that carry
    resolution.resolvedAt; None when no report in the area has one.
    """
    if not reports:
        stats = {
            "totalReports": 0,
            "activeReports": 0,
            "resolvedReports": 0,
            "criticalReports": 0,
            "highPriorityReports": 0,
            "avgResolutionTime": 0,
        }
    else:
        durations = [d for d in (_resolution_millis(r) for r in reports) if d is not None]
        resolved = sum(1 for r in reports if r.status.value == "resolved")
        stats = {
            "totalReports": len(reports),
            "activeReports": len(reports) - resolved,
            "resolvedReports": resolved,
            "criticalReports": sum(1 for r in reports if r.severity.value == "critical"),
            "highPriorityReports": sum(1 for r in reports if r.priority >= HIGH_PRIORITY),
            "avgResolutionTime": sum(durations) / len(durations) if durations else None,
        }
    return {
        "stats": stats,
        "reportsByType": _counts_by(reports, "type"),
        "reportsByStatus": _counts_by(reports, "status"),
    }


async def _run(func, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: func(**kwargs))


async def get_reports(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    sort: str = "createdAt",
    order: str = "desc",
    type: Optional[str] = None,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    q: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: float = NEARBY_RADIUS_METERS,
) -> Dict[str, Any]:
    """One page of filtered reports, newest first by default."""
    reports = await _run(
        fetch_reports,
        type=type, status=status, severity=severity,
        lat=lat, lng=lng, radius=radius,
        q=q, date_from=date_from, date_to=date_to,
    )
    page_reports, pagination = paginate(sort_reports(reports, sort, order), page, limit)
    return {
        "reports": await process_reports_with_geocoding(page_reports),
        "pagination": pagination,
    }


async def get_report_by_id(report_id: str) -> Dict[str, Any]:
    report = await _run(fetch_report, report_id=report_id)
    return await process_single_report_with_geocoding(report)


async def get_map_data(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: float = DEFAULT_RADIUS_METERS,
    type: Optional[str] = None,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    """Reports around a point plus per-status/severity counts for the whole area."""
    reports = await _run(
        fetch_reports, type=type, status=status, severity=severity, lat=lat, lng=lng, radius=radius,
    )
    processed = await process_reports_with_geocoding(reports[:limit])
    return {
        "reports": processed,
        "stats": compute_stats(reports),
    }


async def get_nearby_reports(
    lat: float,
    lng: float,
    radius: float = NEARBY_RADIUS_METERS,
    limit: int = NEARBY_LIMIT,
) -> List[Dict[str, Any]]:
    """Highest-priority reports around a point."""
    reports = await _run(fetch_reports, lat=lat, lng=lng, radius=radius)
    return await process_reports_with_geocoding(reports[:limit])


async def get_area_stats(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: float = STATS_RADIUS_METERS,
) -> Dict[str, Any]:
    reports = await _run(fetch_reports, lat=lat, lng=lng, radius=radius)
    return compute_area_stats(reports)


def _grid_cell(report: Report):
    coords = report.location.coordinates
    return (round(coords.latitude, 3), round(coords.longitude, 3))


def _group_by_cell(reports: List[Report]) -> Dict[tuple, List[Report]]:
    cells: Dict[tuple, List[Report]] = {}
    for report in reports:
        cells.setdefault(_grid_cell(report), []).append(report)
    return cells


def compute_heatmap(reports: List[Report]) -> List[Dict[str, Any]]:
    """
    Bucket reports into ~100 m cells (coordinates rounded to 3 decimals).

    weight = count + 3 * critical + 2 * high; heaviest cells first.
    """
    points = []
    for (lat, lng), cell in _group_by_cell(reports).items():
        critical = sum(1 for r in cell if r.severity.value == "critical")
        high = sum(1 for r in cell if r.severity.value == "high")
        points.append({
            "lat": lat,
            "lng": lng,
            "count": len(cell),
            "avgPriority": sum(r.priority for r in cell) / len(cell),
            "criticalCount": critical,
            "highCount": high,
            "weight": len(cell) + 3 * critical + 2 * high,
        })
    points.sort(key=lambda point: point["weight"], reverse=True)
    return points


async def get_heatmap(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: float = STATS_RADIUS_METERS,
    type: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    reports = await _run(fetch_reports, type=type, status=status, lat=lat, lng=lng, radius=radius)
    return compute_heatmap(reports)


async def get_clusters(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: float = STATS_RADIUS_METERS,
    type: Optional[str] = None,
    status: Optional[str] = None,
    reports_per_cluster: int = 5,
) -> List[Dict[str, Any]]:
    """Same cells as the heatmap, largest first, each with up to five normalized reports."""
    reports = await _run(fetch_reports, type=type, status=status, lat=lat, lng=lng, radius=radius)
    cells = sorted(_group_by_cell(reports).items(), key=lambda item: len(item[1]), reverse=True)

    samples = await asyncio.gather(
        *(process_reports_with_geocoding(cell[:reports_per_cluster]) for _, cell in cells)
    )
    return [
        {"lat": lat_, "lng": lng_, "count": len(cell), "reports": sample}
        for ((lat_, lng_), cell), sample in zip(cells, samples)
    ]
