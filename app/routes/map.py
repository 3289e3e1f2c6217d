"""Map routes - reports and area statistics for the live map."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi import status as http_status

from app.models.base import success_response
from app.models.report import HazardType, ReportStatus, Severity
from app.services.report_service import (
    DEFAULT_LIMIT,
    DEFAULT_RADIUS_METERS,
    NEARBY_LIMIT,
    NEARBY_RADIUS_METERS,
    STATS_RADIUS_METERS,
    get_area_stats,
    get_clusters,
    get_heatmap,
    get_map_data,
    get_nearby_reports,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/map", tags=["Map"])


@router.get("/data")
async def map_data(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_METERS, gt=0, description="Search radius in metres"),
    type: Optional[HazardType] = None,
    status: Optional[ReportStatus] = None,
    severity: Optional[Severity] = None,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=500),
):
    """
    Reports around (lat, lng) with per-status and per-severity counts.

    Without lat/lng every report matching the filters is considered.
    Coordinate-only addresses are resolved before returning.
    """
    logger.info(f"Map data request: lat={lat}, lng={lng}, radius={radius}, type={type}")
    data = await get_map_data(
        lat=lat,
        lng=lng,
        radius=radius,
        type=type.value if type else None,
        status=status.value if status else None,
        severity=severity.value if severity else None,
        limit=limit,
    )
    return success_response(data, "Map data retrieved successfully")


@router.get("/nearby")
async def nearby_reports(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(NEARBY_RADIUS_METERS, gt=0),
    limit: int = Query(NEARBY_LIMIT, ge=1, le=100),
):
    """Highest-priority reports around a point; lat and lng are mandatory."""
    if lat is None or lng is None:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="Latitude and longitude are required",
        )
    reports = await get_nearby_reports(lat=lat, lng=lng, radius=radius, limit=limit)
    return success_response(reports, "Nearby reports retrieved successfully")


@router.get("/stats")
async def map_stats(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(STATS_RADIUS_METERS, gt=0),
):
    data = await get_area_stats(lat=lat, lng=lng, radius=radius)
    return success_response(data, "Map statistics retrieved successfully")


@router.get("/heatmap")
async def map_heatmap(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(STATS_RADIUS_METERS, gt=0),
    type: Optional[HazardType] = None,
    status: Optional[ReportStatus] = None,
):
    """Weighted report density per ~100 m cell."""
    data = await get_heatmap(
        lat=lat,
        lng=lng,
        radius=radius,
        type=type.value if type else None,
        status=status.value if status else None,
    )
    return success_response(data, "Heatmap data retrieved successfully")


@router.get("/clusters")
async def map_clusters(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(STATS_RADIUS_METERS, gt=0),
    type: Optional[HazardType] = None,
    status: Optional[ReportStatus] = None,
):
    data = await get_clusters(
        lat=lat,
        lng=lng,
        radius=radius,
        type=type.value if type else None,
        status=status.value if status else None,
    )
    return success_response(data, "Cluster data retrieved successfully")
