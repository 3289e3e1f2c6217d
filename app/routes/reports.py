"""
Report endpoints - read access to stored hazard reports.
"""

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status

from app.models.base import success_response
from app.models.report import HazardType, ReportStatus, Severity
from app.services.report_service import (
    DEFAULT_PAGE_SIZE,
    NEARBY_RADIUS_METERS,
    ReportNotFound,
    get_report_by_id,
    get_reports,
)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("")
async def list_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    sort: Literal["createdAt", "priority", "type", "status", "severity"] = "createdAt",
    order: Literal["asc", "desc"] = "desc",
    type: Optional[HazardType] = None,
    status_filter: Optional[ReportStatus] = Query(None, alias="status"),
    severity: Optional[Severity] = None,
    q: Optional[str] = Query(None, max_length=200, description="Search address, description, city and state"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(NEARBY_RADIUS_METERS, gt=0),
):
    """
    List reports one page at a time.

    Supports equality filters (type, status, severity), a createdAt range,
    a case-insensitive text search and an optional area around lat/lng.
    The response carries a pagination block with page, limit, total and pages.
    """
    data = await get_reports(
        page=page,
        limit=limit,
        sort=sort,
        order=order,
        type=type.value if type else None,
        status=status_filter.value if status_filter else None,
        severity=severity.value if severity else None,
        q=q,
        date_from=date_from,
        date_to=date_to,
        lat=lat,
        lng=lng,
        radius=radius,
    )
    return success_response(data, "Reports retrieved successfully")


@router.get("/{report_id}")
async def get_report(report_id: str):
    """Fetch one report by its Firestore ID, with its address normalized."""
    try:
        report = await get_report_by_id(report_id)
    except ReportNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return success_response(report, "Report retrieved successfully")
