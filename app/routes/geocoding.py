"""
Geocoding endpoints - forward, reverse and batch reverse lookups.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from app.core.settings import settings
from app.models.base import success_response
from app.models.geocoding import (
    BatchReverseGeocodeRequest,
    ForwardGeocodeRequest,
    ReverseGeocodeRequest,
)
from app.services.geocoding import service as geocoding_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/geocode", tags=["Geocoding"])


@router.post("/forward")
async def forward_geocode(body: ForwardGeocodeRequest):
    """Convert an address to coordinates."""
    if not body.address:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Address is required")

    try:
        result = await geocoding_service.forward_geocode(body.address)
    except Exception as e:
        logger.error(f"Forward geocoding error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Geocoding service error")

    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
    return success_response(result, "Address geocoded successfully")


@router.post("/reverse")
async def reverse_geocode(body: ReverseGeocodeRequest):
    """Convert coordinates to an address."""
    if body.latitude is None or body.longitude is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Latitude and longitude are required",
        )

    try:
        result = await geocoding_service.reverse_geocode(body.latitude, body.longitude)
    except Exception as e:
        logger.error(f"Reverse geocoding error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Geocoding service error")

    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return success_response(result, "Coordinates reverse geocoded successfully")


@router.post("/batch-reverse")
async def batch_reverse_geocode(body: BatchReverseGeocodeRequest):
    """Convert up to MAX_BATCH_COORDINATES coordinate pairs to addresses."""
    coordinates = body.coordinates
    if not coordinates or not isinstance(coordinates, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Coordinates array is required")

    max_items = settings.MAX_BATCH_COORDINATES
    if len(coordinates) > max_items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum {max_items} coordinates allowed per request",
        )

    try:
        results = await geocoding_service.batch_reverse_geocode(coordinates)
    except Exception as e:
        logger.error(f"Batch reverse geocoding error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Geocoding service error")

    return success_response(results, "Batch reverse geocoding completed")
