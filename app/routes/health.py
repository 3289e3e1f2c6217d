"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from app.config.firebase import get_db
from app.core.settings import settings
from app.services.geocoding import get_geocoding_provider


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "geocoding_provider": get_geocoding_provider().name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db")
async def database_health():
    """
    Database connectivity check.
    Attempts to connect to Firestore and list collections.
    """
    try:
        db = get_db()
        collections = list(db.collections())
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )

    return {
        "status": "healthy",
        "database": "firestore",
        "connected": True,
        "collections_count": len(collections),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
