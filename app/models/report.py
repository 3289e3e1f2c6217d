"""
Pydantic models for road hazard reports.
Firestore documents are validated into these models when read back.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class HazardType(str, Enum):
    POTHOLE = "pothole"
    CRACK = "crack"
    WATERLOGGED = "waterlogged"
    DEBRIS = "debris"
    SIGNAGE = "signage"
    OTHER = "other"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReportStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="Latitude coordinate")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude coordinate")


class ReportLocation(BaseModel):
    """
    Where the hazard was reported.

    address may hold a raw "lat, lng" string when the reporter's device
    could not resolve one; see app.utils.geocoding.
    """
    address: str = Field(..., min_length=1, description="Street address or coordinate placeholder")
    coordinates: Coordinates
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, alias="zipCode")

    class Config:
        populate_by_name = True


class Report(BaseModel):
    """
    A stored hazard report as returned by the API.
    Unknown Firestore fields are kept and passed through.
    """
    id: str = Field(..., description="Firestore document ID")
    type: HazardType
    severity: Severity = Severity.MEDIUM
    status: ReportStatus = ReportStatus.PENDING
    location: ReportLocation
    description: str = Field(..., max_length=1000)
    priority: int = Field(default=0, ge=0, le=10)
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True
        extra = "allow"
        json_schema_extra = {
            "example": {
                "id": "abc123",
                "type": "pothole",
                "severity": "high",
                "status": "pending",
                "location": {
                    "address": "40.7128, -74.0060",
                    "coordinates": {"latitude": 40.7128, "longitude": -74.006},
                },
                "description": "Deep pothole in the right lane",
                "priority": 7,
                "createdAt": "2024-01-15T10:30:00Z",
            }
        }
