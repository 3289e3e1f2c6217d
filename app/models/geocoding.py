"""
Request bodies for the geocoding endpoints.

Fields are optional on purpose: missing values are reported by the routes
with the API's own error envelope instead of a 422 validation error.
"""

from typing import Any, Optional
from pydantic import BaseModel


class ForwardGeocodeRequest(BaseModel):
    address: Optional[str] = None


class ReverseGeocodeRequest(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class BatchReverseGeocodeRequest(BaseModel):
    coordinates: Optional[Any] = None
