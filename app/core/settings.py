"""
Core settings and environment variables for Road Hazard Watch.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Road Hazard Watch"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:8080"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    REPORTS_COLLECTION: str = "reports"

    # Geocoding
    # - GEOCODING_PROVIDER: "mapbox" (default), "nominatim" (no API key) or "google"
    # - Mapbox and Google fall back to Nominatim when their key is missing
    GEOCODING_PROVIDER: str = "mapbox"
    MAPBOX_ACCESS_TOKEN: Optional[str] = None
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    NOMINATIM_USER_AGENT: str = "road-hazard-watch/1.0"
    GEOCODING_TIMEOUT_SECONDS: float = 3.0
    MAX_BATCH_COORDINATES: int = 50

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins_list(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
