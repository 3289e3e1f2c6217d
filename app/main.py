"""
Road Hazard Watch - FastAPI Application Entry Point

Read API for citizen-reported road hazards (potholes, cracks, waterlogging,
debris, signage) with reverse geocoding of coordinate-only addresses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.config.firebase import initialize_firestore
from app.models.base import error_response
from app.routes import geocoding, health, map, reports

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Road hazard reports with address normalization",
    debug=settings.DEBUG
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors with the API error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail), exc.status_code),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log request validation errors and return them in the error envelope."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    content = error_response("Validation failed", status.HTTP_422_UNPROCESSABLE_ENTITY)
    content["error"]["details"] = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content)


# Global exception handler to catch everything else
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: Firestore connection
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        initialize_firestore()
    except Exception as e:
        logger.warning(f"Firestore initialization failed: {e}")
        logger.warning("The app will start but database operations may fail.")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(geocoding.router)
app.include_router(map.router)
app.include_router(reports.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "map": "/api/map/data",
    }
