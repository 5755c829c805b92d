"""
Health check endpoints for AIStream application.
"""
from fastapi import APIRouter
from datetime import datetime

from aistream.core.config import settings

# Create router
router = APIRouter()


def _health_payload(status: str):
    return {
        "status": status,
        "version": settings.VERSION,
        "timestamp": datetime.now().isoformat(),
        "environment": "development" if settings.DEBUG else "production"
    }


@router.get("/healthcheck", tags=["Health"])
async def healthcheck():
    """
    Health check endpoint to verify the API is running.

    Returns:
        Status information about the application
    """
    return _health_payload("ok")


@router.get("/health", tags=["Health"])
async def health_check():
    return _health_payload("healthy")
