"""
API module for AIStream application.
Contains FastAPI route definitions for all endpoints.
"""

from fastapi import APIRouter

from .group_chat import router as group_chat_router
from .healthcheck import router as healthcheck_router

# Create a main API router
api_router = APIRouter()

api_router.include_router(healthcheck_router, tags=["Health"])
api_router.include_router(group_chat_router, tags=["Group Chat"])

__all__ = [
    "api_router",
    "group_chat_router",
    "healthcheck_router",
]
