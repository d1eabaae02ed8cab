"""
Practice Pulse API package initialization.

This package contains FastAPI router modules:
- practice: Practice snapshots, risk queue, pipeline, assumptions and config
"""

from fastapi import APIRouter

from practice_pulse.api.practice import router as practice_router

# Create main API router
api_router = APIRouter()

# practice router has its own /practice prefix
api_router.include_router(practice_router)

__all__ = [
    "api_router",
    "practice_router",
]
