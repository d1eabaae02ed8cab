"""
FastAPI application entry point for the Practice Pulse API.

This module configures logging and CORS, registers the practice router, and
starts the ASGI server when executed directly.

The service is stateless: every request re-derives the snapshot from the
records it carries, so there is no connection pool to open or close.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from practice_pulse import __version__
from practice_pulse.api import practice_router
from practice_pulse.core.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup, loads the settings once so configuration errors (such as
    health weights that do not sum to 100) surface before the first request.
    """
    # Startup
    settings = get_settings()
    logger.info(
        f"{settings.app_name} starting "
        f"(staff attribution: {settings.staff_attribution_mode.value})"
    )

    yield

    # Shutdown
    logger.info(f"{settings.app_name} shutting down")


# Create FastAPI application
app = FastAPI(
    title="Practice Pulse API",
    version=__version__,
    description=(
        "Practice-management metrics for advisory firms. "
        "Builds health score, risk radar, pipeline, scoreboards, "
        "revenue estimates and weekly trends from CRM records."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the dashboard dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",  # Alternative localhost
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(practice_router)  # Has its own /practice prefix


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Practice Pulse API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "practice_pulse.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
