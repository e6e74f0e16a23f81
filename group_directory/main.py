"""
Main FastAPI application entry point.

This module creates the FastAPI application instance and configures
the group routes, error handlers and application lifecycle events.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn
from typing import AsyncGenerator

from group_directory.config.settings import settings
from group_directory.core.database import create_tables
from group_directory.core.logging import configure_logging
from group_directory.api.routes import groups
from group_directory.services.base import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Configures logging and makes sure the directory tables exist.
    """
    configure_logging()
    create_tables()
    logger.info(f"{settings.project_name} API ready")

    yield

    logger.info(f"Shutting down {settings.project_name} API")


# Create FastAPI application instance
app = FastAPI(
    title=settings.project_name,
    description="""
    ## Group Directory API

    Groups, display names and memberships stored in a SQL database,
    fronted by a cache of group records.
    """,
    version="1.0.0",
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    lifespan=lifespan
)


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    """
    The backing store failed; report it as unavailable.
    """
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=503,
        content={
            "error": exc.error_code,
            "detail": exc.message if settings.debug else "Group store unavailable",
            "path": str(request.url),
            "method": request.method
        }
    )


@app.get("/health", tags=["System"])
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.
    """
    return {
        "status": "healthy",
        "version": "1.0.0",
        "cache_backend": settings.cache_backend
    }


# Include API routers
app.include_router(
    groups.router,
    prefix=f"{settings.api_v1_str}/groups",
    tags=["Groups"]
)


# Development server entry point
if __name__ == "__main__":
    uvicorn.run(
        "group_directory.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
