"""Corridor Governance & Occupancy Backend - Main Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.exceptions import CorridorException
from .core.logging import (
    RequestIdMiddleware,
    get_logger,
    setup_logging,
    shutdown_logging,
)

# Import routers
from .modules.directory import profiles_router
from .modules.directory import router as corridors_router
from .modules.listings import admin_router as unit_review_router
from .modules.listings import router as units_router
from .modules.occupancy import router as occupancy_router
from .modules.trust import audits_router, complaints_router, trust_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging()
    logger.info("Starting corridor backend...")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug mode: {settings.app_debug}")
    yield
    # Shutdown
    logger.info("Shutting down corridor backend...")
    shutdown_logging()


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description="Listing governance, trust scoring and occupancy allocation",
    version=settings.api_version,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
    openapi_url="/api/openapi.json" if settings.app_debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware for request tracing
app.add_middleware(RequestIdMiddleware)


# Global exception handler
@app.exception_handler(CorridorException)
async def corridor_exception_handler(request: Request, exc: CorridorException):
    """Handle domain exceptions with the status code they carry."""
    if exc.status_code >= 409:
        logger.warning(
            "Request conflict",
            extra={"path": request.url.path, "error": exc.message},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": exc.message,
            "data": exc.details or None,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": str(exc) if settings.app_debug else "Internal server error",
            "data": None,
        },
    )


# Health check endpoint
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.api_version,
        "env": settings.app_env,
    }


API_PREFIX = settings.api_prefix

# Directory routes
app.include_router(corridors_router, prefix=API_PREFIX)
app.include_router(profiles_router, prefix=API_PREFIX)

# Listing routes
app.include_router(units_router, prefix=API_PREFIX)
app.include_router(unit_review_router, prefix=API_PREFIX)

# Trust & audit routes
app.include_router(complaints_router, prefix=API_PREFIX)
app.include_router(trust_router, prefix=API_PREFIX)
app.include_router(audits_router, prefix=API_PREFIX)

# Occupancy routes
app.include_router(occupancy_router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "corridor_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_debug,
    )
