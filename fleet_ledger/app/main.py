"""
FastAPI Application Entry Point.

This is the main application file for the Fleet Ledger Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fleet_ledger.app.core.config import settings
from fleet_ledger.app.api.v1.router import router as api_v1_router
from fleet_ledger.app.core.observability import ObservabilityMiddleware, configure_logging
from fleet_ledger.app.db.session import engine, Base
from fleet_ledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from fastapi import HTTPException
from fleet_ledger.app.services.refresh import refresh_notifier

# Import models to ensure they are registered with Base
from fleet_ledger.app.models.vehicle import Vehicle
from fleet_ledger.app.models.driver import Driver
from fleet_ledger.app.models.client import Client
from fleet_ledger.app.models.trip import Trip
from fleet_ledger.app.models.income import Income
from fleet_ledger.app.models.expense import Expense
from fleet_ledger.app.models.audit_log import AuditLog

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Creates database tables on startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Ledger, analytics, billing and trip settlement for fleet operations",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status, application information and the current refresh generation
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "refresh_generation": refresh_notifier.generation,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Fleet Ledger Backend API",
        "docs": "/docs",
        "health": "/health",
    }
