"""
FastAPI Application Entry Point.

This is the main application file for the Logistics Back-Office API.
"""

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.app.api.v1.router import router as api_router
from backoffice.app.core.config import settings
from backoffice.app.core.exceptions import register_exception_handlers
from backoffice.app.core.logging_config import setup_logging
from backoffice.app.core.observability import ObservabilityMiddleware
from backoffice.app.core.redis_client import create_redis_client, get_redis, ping_redis
from backoffice.app.db.session import Database
from backoffice.app.services.driver_seed import seed_drivers_from_csv

# Import models to ensure they are registered with Base
from backoffice.app.models.user import User
from backoffice.app.models.catalog import Customer, Address, Product, Truck, TruckType
from backoffice.app.models.driver import Driver, DeliveryRoute, DeliveryRouteOrder
from backoffice.app.models.route_group import RouteGroup, Route, RouteStop
from backoffice.app.models.plan import Plan, Visit, Order, LineItem, PaymentMethod, VisitReassignment

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Opens the database (creating tables) and seeds drivers if empty.
    2. Builds the shared outbound HTTP client and the Redis client.
    3. Closes all three on shutdown.
    """
    setup_logging()

    database = Database.from_settings(settings)
    await database.connect()
    app.state.database = database
    app.state.http = httpx.AsyncClient(timeout=settings.external_timeout_seconds)
    app.state.redis = create_redis_client(settings)

    if settings.seed_drivers_on_startup:
        async with database.session() as session:
            await seed_drivers_from_csv(session, settings.drivers_csv_path)

    logger.info("%s started (%s)", settings.app_name, settings.environment)
    yield

    await app.state.http.aclose()
    await app.state.redis.aclose()
    await database.disconnect()
    logger.info("%s stopped", settings.app_name)


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    description="Back-office API for delivery plans, routes, drivers and users",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["Set-Cookie"],
)

# Register global exception handlers
register_exception_handlers(app)


@app.get("/health", tags=["Health"])
async def health_check(redis_client=Depends(get_redis)):
    """
    Health check endpoint.

    An unreachable Redis is reported but does not fail the check.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "redis": "ok" if await ping_redis(redis_client) else "unavailable",
        "app_name": settings.app_name,
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Logistics Back-Office API",
        "docs": "/docs",
        "health": "/health",
    }


# Include API router
app.include_router(api_router, prefix=settings.api_prefix)


def run() -> None:
    """Console entry point: serve the app with uvicorn on ``PORT``."""
    uvicorn.run("backoffice.app.main:app", host="0.0.0.0", port=settings.port)
