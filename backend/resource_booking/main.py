"""
Campus Resource Booking API - Main Application Entry Point

Shared rooms, halls, labs and equipment are reserved by time range:
- Half-open interval conflict detection against pending/approved bookings
- Per-resource auto-approval policy and an admin approval workflow
- Optimistic locking so concurrent requests cannot double-book a resource
- Best-effort notifications and audit trail, published after commit
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resource_booking.core.config import get_settings
from resource_booking.core.exceptions import BookingServiceError, booking_error_handler
from resource_booking.core.logging import setup_logging, get_logger
from resource_booking.core.metrics import metrics_endpoint
from resource_booking.api.router import api_router
from resource_booking.api.middleware import RequestLoggingMiddleware
from resource_booking.services.cache_service import get_redis, close_redis, get_cache_stats

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Serving availability without cache")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Campus resource booking with conflict detection and approval workflow",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(BookingServiceError, booking_error_handler)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
