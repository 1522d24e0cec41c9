"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from resource_booking.api.routes import auth, resources, bookings, notifications

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(resources.router)
api_router.include_router(bookings.router)
api_router.include_router(notifications.router)
