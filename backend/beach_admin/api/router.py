"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from beach_admin.api.routes import beaches, bookings

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(beaches.router)
api_router.include_router(bookings.router)
