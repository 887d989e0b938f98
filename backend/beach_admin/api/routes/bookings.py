"""
Booking endpoints: reservation, cancellation and release of sunbeds.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from beach_admin.db.session import get_db
from beach_admin.models.booking import BookingStatus
from beach_admin.schemas.beach import MessageResponse
from beach_admin.schemas.booking import (
    BookingCreate,
    BookingUpdate,
    BookingResponse,
    BookingListResponse,
    BookingStats,
)
from beach_admin.services import booking_service
from beach_admin.services.cache_service import invalidate_beach_cache
from beach_admin.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Book sunbeds. Every requested sunbed must belong to the beach (and zone,
    if given) and be free; otherwise nothing is reserved and a 404/409 is
    returned.
    """
    booking = await booking_service.create_booking(db, booking_data)
    # Occupancy changed
    await invalidate_beach_cache()
    return booking


@router.get("", response_model=BookingListResponse)
async def list_bookings_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    beach_id: Optional[int] = Query(None),
    check_in_from: Optional[datetime] = Query(None),
    check_in_to: Optional[datetime] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    bookings, total = await booking_service.list_bookings(
        db,
        page=page,
        page_size=page_size,
        status=booking_status.value if booking_status else None,
        beach_id=beach_id,
        check_in_from=check_in_from,
        check_in_to=check_in_to,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/stats", response_model=BookingStats)
async def booking_stats_endpoint(db: AsyncSession = Depends(get_db)):
    return await booking_service.get_booking_stats(db)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_endpoint(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.get_booking(db, booking_id)


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking_endpoint(
    booking_id: int,
    booking_data: BookingUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Patch a booking. Setting status to `cancelled` releases its sunbeds."""
    booking = await booking_service.update_booking(db, booking_id, booking_data)
    await invalidate_beach_cache()
    return booking


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking and release its sunbeds back to the beach."""
    booking = await booking_service.cancel_booking(db, booking_id)
    await invalidate_beach_cache()
    return booking


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking_endpoint(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    await booking_service.delete_booking(db, booking_id)
    await invalidate_beach_cache()
    return MessageResponse(message="Booking deleted successfully")
