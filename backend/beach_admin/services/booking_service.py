"""
Booking service: reservation and release of sunbeds.

RESERVATION MODEL
=================

A booking links a set of sunbeds of one beach (optionally one zone). The
sunbed's own `status` column is the reservation flag:

  create  -> every linked bed goes to `reserved`
  cancel  -> linked beds go back to `available`
  delete  -> same release as cancel, then links, finance rows and the booking
             row are removed
  update  -> field patch; moving into `cancelled` releases like cancel

Release only touches beds that are `reserved` and are not linked to another
booking that is still active, so a sunbed stays reserved while any
non-cancelled booking references it.

Double booking: creation refuses beds that are not `available` (or
`selected`, the admin's transient pick) with a 409. There is no per-date
inventory; a bed is either held or free.

Each operation is one transaction: sunbed flips, booking/link rows, finance
rows and the occupancy recompute commit together or not at all. Change
events are published after the commit.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from beach_admin.models.zone import Zone, Sunbed, SunbedStatus, BOOKABLE_STATUSES
from beach_admin.models.booking import (
    Booking,
    BookingStatus,
    booking_sunbeds,
    ACTIVE_BOOKING_STATUSES,
    BILLABLE_BOOKING_STATUSES,
)
from beach_admin.models.finance import Finance, FinanceType
from beach_admin.schemas.booking import BookingCreate, BookingUpdate, as_utc
from beach_admin.db.session import transaction
from beach_admin.core.config import get_settings
from beach_admin.core.exceptions import NotFoundError, BadRequestError, ConflictError
from beach_admin.core.metrics import record_booking_operation, record_sunbed_transition
from beach_admin.core.logging import get_logger
from beach_admin.services.beach_service import get_beach
from beach_admin.services.occupancy_service import recompute_occupancy
from beach_admin.services import notification_service as events

logger = get_logger(__name__)
settings = get_settings()


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    """Get a single booking with its sunbeds, freshly loaded."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .options(selectinload(Booking.sunbeds))
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()

    if not booking:
        raise NotFoundError("Booking not found")
    return booking


async def _load_sunbeds(
    db: AsyncSession,
    beach_id: int,
    zone_id: Optional[int],
    sunbed_ids: list[int],
) -> list[Sunbed]:
    """Fetch the requested beds; each must belong to the beach (and zone, if given)."""
    if not sunbed_ids:
        return []

    query = (
        select(Sunbed)
        .join(Zone, Sunbed.zone_id == Zone.id)
        .where(Sunbed.id.in_(sunbed_ids), Zone.beach_id == beach_id)
    )
    if zone_id is not None:
        query = query.where(Sunbed.zone_id == zone_id)
    result = await db.execute(query.order_by(Sunbed.id))
    beds = list(result.scalars().all())

    missing = sorted(set(sunbed_ids) - {bed.id for bed in beds})
    if missing:
        raise NotFoundError(f"Sunbed not found: {', '.join(str(i) for i in missing)}")
    return beds


def _finance_entries(booking: Booking) -> list[Finance]:
    """Split the booking amount into rental income and the platform service fee."""
    fee_rate = settings.SERVICE_FEE_RATE
    amount = booking.total_amount or 0
    return [
        Finance(
            type=FinanceType.RENTAL_INCOME.value,
            amount=round(amount * (1 - fee_rate), 2),
            description=f"Rental income from booking {booking.id}",
            booking_id=booking.id,
            beach_id=booking.beach_id,
            date=booking.check_in_date,
        ),
        Finance(
            type=FinanceType.SERVICE_FEE.value,
            amount=round(amount * fee_rate, 2),
            description=f"Service fee from booking {booking.id}",
            booking_id=booking.id,
            beach_id=booking.beach_id,
            date=booking.check_in_date,
        ),
    ]


async def _release_sunbeds(db: AsyncSession, booking: Booking) -> list[int]:
    """
    Set the booking's reserved beds back to available.
    Beds still held by another active booking stay reserved.
    Returns the ids of the beds actually freed.
    """
    reserved = [bed for bed in booking.sunbeds if bed.status == SunbedStatus.RESERVED.value]
    if not reserved:
        return []

    result = await db.execute(
        select(booking_sunbeds.c.sunbed_id)
        .join(Booking, Booking.id == booking_sunbeds.c.booking_id)
        .where(
            booking_sunbeds.c.sunbed_id.in_([bed.id for bed in reserved]),
            booking_sunbeds.c.booking_id != booking.id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    still_held = set(result.scalars().all())

    freed = []
    for bed in reserved:
        if bed.id in still_held:
            continue
        bed.status = SunbedStatus.AVAILABLE.value
        freed.append(bed.id)
    return freed


async def create_booking(db: AsyncSession, booking_data: BookingCreate) -> Booking:
    """
    Create a booking and reserve its sunbeds.
    Optionally books derived finance entries for confirmed/completed bookings.
    """
    status = booking_data.status.value
    if status == BookingStatus.CANCELLED.value:
        raise BadRequestError("A booking cannot be created as cancelled")

    async with transaction(db):
        beach = await get_beach(db, booking_data.beach_id)
        if booking_data.zone_id is not None and not any(z.id == booking_data.zone_id for z in beach.zones):
            raise NotFoundError("Zone not found")

        beds = await _load_sunbeds(db, beach.id, booking_data.zone_id, list(dict.fromkeys(booking_data.sunbed_ids)))
        taken = [bed.code for bed in beds if bed.status not in BOOKABLE_STATUSES]
        if taken:
            logger.warning("booking_failed_sunbeds_taken", beach_id=beach.id, sunbeds=taken)
            raise ConflictError(f"Sunbeds not available: {', '.join(taken)}")

        booking = Booking(
            beach_id=beach.id,
            zone_id=booking_data.zone_id,
            customer_name=booking_data.customer_name,
            customer_email=booking_data.customer_email,
            customer_phone=booking_data.customer_phone,
            check_in_date=booking_data.check_in_date,
            check_out_date=booking_data.check_out_date,
            total_amount=booking_data.total_amount,
            status=status,
            payment_status=booking_data.payment_status.value,
            notes=booking_data.notes,
            sunbeds=beds,
        )
        db.add(booking)

        for bed in beds:
            bed.status = SunbedStatus.RESERVED.value
        await db.flush()

        if status in BILLABLE_BOOKING_STATUSES:
            db.add_all(_finance_entries(booking))

        await recompute_occupancy(db, beach)
        booking_id = booking.id

    record_booking_operation("create")
    record_sunbed_transition(SunbedStatus.RESERVED.value, len(beds))
    logger.info(
        "booking_created",
        booking_id=booking_id,
        beach_id=booking_data.beach_id,
        sunbeds=[bed.id for bed in beds],
        status=status,
    )

    booking = await get_booking(db, booking_id)
    await events.emit_booking_created(booking)
    await events.emit_beach_occupancy(await get_beach(db, booking.beach_id))
    return booking


async def cancel_booking(db: AsyncSession, booking_id: int) -> Booking:
    """Cancel a booking and release its sunbeds."""
    async with transaction(db):
        booking = await get_booking(db, booking_id)
        if booking.is_cancelled:
            raise BadRequestError("Booking is already cancelled")

        booking.status = BookingStatus.CANCELLED.value
        await db.flush()
        freed = await _release_sunbeds(db, booking)

        beach = await get_beach(db, booking.beach_id)
        await recompute_occupancy(db, beach)

    record_booking_operation("cancel")
    record_sunbed_transition(SunbedStatus.AVAILABLE.value, len(freed))
    logger.info("booking_cancelled", booking_id=booking_id, freed_sunbeds=freed)

    booking = await get_booking(db, booking_id)
    await events.emit_booking_cancelled(booking, freed)
    await events.emit_beach_occupancy(await get_beach(db, booking.beach_id))
    return booking


async def update_booking(db: AsyncSession, booking_id: int, booking_data: BookingUpdate) -> Booking:
    """Patch booking fields; a transition into `cancelled` releases sunbeds."""
    changes = booking_data.model_dump(exclude_unset=True)
    freed = []
    newly_cancelled = False

    async with transaction(db):
        booking = await get_booking(db, booking_id)
        was_cancelled = booking.is_cancelled

        for field, value in changes.items():
            if value is None and field not in ("customer_email", "customer_phone", "check_out_date", "notes"):
                continue
            if field in ("status", "payment_status"):
                value = value.value
            setattr(booking, field, value)

        if booking.check_out_date is not None and as_utc(booking.check_out_date) < as_utc(booking.check_in_date):
            raise BadRequestError("check_out_date must not be before check_in_date")
        if was_cancelled and not booking.is_cancelled:
            raise BadRequestError("A cancelled booking cannot be reactivated")

        await db.flush()
        newly_cancelled = booking.is_cancelled and not was_cancelled
        if newly_cancelled:
            freed = await _release_sunbeds(db, booking)
            beach = await get_beach(db, booking.beach_id)
            await recompute_occupancy(db, beach)

    record_booking_operation("update")
    logger.info("booking_updated", booking_id=booking_id, fields=sorted(changes))

    booking = await get_booking(db, booking_id)
    if newly_cancelled:
        record_sunbed_transition(SunbedStatus.AVAILABLE.value, len(freed))
        await events.emit_booking_cancelled(booking, freed)
        await events.emit_beach_occupancy(await get_beach(db, booking.beach_id))
    return booking


async def delete_booking(db: AsyncSession, booking_id: int) -> None:
    """Release sunbeds, drop links and finance rows, then the booking itself."""
    async with transaction(db):
        booking = await get_booking(db, booking_id)
        beach_id = booking.beach_id

        freed = [] if booking.is_cancelled else await _release_sunbeds(db, booking)

        booking.sunbeds = []
        await db.flush()
        await db.execute(delete(Finance).where(Finance.booking_id == booking.id))
        await db.delete(booking)
        await db.flush()

        beach = await get_beach(db, beach_id)
        await recompute_occupancy(db, beach)

    record_booking_operation("delete")
    record_sunbed_transition(SunbedStatus.AVAILABLE.value, len(freed))
    logger.info("booking_deleted", booking_id=booking_id, beach_id=beach_id, freed_sunbeds=freed)

    await events.emit_beach_occupancy(await get_beach(db, beach_id))


async def list_bookings(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 10,
    status: Optional[str] = None,
    beach_id: Optional[int] = None,
    check_in_from: Optional[datetime] = None,
    check_in_to: Optional[datetime] = None,
) -> tuple[list[Booking], int]:
    """Bookings newest first, filtered by status, beach and check-in range."""
    query = select(Booking)
    if status:
        query = query.where(Booking.status == status)
    if beach_id is not None:
        query = query.where(Booking.beach_id == beach_id)
    if check_in_from is not None:
        query = query.where(Booking.check_in_date >= check_in_from)
    if check_in_to is not None:
        query = query.where(Booking.check_in_date <= check_in_to)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()

    result = await db.execute(
        query
        .options(selectinload(Booking.sunbeds))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def get_booking_stats(db: AsyncSession) -> dict:
    """Totals by lifecycle, plus non-cancelled bookings checking in soon."""
    now = datetime.now(timezone.utc)
    horizon = now + timedelta(days=settings.UPCOMING_BOOKINGS_DAYS)

    async def count(*criteria) -> int:
        return (await db.execute(select(func.count(Booking.id)).where(*criteria))).scalar()

    return {
        "total": await count(),
        "active": await count(Booking.status.in_(ACTIVE_BOOKING_STATUSES)),
        "cancelled": await count(Booking.status == BookingStatus.CANCELLED.value),
        "upcoming": await count(
            Booking.check_in_date >= now,
            Booking.check_in_date <= horizon,
            Booking.status != BookingStatus.CANCELLED.value,
        ),
    }
