"""
Beach aggregate service: beach CRUD, admin assignment and cascade deletion.

Zones and sunbeds are loaded with the beach (selectin) so callers always see
the full grid. Derived occupancy fields are written only by
`occupancy_service.recompute_occupancy`.
"""

from typing import Optional

from sqlalchemy import select, func, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from beach_admin.models.beach import Beach, beach_admins
from beach_admin.models.zone import Zone, Sunbed
from beach_admin.models.booking import Booking, booking_sunbeds
from beach_admin.models.finance import Finance, Payout, Alert
from beach_admin.models.user import User
from beach_admin.schemas.beach import BeachCreate, BeachUpdate
from beach_admin.db.session import transaction
from beach_admin.core.exceptions import NotFoundError, ConflictError, BadRequestError
from beach_admin.core.logging import get_logger
from beach_admin.services.occupancy_service import recompute_occupancy
from beach_admin.services import notification_service as events

logger = get_logger(__name__)


def _beach_query(beach_id: int):
    return (
        select(Beach)
        .where(Beach.id == beach_id)
        .options(
            selectinload(Beach.zones).selectinload(Zone.sunbeds),
            selectinload(Beach.admins),
        )
        .execution_options(populate_existing=True)
    )


async def get_beach(db: AsyncSession, beach_id: int) -> Beach:
    """Load a beach with zones, sunbeds and admins freshly from the database."""
    result = await db.execute(_beach_query(beach_id))
    beach = result.scalar_one_or_none()

    if not beach:
        raise NotFoundError("Beach not found")
    return beach


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def create_beach(db: AsyncSession, beach_data: BeachCreate) -> Beach:
    """Create a beach; capacity starts at the manual value until zones exist."""
    async with transaction(db):
        beach = Beach(
            name=beach_data.name,
            location=beach_data.location,
            description=beach_data.description,
            status=beach_data.status.value,
            price_per_day=beach_data.price_per_day,
            amenities=list(beach_data.amenities),
            services=list(beach_data.services),
            images=list(beach_data.images),
            total_capacity=beach_data.total_capacity,
            current_bookings=0,
            occupancy_rate=0,
        )
        db.add(beach)
        await db.flush()
        beach_id = beach.id

    logger.info("beach_created", beach_id=beach_id, name=beach_data.name)
    return await get_beach(db, beach_id)


async def update_beach(db: AsyncSession, beach_id: int, beach_data: BeachUpdate) -> Beach:
    """Patch descriptive fields, then recompute so derived fields stay consistent."""
    async with transaction(db):
        beach = await get_beach(db, beach_id)
        changes = beach_data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field != "description":
                continue
            if field == "status":
                value = value.value
            setattr(beach, field, value)
        await recompute_occupancy(db, beach)

    logger.info("beach_updated", beach_id=beach_id, fields=sorted(changes))
    beach = await get_beach(db, beach_id)
    await events.emit_beach_occupancy(beach)
    return beach


async def list_beaches(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 10,
    search: str = "",
    status: Optional[str] = None,
) -> tuple[list[Beach], int]:
    """Newest first, optional case-insensitive name search and status filter."""
    query = select(Beach)
    if search:
        query = query.where(Beach.name.ilike(f"%{search}%"))
    if status:
        query = query.where(Beach.status == status)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()

    result = await db.execute(
        query
        .order_by(Beach.created_at.desc(), Beach.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def get_occupancy_overview(db: AsyncSession) -> list[dict]:
    result = await db.execute(
        select(Beach.id, Beach.name, Beach.occupancy_rate, Beach.total_capacity, Beach.current_bookings)
        .order_by(Beach.id)
    )
    return [
        {
            "beach_id": row.id,
            "name": row.name,
            "occupancy_rate": row.occupancy_rate or 0,
            "capacity": row.total_capacity or 0,
            "current_bookings": row.current_bookings or 0,
        }
        for row in result.all()
    ]


async def get_stats_summary(db: AsyncSession) -> dict:
    total_beaches = (await db.execute(select(func.count(Beach.id)))).scalar()
    active_admins = (await db.execute(select(func.count(User.id)).where(User.is_active.is_(True)))).scalar()
    return {"total_beaches": total_beaches, "active_admins": active_admins}


# ---------- Admin assignment ----------

async def _link_admin(db: AsyncSession, beach: Beach, user_id: int) -> None:
    user = await _get_user(db, user_id)

    if any(admin.id == user.id for admin in beach.admins):
        raise ConflictError("Admin already assigned to this beach")

    other = await db.execute(
        select(beach_admins.c.beach_id).where(beach_admins.c.user_id == user.id)
    )
    if other.first() is not None:
        raise ConflictError("Admin already assigned to another beach")

    beach.admins.append(user)
    await db.flush()


async def assign_admin(db: AsyncSession, beach_id: int, user_id: Optional[int]) -> Beach:
    """Assign a user as admin of a beach; one beach per admin, repeats rejected."""
    if user_id is None:
        raise BadRequestError("user_id is required")

    async with transaction(db):
        beach = await get_beach(db, beach_id)
        await _link_admin(db, beach, user_id)

    logger.info("admin_assigned", beach_id=beach_id, user_id=user_id)
    return await get_beach(db, beach_id)


async def assign_admins(db: AsyncSession, beach_id: int, user_ids: list[int]) -> Beach:
    """Assign several admins at once; any conflict aborts the whole batch."""
    if not user_ids:
        raise BadRequestError("user_ids must not be empty")
    if len(set(user_ids)) != len(user_ids):
        raise BadRequestError("user_ids contains duplicates")

    async with transaction(db):
        beach = await get_beach(db, beach_id)
        for user_id in user_ids:
            await _link_admin(db, beach, user_id)

    logger.info("admins_assigned", beach_id=beach_id, user_ids=user_ids)
    return await get_beach(db, beach_id)


async def remove_admin(db: AsyncSession, beach_id: int, user_id: int) -> Beach:
    """Unlink an admin. Removing a link that does not exist is a no-op."""
    async with transaction(db):
        beach = await get_beach(db, beach_id)
        result = await db.execute(
            delete(beach_admins).where(
                beach_admins.c.beach_id == beach.id,
                beach_admins.c.user_id == user_id,
            )
        )

    logger.info("admin_removed", beach_id=beach_id, user_id=user_id, removed=result.rowcount)
    return await get_beach(db, beach_id)


# ---------- Deletion ----------

async def delete_beach(db: AsyncSession, beach_id: int) -> None:
    """
    Delete a beach and everything hanging off it, in dependency order:
    finance -> payouts -> alerts -> booking links -> bookings -> sunbeds
    -> zones -> admin links -> beach. One transaction; nothing is left
    half-deleted.
    """
    async with transaction(db):
        beach = await get_beach(db, beach_id)

        booking_ids = select(Booking.id).where(Booking.beach_id == beach.id)
        zone_ids = select(Zone.id).where(Zone.beach_id == beach.id)
        sunbed_ids = select(Sunbed.id).where(Sunbed.zone_id.in_(zone_ids))

        await db.execute(
            delete(Finance)
            .where(or_(Finance.beach_id == beach.id, Finance.booking_id.in_(booking_ids)))
        )
        await db.execute(delete(Payout).where(Payout.beach_id == beach.id))
        await db.execute(delete(Alert).where(Alert.beach_id == beach.id))
        await db.execute(
            delete(booking_sunbeds).where(
                or_(booking_sunbeds.c.booking_id.in_(booking_ids), booking_sunbeds.c.sunbed_id.in_(sunbed_ids))
            )
        )
        await db.execute(delete(Booking).where(Booking.beach_id == beach.id))
        await db.execute(delete(Sunbed).where(Sunbed.zone_id.in_(zone_ids)))
        await db.execute(delete(Zone).where(Zone.beach_id == beach.id))
        await db.execute(delete(beach_admins).where(beach_admins.c.beach_id == beach.id))
        await db.execute(delete(Beach).where(Beach.id == beach.id))

    logger.info("beach_deleted", beach_id=beach_id)
