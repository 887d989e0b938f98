"""
Tests for the beach aggregate: CRUD, admin assignment and cascade deletion.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select, func

from beach_admin.core.exceptions import NotFoundError, ConflictError, BadRequestError
from beach_admin.models.beach import Beach, beach_admins
from beach_admin.models.booking import Booking, booking_sunbeds
from beach_admin.models.finance import Finance, Payout, Alert
from beach_admin.models.user import User
from beach_admin.models.zone import Zone, Sunbed
from beach_admin.schemas.beach import BeachCreate, BeachUpdate
from beach_admin.schemas.booking import BookingCreate
from beach_admin.services import beach_service, booking_service


async def _count(db, column) -> int:
    return (await db.execute(select(func.count(column)))).scalar()


@pytest.mark.asyncio
async def test_create_and_get_beach(db_session):
    beach = await beach_service.create_beach(
        db_session,
        BeachCreate(name="Cala Blanca", location="Ibiza", amenities=["showers"], total_capacity=20),
    )

    fetched = await beach_service.get_beach(db_session, beach.id)
    assert fetched.name == "Cala Blanca"
    assert fetched.amenities == ["showers"]
    assert fetched.total_capacity == 20
    assert fetched.occupancy_rate == 0
    assert fetched.zones == []


@pytest.mark.asyncio
async def test_get_missing_beach(db_session):
    with pytest.raises(NotFoundError):
        await beach_service.get_beach(db_session, 12345)


@pytest.mark.asyncio
async def test_update_beach_recomputes(db_session, grid_beach):
    updated = await beach_service.update_beach(
        db_session, grid_beach.id, BeachUpdate(name="Playa Sur", status="maintenance", total_capacity=99)
    )

    assert updated.name == "Playa Sur"
    assert updated.status == "maintenance"
    # Capacity is derived from the sunbeds once any exist
    assert updated.total_capacity == 6


@pytest.mark.asyncio
async def test_list_beaches_search_and_paging(db_session):
    for name in ("Playa Norte", "Playa Sur", "Cala Azul"):
        await beach_service.create_beach(db_session, BeachCreate(name=name, location="Coast"))

    beaches, total = await beach_service.list_beaches(db_session, page=1, page_size=10, search="playa")
    assert total == 2
    assert {b.name for b in beaches} == {"Playa Norte", "Playa Sur"}

    page, total = await beach_service.list_beaches(db_session, page=2, page_size=2)
    assert total == 3
    assert len(page) == 1


@pytest.mark.asyncio
async def test_occupancy_overview_and_summary(db_session, grid_beach, admin_user):
    overview = await beach_service.get_occupancy_overview(db_session)
    assert overview == [
        {
            "beach_id": grid_beach.id,
            "name": "Playa Norte",
            "occupancy_rate": 0,
            "capacity": 6,
            "current_bookings": 0,
        }
    ]

    summary = await beach_service.get_stats_summary(db_session)
    assert summary == {"total_beaches": 1, "active_admins": 1}


@pytest.mark.asyncio
async def test_assign_admin(db_session, beach, admin_user):
    updated = await beach_service.assign_admin(db_session, beach.id, admin_user.id)
    assert [a.email for a in updated.admins] == ["admin@example.com"]


@pytest.mark.asyncio
async def test_assign_admin_twice_conflicts(db_session, beach, admin_user):
    beach_id, user_id = beach.id, admin_user.id
    await beach_service.assign_admin(db_session, beach_id, user_id)

    with pytest.raises(ConflictError, match="this beach"):
        await beach_service.assign_admin(db_session, beach_id, user_id)


@pytest.mark.asyncio
async def test_admin_limited_to_one_beach(db_session, beach, admin_user):
    beach_id, user_id = beach.id, admin_user.id
    other = await beach_service.create_beach(db_session, BeachCreate(name="Other", location="Elsewhere"))
    other_id = other.id
    await beach_service.assign_admin(db_session, beach_id, user_id)

    with pytest.raises(ConflictError, match="another beach"):
        await beach_service.assign_admin(db_session, other_id, user_id)

    other = await beach_service.get_beach(db_session, other_id)
    assert other.admins == []


@pytest.mark.asyncio
async def test_assign_unknown_user(db_session, beach):
    with pytest.raises(NotFoundError):
        await beach_service.assign_admin(db_session, beach.id, 999)


@pytest.mark.asyncio
async def test_assign_admins_all_or_nothing(db_session, beach, admin_user, other_admin):
    beach_id = beach.id
    admin_id, other_id = admin_user.id, other_admin.id
    await beach_service.assign_admin(db_session, beach_id, other_id)

    with pytest.raises(ConflictError):
        await beach_service.assign_admins(db_session, beach_id, [admin_id, other_id])

    links = (await db_session.execute(select(beach_admins.c.user_id))).scalars().all()
    assert links == [other_id]


@pytest.mark.asyncio
async def test_assign_admins_batch(db_session, beach, admin_user, other_admin):
    updated = await beach_service.assign_admins(db_session, beach.id, [admin_user.id, other_admin.id])
    assert len(updated.admins) == 2


@pytest.mark.asyncio
async def test_assign_admins_rejects_empty_and_duplicates(db_session, beach, admin_user):
    with pytest.raises(BadRequestError):
        await beach_service.assign_admins(db_session, beach.id, [])
    with pytest.raises(BadRequestError):
        await beach_service.assign_admins(db_session, beach.id, [admin_user.id, admin_user.id])


@pytest.mark.asyncio
async def test_remove_admin_is_idempotent(db_session, beach, admin_user):
    beach_id, user_id = beach.id, admin_user.id
    await beach_service.assign_admin(db_session, beach_id, user_id)

    updated = await beach_service.remove_admin(db_session, beach_id, user_id)
    assert updated.admins == []
    updated = await beach_service.remove_admin(db_session, beach_id, user_id)
    assert updated.admins == []


@pytest.mark.asyncio
async def test_delete_beach_cascades(db_session, grid_beach, admin_user):
    beach_id = grid_beach.id
    bed_id = grid_beach.zones[0].sunbeds[0].id
    await beach_service.assign_admin(db_session, beach_id, admin_user.id)
    await booking_service.create_booking(
        db_session,
        BookingCreate(
            beach_id=beach_id,
            sunbed_ids=[bed_id],
            customer_name="Ana",
            check_in_date=datetime(2026, 7, 1, tzinfo=timezone.utc),
            total_amount=50,
        ),
    )
    db_session.add_all([
        Payout(beach_id=beach_id, amount=40),
        Alert(type="info", message="Season opens", beach_id=beach_id),
    ])
    await db_session.commit()

    await beach_service.delete_beach(db_session, beach_id)

    for column in (
        Beach.id, Zone.id, Sunbed.id, Booking.id, Finance.id, Payout.id, Alert.id,
        booking_sunbeds.c.booking_id, beach_admins.c.user_id,
    ):
        assert await _count(db_session, column) == 0
    # Users are not owned by the beach
    assert await _count(db_session, User.id) == 1


@pytest.mark.asyncio
async def test_delete_missing_beach(db_session):
    with pytest.raises(NotFoundError):
        await beach_service.delete_beach(db_session, 404)


def test_zones_cascade_with_beach():
    cascade = Beach.zones.property.cascade
    assert cascade.delete
    assert cascade.delete_orphan
