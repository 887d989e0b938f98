"""
Tests for zone lifecycle and sunbed grid maintenance.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select, func

from beach_admin.core.exceptions import NotFoundError, BadRequestError
from beach_admin.models.zone import Sunbed, SunbedStatus
from beach_admin.schemas.beach import BeachCreate, ZoneCreate, ZoneUpdate, SunbedInput
from beach_admin.schemas.booking import BookingCreate
from beach_admin.services import beach_service, zone_service, booking_service, occupancy_service


def _by_position(zone):
    return {bed.position: bed for bed in zone.sunbeds}


@pytest.mark.asyncio
async def test_add_zone_generates_grid(db_session, beach, published_events):
    updated = await zone_service.add_zone(db_session, beach.id, ZoneCreate(name="Front", rows=2, cols=3))

    zone = updated.zones[0]
    assert (zone.rows, zone.cols) == (2, 3)
    assert len(zone.sunbeds) == 6
    assert {bed.status for bed in zone.sunbeds} == {"available"}
    assert zone.sunbeds[0].code == f"Z{zone.id}-R1C1"
    assert updated.total_capacity == 6
    assert updated.occupancy_rate == 0

    events = [m["event"] for m in published_events]
    assert "zone:update" in events
    assert "beach:occupancy" in events


@pytest.mark.asyncio
async def test_add_zone_with_explicit_layout(db_session, beach):
    updated = await zone_service.add_zone(
        db_session,
        beach.id,
        ZoneCreate(
            name="Custom",
            rows=5,
            cols=5,
            sunbeds=[
                SunbedInput(row=1, col=1, code="VIP-1", price_modifier=10),
                SunbedInput(row=1, col=2, status="unavailable"),
                SunbedInput(row=3, col=4, status="reserved"),
            ],
        ),
    )

    zone = updated.zones[0]
    assert len(zone.sunbeds) == 3
    assert zone.sunbeds[0].code == "VIP-1"
    assert zone.sunbeds[0].price_modifier == 10
    # 3 beds, 2 eligible, 1 occupied
    assert updated.total_capacity == 3
    assert updated.current_bookings == 1
    assert updated.occupancy_rate == 50


@pytest.mark.asyncio
async def test_empty_zone_keeps_manual_capacity(db_session, beach):
    beach.total_capacity = 40
    await db_session.commit()

    updated = await zone_service.add_zone(db_session, beach.id, ZoneCreate(name="Empty"))
    assert updated.zones[0].sunbeds == []
    assert updated.total_capacity == 40
    assert updated.occupancy_rate == 0


@pytest.mark.asyncio
async def test_add_zone_unknown_beach(db_session):
    with pytest.raises(NotFoundError):
        await zone_service.add_zone(db_session, 999, ZoneCreate(name="Ghost", rows=1, cols=1))


@pytest.mark.asyncio
async def test_shrink_preserves_sunbeds_by_position(db_session, beach):
    beach_id = beach.id
    updated = await zone_service.add_zone(db_session, beach_id, ZoneCreate(name="Square", rows=2, cols=2))
    zone_id = updated.zones[0].id
    reserved_id = _by_position(updated.zones[0])[(1, 2)].id

    await zone_service.update_sunbed_status(db_session, beach_id, zone_id, reserved_id, SunbedStatus.RESERVED)

    updated, zone = await zone_service.update_zone(db_session, beach_id, zone_id, ZoneUpdate(rows=1, cols=2))

    assert [bed.position for bed in zone.sunbeds] == [(1, 1), (1, 2)]
    kept = _by_position(zone)[(1, 2)]
    assert kept.id == reserved_id
    assert kept.status == "reserved"
    assert updated.total_capacity == 2
    assert updated.current_bookings == 1
    assert updated.occupancy_rate == 50

    remaining = (await db_session.execute(select(func.count(Sunbed.id)).where(Sunbed.zone_id == zone_id))).scalar()
    assert remaining == 2


@pytest.mark.asyncio
async def test_grow_adds_available_sunbeds(db_session, beach):
    beach_id = beach.id
    updated = await zone_service.add_zone(db_session, beach_id, ZoneCreate(name="Row", rows=1, cols=2))
    zone_id = updated.zones[0].id
    original_ids = {bed.id for bed in updated.zones[0].sunbeds}

    updated, zone = await zone_service.update_zone(db_session, beach_id, zone_id, ZoneUpdate(rows=2))

    assert len(zone.sunbeds) == 4
    assert original_ids <= {bed.id for bed in zone.sunbeds}
    assert _by_position(zone)[(2, 1)].status == "available"
    assert _by_position(zone)[(2, 1)].code == f"Z{zone_id}-R2C1"
    assert updated.total_capacity == 4


@pytest.mark.asyncio
async def test_rename_only_keeps_sunbeds(db_session, grid_beach):
    zone = grid_beach.zones[0]
    ids = [bed.id for bed in zone.sunbeds]

    _, zone = await zone_service.update_zone(db_session, grid_beach.id, zone.id, ZoneUpdate(name="Back Row"))

    assert zone.name == "Back Row"
    assert [bed.id for bed in zone.sunbeds] == ids


@pytest.mark.asyncio
async def test_explicit_layout_replaces_sunbeds(db_session, grid_beach):
    beach_id = grid_beach.id
    zone = grid_beach.zones[0]
    zone_id = zone.id
    first_id = zone.sunbeds[0].id

    updated, zone = await zone_service.update_zone(
        db_session,
        beach_id,
        zone_id,
        ZoneUpdate(
            sunbeds=[
                SunbedInput(id=first_id, row=1, col=1, status="unavailable"),
                SunbedInput(row=4, col=4),
            ]
        ),
    )

    assert len(zone.sunbeds) == 2
    assert _by_position(zone)[(1, 1)].id == first_id
    assert _by_position(zone)[(1, 1)].status == "unavailable"
    assert updated.total_capacity == 2
    assert updated.occupancy_rate == 0


@pytest.mark.asyncio
async def test_explicit_layout_duplicate_codes_rejected(db_session, grid_beach):
    beach_id = grid_beach.id
    zone_id = grid_beach.zones[0].id

    with pytest.raises(BadRequestError):
        await zone_service.update_zone(
            db_session,
            beach_id,
            zone_id,
            ZoneUpdate(sunbeds=[SunbedInput(row=1, col=1, code="X"), SunbedInput(row=1, col=2, code="X")]),
        )


@pytest.mark.asyncio
async def test_resize_after_relayout_keeps_codes_unique(db_session, beach):
    beach_id = beach.id
    updated = await zone_service.add_zone(
        db_session,
        beach_id,
        ZoneCreate(name="Pier", rows=1, cols=1, sunbeds=[SunbedInput(row=1, col=1, code="PLACEHOLDER")]),
    )
    zone_id = updated.zones[0].id
    bed_id = updated.zones[0].sunbeds[0].id
    taken = f"Z{zone_id}-R2C1"

    # The kept bed takes the code a later grow would generate for (2, 1)
    await zone_service.update_zone(
        db_session, beach_id, zone_id, ZoneUpdate(sunbeds=[SunbedInput(id=bed_id, row=1, col=1, code=taken)])
    )
    _, zone = await zone_service.update_zone(db_session, beach_id, zone_id, ZoneUpdate(rows=2))

    codes = [bed.code for bed in zone.sunbeds]
    assert len(codes) == len(set(codes)) == 2
    assert _by_position(zone)[(1, 1)].code == taken
    assert _by_position(zone)[(2, 1)].code == f"{taken}-2"


@pytest.mark.asyncio
async def test_replacement_layout_reuses_dropped_codes(db_session, grid_beach):
    beach_id = grid_beach.id
    zone_id = grid_beach.zones[0].id
    old_code = grid_beach.zones[0].sunbeds[0].code

    _, zone = await zone_service.update_zone(
        db_session, beach_id, zone_id, ZoneUpdate(sunbeds=[SunbedInput(row=1, col=1, code=old_code)])
    )

    assert [bed.code for bed in zone.sunbeds] == [old_code]
    remaining = (await db_session.execute(select(func.count(Sunbed.id)).where(Sunbed.zone_id == zone_id))).scalar()
    assert remaining == 1


@pytest.mark.asyncio
async def test_layout_can_swap_codes(db_session, grid_beach):
    beach_id = grid_beach.id
    zone_id = grid_beach.zones[0].id
    first, second = grid_beach.zones[0].sunbeds[:2]
    first_id, first_code = first.id, first.code
    second_id, second_code = second.id, second.code

    _, zone = await zone_service.update_zone(
        db_session,
        beach_id,
        zone_id,
        ZoneUpdate(
            sunbeds=[
                SunbedInput(id=first_id, row=1, col=1, code=second_code),
                SunbedInput(id=second_id, row=1, col=2, code=first_code),
            ]
        ),
    )

    codes = {bed.id: bed.code for bed in zone.sunbeds}
    assert codes == {first_id: second_code, second_id: first_code}


@pytest.mark.asyncio
async def test_layout_repeating_sunbed_id_rejected(db_session, grid_beach):
    beach_id = grid_beach.id
    zone_id = grid_beach.zones[0].id
    bed_id = grid_beach.zones[0].sunbeds[0].id

    with pytest.raises(BadRequestError):
        await zone_service.update_zone(
            db_session,
            beach_id,
            zone_id,
            ZoneUpdate(sunbeds=[SunbedInput(id=bed_id, row=1, col=1), SunbedInput(id=bed_id, row=1, col=2)]),
        )

    remaining = (await db_session.execute(select(func.count(Sunbed.id)).where(Sunbed.zone_id == zone_id))).scalar()
    assert remaining == 6


@pytest.mark.asyncio
async def test_recompute_occupancy_is_idempotent(db_session, grid_beach):
    beach_id = grid_beach.id
    bed_id = grid_beach.zones[0].sunbeds[0].id
    await zone_service.update_sunbed_status(db_session, beach_id, grid_beach.zones[0].id, bed_id, SunbedStatus.RESERVED)
    beach = await beach_service.get_beach(db_session, beach_id)

    first = await occupancy_service.recompute_occupancy(db_session, beach)
    fields = (beach.total_capacity, beach.current_bookings, beach.occupancy_rate)
    second = await occupancy_service.recompute_occupancy(db_session, beach)

    assert first == second
    assert (beach.total_capacity, beach.current_bookings, beach.occupancy_rate) == fields == (6, 1, 17)


@pytest.mark.asyncio
async def test_shrink_drops_booking_links(db_session, beach):
    beach_id = beach.id
    updated = await zone_service.add_zone(db_session, beach_id, ZoneCreate(name="Square", rows=2, cols=2))
    zone_id = updated.zones[0].id
    dropped_id = _by_position(updated.zones[0])[(2, 2)].id

    booking = await booking_service.create_booking(
        db_session,
        BookingCreate(
            beach_id=beach_id,
            sunbed_ids=[dropped_id],
            customer_name="Ana",
            check_in_date=datetime(2026, 7, 1, tzinfo=timezone.utc),
        ),
    )
    booking_id = booking.id

    updated, _ = await zone_service.update_zone(db_session, beach_id, zone_id, ZoneUpdate(rows=1))

    booking = await booking_service.get_booking(db_session, booking_id)
    assert booking.sunbed_ids == []
    assert updated.total_capacity == 2
    assert updated.occupancy_rate == 0


@pytest.mark.asyncio
async def test_zone_of_other_beach_not_found(db_session, grid_beach):
    zone_id = grid_beach.zones[0].id
    other = await beach_service.create_beach(db_session, BeachCreate(name="Other", location="Elsewhere"))

    with pytest.raises(NotFoundError):
        await zone_service.update_zone(db_session, other.id, zone_id, ZoneUpdate(name="Stolen"))


@pytest.mark.asyncio
async def test_delete_zone_detaches_bookings(db_session, grid_beach):
    beach_id = grid_beach.id
    zone = grid_beach.zones[0]
    zone_id = zone.id
    bed_id = zone.sunbeds[0].id

    booking = await booking_service.create_booking(
        db_session,
        BookingCreate(
            beach_id=beach_id,
            zone_id=zone_id,
            sunbed_ids=[bed_id],
            customer_name="Ana",
            check_in_date=datetime(2026, 7, 1, tzinfo=timezone.utc),
        ),
    )
    booking_id = booking.id

    updated = await zone_service.delete_zone(db_session, beach_id, zone_id)

    assert updated.zones == []
    # No sunbeds left: capacity keeps its last value, nothing is occupied
    assert updated.occupancy_rate == 0
    assert updated.current_bookings == 0
    booking = await booking_service.get_booking(db_session, booking_id)
    assert booking.zone_id is None
    assert booking.sunbed_ids == []
    assert (await db_session.execute(select(func.count(Sunbed.id)))).scalar() == 0


@pytest.mark.asyncio
async def test_update_sunbed_status(db_session, grid_beach, published_events):
    beach_id = grid_beach.id
    zone_id = grid_beach.zones[0].id
    bed_id = grid_beach.zones[0].sunbeds[0].id

    updated, zone, bed = await zone_service.update_sunbed_status(
        db_session, beach_id, zone_id, bed_id, SunbedStatus.UNAVAILABLE, actor_id="socket-1"
    )

    assert bed.status == "unavailable"
    assert updated.total_capacity == 6
    assert updated.occupancy_rate == 0

    sunbed_events = [m for m in published_events if m["event"] == "sunbed:update"]
    assert len(sunbed_events) == 1
    assert sunbed_events[0]["room"] == f"beach:{beach_id}"
    assert sunbed_events[0]["data"]["actor_id"] == "socket-1"
    assert sunbed_events[0]["data"]["sunbed"]["status"] == "unavailable"


@pytest.mark.asyncio
async def test_update_unknown_sunbed(db_session, grid_beach):
    with pytest.raises(NotFoundError):
        await zone_service.update_sunbed_status(
            db_session, grid_beach.id, grid_beach.zones[0].id, 999, SunbedStatus.RESERVED
        )
