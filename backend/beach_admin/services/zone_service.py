"""
Zone manager: zone lifecycle and sunbed grid maintenance.

GRID MAINTENANCE
================

add_zone:
  An explicit, non-empty sunbed list is stored as given (after defaults are
  filled in); otherwise a rows x cols grid is generated.

update_zone:
  1. Explicit sunbed list -> destructive replace. Entries that carry the id
     of a bed in this zone update that bed in place; every other existing
     bed is dropped.
  2. rows/cols changed -> regenerate the grid, keeping any existing bed whose
     (row, col) is still inside the new grid, status included. Matching is
     strictly by (row, col); nothing is renumbered. A new position whose
     generated code is already held by a kept bed gets a `-2`, `-3`... suffix.

Sunbed codes are unique per zone (also a table constraint). Dropped beds lose
their booking links and are deleted before any new or renamed bed is
written, so replacement rows can reuse their codes.

Every operation ends with an occupancy recompute in the same transaction,
and publishes change events only after the commit.
"""

from typing import Iterable, Optional

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from beach_admin.models.beach import Beach
from beach_admin.models.zone import Zone, Sunbed, SunbedStatus
from beach_admin.models.booking import Booking, booking_sunbeds
from beach_admin.schemas.beach import ZoneCreate, ZoneUpdate
from beach_admin.db.session import transaction
from beach_admin.core.exceptions import NotFoundError, BadRequestError
from beach_admin.core.metrics import record_zone_operation, record_sunbed_transition
from beach_admin.core.logging import get_logger
from beach_admin.services.beach_service import get_beach
from beach_admin.services.occupancy_service import recompute_occupancy
from beach_admin.services.sunbed_grid import (
    SunbedSpec,
    generate_sunbed_grid,
    normalize_sunbed_layout,
    unique_code,
)
from beach_admin.services import notification_service as events

logger = get_logger(__name__)


def _find_zone(beach: Beach, zone_id: int) -> Zone:
    """The zone must exist and belong to this beach."""
    for zone in beach.zones:
        if zone.id == zone_id:
            return zone
    raise NotFoundError("Zone not found")


def _find_sunbed(zone: Zone, sunbed_id: int) -> Sunbed:
    for bed in zone.sunbeds:
        if bed.id == sunbed_id:
            return bed
    raise NotFoundError("Sunbed not found")


def _build_sunbed(spec: SunbedSpec) -> Sunbed:
    return Sunbed(
        code=spec.code,
        row=spec.row,
        col=spec.col,
        status=spec.status,
        price_modifier=spec.price_modifier,
    )


async def _unlink_sunbeds(db: AsyncSession, sunbed_ids: Iterable[int]) -> None:
    """Remove booking links to sunbeds that are about to be deleted."""
    ids = [sunbed_id for sunbed_id in sunbed_ids if sunbed_id is not None]
    if ids:
        await db.execute(delete(booking_sunbeds).where(booking_sunbeds.c.sunbed_id.in_(ids)))


async def _drop_sunbeds(db: AsyncSession, zone: Zone, dropped: list[Sunbed]) -> None:
    """Unlink and delete beds leaving the zone before any replacement row is written."""
    if not dropped:
        return
    await _unlink_sunbeds(db, [bed.id for bed in dropped])
    gone = {id(bed) for bed in dropped}
    zone.sunbeds = [bed for bed in zone.sunbeds if id(bed) not in gone]
    # A dropped bed's code is free only once its row is gone
    await db.flush()


def _outside_grid(zone: Zone) -> list[Sunbed]:
    """Beds the current rows/cols no longer hold; duplicates of a position go too."""
    seen = set()
    dropped = []
    for bed in zone.sunbeds:
        if bed.row > zone.rows or bed.col > zone.cols or bed.position in seen:
            dropped.append(bed)
        else:
            seen.add(bed.position)
    return dropped


def _fill_grid(zone: Zone) -> list[Sunbed]:
    """Kept beds plus new available beds for every empty position, row-major."""
    existing = {bed.position: bed for bed in zone.sunbeds}
    used_codes = {bed.code for bed in zone.sunbeds}

    beds = []
    for spec in generate_sunbed_grid(zone.rows, zone.cols, zone.id):
        bed = existing.get((spec.row, spec.col))
        if bed is None:
            bed = _build_sunbed(spec)
            bed.code = unique_code(spec.code, used_codes)
            used_codes.add(bed.code)
        beds.append(bed)
    return beds


def _unreferenced(zone: Zone, specs: list[SunbedSpec]) -> list[Sunbed]:
    """Existing beds an explicit layout does not mention by id."""
    by_id = {bed.id: bed for bed in zone.sunbeds}
    for spec in specs:
        if spec.id is not None and spec.id not in by_id:
            raise NotFoundError(f"Sunbed {spec.id} not found in zone")
    referenced = {spec.id for spec in specs if spec.id is not None}
    if len(referenced) != sum(1 for spec in specs if spec.id is not None):
        raise BadRequestError("Sunbed ids must not repeat in a layout")
    return [bed for bed in zone.sunbeds if bed.id not in referenced]


async def _apply_layout(db: AsyncSession, zone: Zone, specs: list[SunbedSpec]) -> list[Sunbed]:
    """Bed list for an explicit layout; referenced ids are updated in place."""
    by_id = {bed.id: bed for bed in zone.sunbeds}

    # Park renamed beds on a private code first so swapped codes never collide
    renamed = [by_id[spec.id] for spec in specs if spec.id is not None and by_id[spec.id].code != spec.code]
    if renamed:
        for bed in renamed:
            bed.code = f"~{bed.id}"
        await db.flush()

    beds = []
    for spec in specs:
        if spec.id is None:
            beds.append(_build_sunbed(spec))
            continue
        bed = by_id[spec.id]
        bed.code = spec.code
        bed.row = spec.row
        bed.col = spec.col
        bed.status = spec.status
        bed.price_modifier = spec.price_modifier
        beds.append(bed)
    return beds


async def add_zone(db: AsyncSession, beach_id: int, zone_data: ZoneCreate) -> Beach:
    """Add a zone with either an explicit layout or a generated grid."""
    async with transaction(db):
        beach = await get_beach(db, beach_id)

        zone = Zone(name=zone_data.name, rows=zone_data.rows, cols=zone_data.cols, sunbeds=[])
        beach.zones.append(zone)
        # Zone id is part of generated sunbed codes
        await db.flush()

        if zone_data.sunbeds:
            specs = normalize_sunbed_layout(zone_data.sunbeds, zone.id)
            operation = "add_explicit"
        else:
            specs = generate_sunbed_grid(zone.rows, zone.cols, zone.id)
            operation = "add"
        zone.sunbeds = [_build_sunbed(spec) for spec in specs]

        await recompute_occupancy(db, beach)
        zone_id = zone.id

    record_zone_operation(operation)
    logger.info("zone_added", beach_id=beach_id, zone_id=zone_id, sunbeds=len(specs))

    beach = await get_beach(db, beach_id)
    await events.emit_zone_update(beach.id, _find_zone(beach, zone_id))
    await events.emit_beach_occupancy(beach)
    return beach


async def update_zone(
    db: AsyncSession,
    beach_id: int,
    zone_id: int,
    zone_data: ZoneUpdate,
) -> tuple[Beach, Zone]:
    """Rename, resize (preserving beds by position) or replace a zone's layout."""
    async with transaction(db):
        beach = await get_beach(db, beach_id)
        zone = _find_zone(beach, zone_id)

        if zone_data.name is not None:
            zone.name = zone_data.name
        resized = False
        if zone_data.rows is not None and zone_data.rows != zone.rows:
            zone.rows = zone_data.rows
            resized = True
        if zone_data.cols is not None and zone_data.cols != zone.cols:
            zone.cols = zone_data.cols
            resized = True

        operation = "rename"
        if zone_data.sunbeds:
            specs = normalize_sunbed_layout(zone_data.sunbeds, zone.id)
            dropped = _unreferenced(zone, specs)
            await _drop_sunbeds(db, zone, dropped)
            beds = await _apply_layout(db, zone, specs)
            operation = "replace"
        elif resized:
            dropped = _outside_grid(zone)
            await _drop_sunbeds(db, zone, dropped)
            beds = _fill_grid(zone)
            operation = "resize"

        if operation != "rename":
            zone.sunbeds = beds
            await db.flush()
            logger.info(
                "zone_sunbeds_rebuilt",
                beach_id=beach_id,
                zone_id=zone_id,
                operation=operation,
                sunbeds=len(beds),
                dropped=len(dropped),
            )

        await recompute_occupancy(db, beach)

    record_zone_operation(operation)

    beach = await get_beach(db, beach_id)
    zone = _find_zone(beach, zone_id)
    await events.emit_zone_update(beach.id, zone)
    await events.emit_beach_occupancy(beach)
    return beach, zone


async def delete_zone(db: AsyncSession, beach_id: int, zone_id: int) -> Beach:
    """Remove a zone and its sunbeds; bookings that pointed at it are detached."""
    async with transaction(db):
        beach = await get_beach(db, beach_id)
        zone = _find_zone(beach, zone_id)

        await _unlink_sunbeds(db, [bed.id for bed in zone.sunbeds])
        await db.execute(
            update(Booking)
            .where(Booking.zone_id == zone.id)
            .values(zone_id=None)
        )
        # delete-orphan cascade removes the zone row and its sunbeds
        beach.zones.remove(zone)
        await db.flush()

        await recompute_occupancy(db, beach)

    record_zone_operation("delete")
    logger.info("zone_deleted", beach_id=beach_id, zone_id=zone_id)

    beach = await get_beach(db, beach_id)
    await events.emit_beach_occupancy(beach)
    return beach


async def update_sunbed_status(
    db: AsyncSession,
    beach_id: int,
    zone_id: int,
    sunbed_id: int,
    status: SunbedStatus,
    actor_id: Optional[str] = None,
) -> tuple[Beach, Zone, Sunbed]:
    """Direct admin edit of one sunbed's status."""
    new_status = SunbedStatus(status).value

    async with transaction(db):
        beach = await get_beach(db, beach_id)
        zone = _find_zone(beach, zone_id)
        bed = _find_sunbed(zone, sunbed_id)

        previous = bed.status
        bed.status = new_status
        await recompute_occupancy(db, beach)

    if previous != new_status:
        record_sunbed_transition(new_status)
    logger.info(
        "sunbed_status_updated",
        beach_id=beach_id,
        zone_id=zone_id,
        sunbed_id=sunbed_id,
        previous=previous,
        status=new_status,
    )

    beach = await get_beach(db, beach_id)
    zone = _find_zone(beach, zone_id)
    bed = _find_sunbed(zone, sunbed_id)
    await events.emit_sunbed_update(beach.id, zone.id, bed, actor_id=actor_id)
    await events.emit_beach_occupancy(beach, actor_id=actor_id)
    return beach, zone, bed
