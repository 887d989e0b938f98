"""
Occupancy calculator.

OCCUPANCY MODEL
===============

A beach's `total_capacity`, `current_bookings` and `occupancy_rate` are a
derived view of its sunbed rows. They are never adjusted incrementally:
every mutation that touches sunbeds (zone add/resize/delete, status edit,
booking create/cancel/delete) ends with `recompute_occupancy()` inside the
same transaction, so the derived fields commit together with the rows they
describe. Concurrent writers can interleave; the last committer wins, which
is fine because the value it writes was computed from current rows.

Counting rules:
  - capacity  = all sunbeds of the beach (any status)
  - eligible  = available + reserved + selected  (unavailable beds excluded)
  - occupied  = reserved + selected
  - rate      = round_half_up(100 * occupied / eligible), 0 if nothing eligible

A beach with no sunbeds at all keeps its manually configured capacity, so
beaches managed without zone granularity are not zeroed out.
"""

from dataclasses import dataclass
from typing import Mapping

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from beach_admin.models.beach import Beach
from beach_admin.models.zone import Zone, Sunbed, ELIGIBLE_STATUSES, OCCUPIED_STATUSES
from beach_admin.core.metrics import record_occupancy
from beach_admin.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OccupancySnapshot:
    total_capacity: int
    current_bookings: int
    occupancy_rate: int


def percentage(part: int, whole: int) -> int:
    """Integer percentage rounded half up (33.5 -> 34), 0 for an empty whole."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def calculate_occupancy(status_counts: Mapping[str, int], current_capacity: int = 0) -> OccupancySnapshot:
    total = sum(status_counts.values())
    eligible = sum(count for status, count in status_counts.items() if status in ELIGIBLE_STATUSES)
    occupied = sum(count for status, count in status_counts.items() if status in OCCUPIED_STATUSES)

    if eligible == 0:
        occupied = 0

    return OccupancySnapshot(
        total_capacity=total if total > 0 else current_capacity,
        current_bookings=occupied,
        occupancy_rate=percentage(occupied, eligible),
    )


async def count_sunbeds_by_status(db: AsyncSession, beach_id: int) -> dict[str, int]:
    """Sunbed counts per status across every zone of the beach."""
    result = await db.execute(
        select(Sunbed.status, func.count(Sunbed.id))
        .join(Zone, Sunbed.zone_id == Zone.id)
        .where(Zone.beach_id == beach_id)
        .group_by(Sunbed.status)
    )
    return {status: count for status, count in result.all()}


async def recompute_occupancy(db: AsyncSession, beach: Beach) -> OccupancySnapshot:
    """
    Recompute the beach's derived capacity/occupancy from its sunbed rows.

    Pending changes are flushed by the count query, so call this after the
    sunbed mutation and before the transaction commits. Any failure
    propagates and aborts the caller's transaction.
    """
    counts = await count_sunbeds_by_status(db, beach.id)
    snapshot = calculate_occupancy(counts, beach.total_capacity or 0)

    beach.total_capacity = snapshot.total_capacity
    beach.current_bookings = snapshot.current_bookings
    beach.occupancy_rate = snapshot.occupancy_rate
    await db.flush()

    record_occupancy(beach.id, snapshot.occupancy_rate)
    logger.debug(
        "occupancy_recomputed",
        beach_id=beach.id,
        capacity=snapshot.total_capacity,
        occupied=snapshot.current_bookings,
        rate=snapshot.occupancy_rate,
    )
    return snapshot
