"""
Change notification publisher.

Services call these helpers after their transaction has committed. Each
event is published to the Redis channel `EVENTS_CHANNEL` as

    {"event": "beach:occupancy", "room": "beach:12", "data": {...}}

where `room` is the beach room the socket gateway should fan the event out
to, or null for a broadcast to every connected dashboard.

Delivery is best effort: a missing or failing Redis never fails the request
that produced the change. Failures are logged and counted.
"""

import json
from typing import Iterable, Optional

from beach_admin.core.config import get_settings
from beach_admin.core.logging import get_logger
from beach_admin.core.metrics import notification_errors
from beach_admin.services.cache_service import get_redis

logger = get_logger(__name__)
settings = get_settings()

BEACH_OCCUPANCY = "beach:occupancy"
ZONE_UPDATE = "zone:update"
SUNBED_UPDATE = "sunbed:update"
BOOKING_CREATED = "booking:created"
BOOKING_CANCELLED = "booking:cancelled"


def beach_room(beach_id: int) -> str:
    return f"beach:{beach_id}"


async def publish(event: str, data: dict, room: Optional[str] = None) -> None:
    """Publish one event envelope; never raises."""
    try:
        client = await get_redis()
        if client is None:
            return
        message = json.dumps({"event": event, "room": room, "data": data}, default=str)
        await client.publish(settings.EVENTS_CHANNEL, message)
        logger.debug("notification_published", notification=event, room=room)
    except Exception as e:
        notification_errors.inc()
        logger.warning("notification_publish_failed", notification=event, error=str(e))


def sunbed_payload(bed) -> dict:
    return {"id": bed.id, "code": bed.code, "row": bed.row, "col": bed.col, "status": bed.status}


def zone_payload(zone) -> dict:
    return {
        "id": zone.id,
        "name": zone.name,
        "rows": zone.rows,
        "cols": zone.cols,
        "sunbeds": [sunbed_payload(bed) for bed in zone.sunbeds],
    }


async def emit_beach_occupancy(beach, actor_id: Optional[str] = None) -> None:
    """Occupancy goes to the beach room and to the global overview."""
    data = {
        "beach_id": beach.id,
        "occupancy_rate": beach.occupancy_rate,
        "current_bookings": beach.current_bookings,
        "capacity": beach.total_capacity,
        "status": beach.status,
    }
    if actor_id:
        data["actor_id"] = actor_id
    await publish(BEACH_OCCUPANCY, data, room=beach_room(beach.id))
    await publish(BEACH_OCCUPANCY, data)


async def emit_zone_update(beach_id: int, zone) -> None:
    await publish(ZONE_UPDATE, {"beach_id": beach_id, "zone": zone_payload(zone)}, room=beach_room(beach_id))


async def emit_sunbed_update(beach_id: int, zone_id: int, bed, actor_id: Optional[str] = None) -> None:
    data = {"beach_id": beach_id, "zone_id": zone_id, "sunbed": sunbed_payload(bed)}
    if actor_id:
        data["actor_id"] = actor_id
    await publish(SUNBED_UPDATE, data, room=beach_room(beach_id))


async def emit_booking_created(booking) -> None:
    data = {
        "booking_id": booking.id,
        "beach_id": booking.beach_id,
        "zone_id": booking.zone_id,
        "sunbeds": booking.sunbed_ids,
        "status": booking.status,
    }
    await publish(BOOKING_CREATED, data, room=beach_room(booking.beach_id))


async def emit_booking_cancelled(booking, freed_sunbeds: Iterable[int]) -> None:
    data = {
        "booking_id": booking.id,
        "beach_id": booking.beach_id,
        "freed_sunbeds": list(freed_sunbeds),
    }
    await publish(BOOKING_CANCELLED, data, room=beach_room(booking.beach_id))
