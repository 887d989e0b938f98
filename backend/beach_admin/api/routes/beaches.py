"""
Beach endpoints: beach CRUD, zones, sunbed status and admin assignment.
Listing and the occupancy overview are cached in Redis.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from beach_admin.db.session import get_db
from beach_admin.models.beach import BeachStatus
from beach_admin.schemas.beach import (
    BeachCreate,
    BeachUpdate,
    BeachResponse,
    BeachListResponse,
    BeachStatsSummary,
    OccupancyOverviewItem,
    ZoneCreate,
    ZoneUpdate,
    ZoneResponse,
    ZoneUpdateResponse,
    SunbedStatusUpdate,
    AdminAssign,
    MessageResponse,
)
from beach_admin.services import beach_service, zone_service
from beach_admin.services.cache_service import (
    OCCUPANCY_OVERVIEW_KEY,
    make_beach_list_key,
    get_cached,
    set_cached,
    invalidate_beach_cache,
)
from beach_admin.core.exceptions import BadRequestError
from beach_admin.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/beaches", tags=["Beaches"])


@router.get("", response_model=BeachListResponse)
async def list_beaches_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: str = Query("", max_length=255),
    beach_status: Optional[BeachStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """
    List beaches, newest first.
    Results are cached in Redis; any beach mutation invalidates them.
    """
    status_value = beach_status.value if beach_status else None
    key = make_beach_list_key(page, page_size, search, status_value)

    cached = await get_cached(key)
    if cached:
        logger.info("beaches_list_cache_hit", page=page)
        cached["cached"] = True
        return BeachListResponse(**cached)

    beaches, total = await beach_service.list_beaches(db, page, page_size, search, status_value)

    response_data = {
        "beaches": [BeachResponse.model_validate(b).model_dump() for b in beaches],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }
    await set_cached(key, response_data)

    return BeachListResponse(**response_data)


@router.post("", response_model=BeachResponse, status_code=status.HTTP_201_CREATED)
async def create_beach_endpoint(
    beach_data: BeachCreate,
    db: AsyncSession = Depends(get_db),
):
    beach = await beach_service.create_beach(db, beach_data)
    await invalidate_beach_cache()
    return beach


@router.get("/occupancy-overview", response_model=list[OccupancyOverviewItem])
async def occupancy_overview_endpoint(db: AsyncSession = Depends(get_db)):
    """Occupancy of every beach, for the dashboard overview."""
    cached = await get_cached(OCCUPANCY_OVERVIEW_KEY)
    if cached is not None:
        return cached

    overview = await beach_service.get_occupancy_overview(db)
    await set_cached(OCCUPANCY_OVERVIEW_KEY, overview)
    return overview


@router.get("/stats/summary", response_model=BeachStatsSummary)
async def stats_summary_endpoint(db: AsyncSession = Depends(get_db)):
    return await beach_service.get_stats_summary(db)


@router.get("/{beach_id}", response_model=BeachResponse)
async def get_beach_endpoint(
    beach_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get one beach with its full sunbed grid. Not cached (live statuses)."""
    return await beach_service.get_beach(db, beach_id)


@router.put("/{beach_id}", response_model=BeachResponse)
async def update_beach_endpoint(
    beach_id: int,
    beach_data: BeachUpdate,
    db: AsyncSession = Depends(get_db),
):
    beach = await beach_service.update_beach(db, beach_id, beach_data)
    await invalidate_beach_cache()
    return beach


@router.delete("/{beach_id}", response_model=MessageResponse)
async def delete_beach_endpoint(
    beach_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a beach with its zones, sunbeds, bookings and ledger rows."""
    await beach_service.delete_beach(db, beach_id)
    await invalidate_beach_cache()
    return MessageResponse(message="Beach deleted successfully")


# ---------- Zones and sunbeds ----------

@router.post("/{beach_id}/zones", response_model=BeachResponse, status_code=status.HTTP_201_CREATED)
async def add_zone_endpoint(
    beach_id: int,
    zone_data: ZoneCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Add a zone. An explicit `sunbeds` list is stored as given; otherwise a
    rows x cols grid of available sunbeds is generated.
    """
    beach = await zone_service.add_zone(db, beach_id, zone_data)
    await invalidate_beach_cache()
    return beach


@router.put("/{beach_id}/zones/{zone_id}", response_model=ZoneUpdateResponse)
async def update_zone_endpoint(
    beach_id: int,
    zone_id: int,
    zone_data: ZoneUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Rename, resize or relayout a zone. Resizing keeps sunbeds whose
    position is still inside the grid; an explicit `sunbeds` list replaces
    the layout.
    """
    beach, zone = await zone_service.update_zone(db, beach_id, zone_id, zone_data)
    await invalidate_beach_cache()
    return ZoneUpdateResponse(
        beach=BeachResponse.model_validate(beach),
        zone=ZoneResponse.model_validate(zone),
    )


@router.delete("/{beach_id}/zones/{zone_id}", response_model=BeachResponse)
async def delete_zone_endpoint(
    beach_id: int,
    zone_id: int,
    db: AsyncSession = Depends(get_db),
):
    beach = await zone_service.delete_zone(db, beach_id, zone_id)
    await invalidate_beach_cache()
    return beach


@router.put("/{beach_id}/zones/{zone_id}/sunbeds/{sunbed_id}", response_model=ZoneUpdateResponse)
async def update_sunbed_endpoint(
    beach_id: int,
    zone_id: int,
    sunbed_id: int,
    sunbed_data: SunbedStatusUpdate,
    x_socket_id: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Set one sunbed's status. `X-Socket-Id` identifies the dashboard that made
    the change so it can skip its own echo.
    """
    beach, zone, _ = await zone_service.update_sunbed_status(
        db, beach_id, zone_id, sunbed_id, sunbed_data.status, actor_id=x_socket_id
    )
    await invalidate_beach_cache()
    return ZoneUpdateResponse(
        beach=BeachResponse.model_validate(beach),
        zone=ZoneResponse.model_validate(zone),
    )


# ---------- Admins ----------

@router.post("/{beach_id}/admins", response_model=BeachResponse)
async def assign_admin_endpoint(
    beach_id: int,
    assignment: AdminAssign,
    db: AsyncSession = Depends(get_db),
):
    """Assign one (`user_id`) or several (`user_ids`) admins to a beach."""
    if assignment.user_ids is not None:
        beach = await beach_service.assign_admins(db, beach_id, assignment.user_ids)
    elif assignment.user_id is not None:
        beach = await beach_service.assign_admin(db, beach_id, assignment.user_id)
    else:
        raise BadRequestError("user_id or user_ids is required")

    await invalidate_beach_cache()
    return beach


@router.delete("/{beach_id}/admins/{user_id}", response_model=BeachResponse)
async def remove_admin_endpoint(
    beach_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    beach = await beach_service.remove_admin(db, beach_id, user_id)
    await invalidate_beach_cache()
    return beach
