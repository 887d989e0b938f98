from beach_admin.schemas.beach import (
    SunbedInput, ZoneCreate, ZoneUpdate, SunbedStatusUpdate,
    BeachCreate, BeachUpdate, BeachResponse, BeachListResponse,
    ZoneResponse, ZoneUpdateResponse, OccupancyOverviewItem, BeachStatsSummary,
    AdminAssign, MessageResponse,
)
from beach_admin.schemas.booking import (
    BookingCreate, BookingUpdate, BookingResponse, BookingListResponse, BookingStats,
)

__all__ = [
    "SunbedInput", "ZoneCreate", "ZoneUpdate", "SunbedStatusUpdate",
    "BeachCreate", "BeachUpdate", "BeachResponse", "BeachListResponse",
    "ZoneResponse", "ZoneUpdateResponse", "OccupancyOverviewItem", "BeachStatsSummary",
    "AdminAssign", "MessageResponse",
    "BookingCreate", "BookingUpdate", "BookingResponse", "BookingListResponse", "BookingStats",
]
