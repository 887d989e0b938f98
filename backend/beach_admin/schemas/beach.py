"""
Pydantic schemas for beaches, zones, sunbeds and admin assignment.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from beach_admin.models.beach import BeachStatus
from beach_admin.models.zone import SunbedStatus

MAX_GRID_SIDE = 200


class SunbedInput(BaseModel):
    """One entry of an explicit sunbed layout; missing fields get grid defaults."""

    id: Optional[int] = None
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    row: int = Field(..., ge=1, le=MAX_GRID_SIDE)
    col: int = Field(..., ge=1, le=MAX_GRID_SIDE)
    status: SunbedStatus = SunbedStatus.AVAILABLE
    price_modifier: float = 0


class ZoneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    rows: int = Field(0, ge=0, le=MAX_GRID_SIDE)
    cols: int = Field(0, ge=0, le=MAX_GRID_SIDE)
    sunbeds: Optional[list[SunbedInput]] = None


class ZoneUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    rows: Optional[int] = Field(None, ge=0, le=MAX_GRID_SIDE)
    cols: Optional[int] = Field(None, ge=0, le=MAX_GRID_SIDE)
    sunbeds: Optional[list[SunbedInput]] = None


class SunbedStatusUpdate(BaseModel):
    status: SunbedStatus


class SunbedResponse(BaseModel):
    id: int
    code: str
    row: int
    col: int
    status: str
    price_modifier: float

    model_config = {"from_attributes": True}


class ZoneResponse(BaseModel):
    id: int
    name: str
    rows: int
    cols: int
    sunbeds: list[SunbedResponse]

    model_config = {"from_attributes": True}


class AdminResponse(BaseModel):
    id: int
    email: str
    name: str
    role: str

    model_config = {"from_attributes": True}


class BeachCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    status: BeachStatus = BeachStatus.ACTIVE
    price_per_day: float = Field(0, ge=0)
    amenities: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    # Manual capacity for beaches managed without zones; replaced once sunbeds exist
    total_capacity: int = Field(0, ge=0)


class BeachUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[BeachStatus] = None
    price_per_day: Optional[float] = Field(None, ge=0)
    amenities: Optional[list[str]] = None
    services: Optional[list[str]] = None
    images: Optional[list[str]] = None
    total_capacity: Optional[int] = Field(None, ge=0)


class BeachResponse(BaseModel):
    id: int
    name: str
    location: str
    description: Optional[str]
    status: str
    price_per_day: float
    amenities: list[str]
    services: list[str]
    images: list[str]
    total_capacity: int
    current_bookings: int
    occupancy_rate: int
    zones: list[ZoneResponse]
    admins: list[AdminResponse]
    created_at: datetime

    model_config = {"from_attributes": True}


class BeachListResponse(BaseModel):
    beaches: list[BeachResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False


class ZoneUpdateResponse(BaseModel):
    beach: BeachResponse
    zone: ZoneResponse


class OccupancyOverviewItem(BaseModel):
    beach_id: int
    name: str
    occupancy_rate: int
    capacity: int
    current_bookings: int


class BeachStatsSummary(BaseModel):
    total_beaches: int
    active_admins: int


class AdminAssign(BaseModel):
    user_id: Optional[int] = None
    user_ids: Optional[list[int]] = None


class MessageResponse(BaseModel):
    message: str
