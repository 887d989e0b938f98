"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from beach_admin.models.booking import BookingStatus, PaymentStatus


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BookingCreate(BaseModel):
    beach_id: int
    zone_id: Optional[int] = None
    sunbed_ids: list[int] = Field(default_factory=list, max_length=500)
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=50)
    check_in_date: datetime
    check_out_date: Optional[datetime] = None
    total_amount: float = Field(0, ge=0)
    status: BookingStatus = BookingStatus.CONFIRMED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("check_in_date", "check_out_date")
    @classmethod
    def normalize_dates(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out_date is not None and self.check_out_date < self.check_in_date:
            raise ValueError("check_out_date must not be before check_in_date")
        return self


class BookingUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=50)
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    total_amount: Optional[float] = Field(None, ge=0)
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("check_in_date", "check_out_date")
    @classmethod
    def normalize_dates(cls, value):
        return as_utc(value)


class BookingResponse(BaseModel):
    id: int
    beach_id: int
    zone_id: Optional[int]
    sunbed_ids: list[int]
    customer_name: str
    customer_email: Optional[str]
    customer_phone: Optional[str]
    check_in_date: datetime
    check_out_date: Optional[datetime]
    total_amount: float
    status: str
    payment_status: str
    notes: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingStats(BaseModel):
    total: int
    active: int
    cancelled: int
    upcoming: int
