"""
Booking model: a customer's hold on a set of sunbeds at one beach.

Key design decisions:
- Sunbeds are linked through `booking_sunbeds` (many-to-many); the links are
  a snapshot of what the booking reserved
- Status field allows cancellation without deleting records
- zone_id is optional and is detached (set NULL) when its zone is deleted
"""

import enum

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Table, CheckConstraint, Index
from sqlalchemy.orm import relationship

from beach_admin.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


# Statuses that hold sunbeds
ACTIVE_BOOKING_STATUSES = (
    BookingStatus.PENDING.value,
    BookingStatus.CONFIRMED.value,
    BookingStatus.COMPLETED.value,
)
# Statuses that produce finance ledger entries
BILLABLE_BOOKING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


booking_sunbeds = Table(
    "booking_sunbeds",
    Base.metadata,
    Column("booking_id", Integer, ForeignKey("bookings.id"), primary_key=True),
    Column("sunbed_id", Integer, ForeignKey("sunbeds.id"), primary_key=True, index=True),
)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    beach_id = Column(Integer, ForeignKey("beaches.id"), nullable=False, index=True)
    zone_id = Column(Integer, ForeignKey("zones.id"), nullable=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    check_in_date = Column(DateTime(timezone=True), nullable=False)
    check_out_date = Column(DateTime(timezone=True), nullable=True)
    total_amount = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    notes = Column(String(1000), nullable=True)

    sunbeds = relationship("Sunbed", secondary=booking_sunbeds, order_by="Sunbed.id", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="check_booking_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'paid', 'refunded', 'failed')",
            name="check_booking_payment_status",
        ),
        CheckConstraint("total_amount >= 0", name="check_booking_amount_non_negative"),
        # Listing filters by check-in range
        Index("ix_bookings_check_in", "check_in_date"),
    )

    @property
    def sunbed_ids(self) -> list[int]:
        return [bed.id for bed in self.sunbeds]

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, beach={self.beach_id}, status={self.status})>"
