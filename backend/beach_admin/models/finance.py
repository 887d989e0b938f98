"""
Ledger-side records hanging off a beach: finance entries, payouts, alerts.

The core only creates finance entries (booking revenue split) and removes all
three kinds when their beach or booking goes away.
"""

import enum

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey

from beach_admin.db.base import Base, TimestampMixin, utcnow


class FinanceType(str, enum.Enum):
    RENTAL_INCOME = "rental_income"
    SERVICE_FEE = "service_fee"
    EXPENSE = "expense"


class PayoutStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class AlertType(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


class Finance(Base, TimestampMixin):
    __tablename__ = "finances"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(String(500), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True, index=True)
    beach_id = Column(Integer, ForeignKey("beaches.id"), nullable=True, index=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Finance(id={self.id}, type={self.type}, amount={self.amount})>"


class Payout(Base, TimestampMixin):
    __tablename__ = "payouts"

    id = Column(Integer, primary_key=True, index=True)
    beach_id = Column(Integer, ForeignKey("beaches.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default=PayoutStatus.PENDING.value)
    requested_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    processed_date = Column(DateTime(timezone=True), nullable=True)
    processed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(String(1000), nullable=True)


class Alert(Base, TimestampMixin):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False)
    message = Column(String(1000), nullable=False)
    beach_id = Column(Integer, ForeignKey("beaches.id"), nullable=True, index=True)
    is_read = Column(Boolean, nullable=False, default=False)
