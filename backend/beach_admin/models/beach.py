"""
Beach model: the aggregate root for zones, sunbeds and admin assignments.

Key design decisions:
- `total_capacity`, `current_bookings` and `occupancy_rate` are denormalized
  and only ever written by the occupancy calculator
- `beach_admins.user_id` is unique, so an admin administers at most one beach
- Beach deletion is an explicit ordered routine of bulk deletes; the zones
  cascade only covers zones removed from a loaded beach
"""

import enum

from sqlalchemy import Column, Integer, String, Float, ForeignKey, Table, JSON, CheckConstraint, Index
from sqlalchemy.orm import relationship

from beach_admin.db.base import Base, TimestampMixin


class BeachStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


beach_admins = Table(
    "beach_admins",
    Base.metadata,
    Column("beach_id", Integer, ForeignKey("beaches.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True, unique=True),
)


class Beach(Base, TimestampMixin):
    __tablename__ = "beaches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    status = Column(String(20), nullable=False, default=BeachStatus.ACTIVE.value)
    price_per_day = Column(Float, nullable=False, default=0)
    amenities = Column(JSON, nullable=False, default=list)
    services = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)

    # Derived from sunbed rows
    total_capacity = Column(Integer, nullable=False, default=0)
    current_bookings = Column(Integer, nullable=False, default=0)
    occupancy_rate = Column(Integer, nullable=False, default=0)

    zones = relationship(
        "Zone",
        back_populates="beach",
        cascade="save-update, merge, delete, delete-orphan",
        order_by="Zone.id",
        lazy="selectin",
    )
    admins = relationship("User", secondary=beach_admins, order_by="User.id", lazy="selectin")

    __table_args__ = (
        CheckConstraint("occupancy_rate >= 0 AND occupancy_rate <= 100", name="check_occupancy_rate_range"),
        CheckConstraint("total_capacity >= 0", name="check_total_capacity_non_negative"),
        CheckConstraint("status IN ('active', 'inactive', 'maintenance')", name="check_beach_status"),
        Index("ix_beaches_name", "name"),
    )

    @property
    def sunbeds(self):
        return [bed for zone in self.zones for bed in zone.sunbeds]

    def __repr__(self) -> str:
        return f"<Beach(id={self.id}, name={self.name}, occupancy={self.occupancy_rate}%)>"
