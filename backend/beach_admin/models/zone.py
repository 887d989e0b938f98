"""
Zone and Sunbed models.

A zone is a rows x cols grid owned by one beach; each sunbed sits at a
1-based (row, col) position inside exactly one zone. Sunbeds are owned by
their zone: removing a bed from `Zone.sunbeds` deletes its row.
"""

import enum

from sqlalchemy import Column, Integer, String, Float, ForeignKey, Index, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from beach_admin.db.base import Base, TimestampMixin


class SunbedStatus(str, enum.Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    UNAVAILABLE = "unavailable"
    SELECTED = "selected"  # transient UI selection, counts as occupied


# Beds that count toward the occupancy denominator / numerator
ELIGIBLE_STATUSES = frozenset({SunbedStatus.AVAILABLE.value, SunbedStatus.RESERVED.value, SunbedStatus.SELECTED.value})
OCCUPIED_STATUSES = frozenset({SunbedStatus.RESERVED.value, SunbedStatus.SELECTED.value})
# Beds a new booking may take
BOOKABLE_STATUSES = frozenset({SunbedStatus.AVAILABLE.value, SunbedStatus.SELECTED.value})


class Zone(Base, TimestampMixin):
    __tablename__ = "zones"

    id = Column(Integer, primary_key=True, index=True)
    beach_id = Column(Integer, ForeignKey("beaches.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    rows = Column(Integer, nullable=False, default=0)
    cols = Column(Integer, nullable=False, default=0)

    beach = relationship("Beach", back_populates="zones")
    sunbeds = relationship(
        "Sunbed",
        back_populates="zone",
        cascade="all, delete-orphan",
        order_by="[Sunbed.row, Sunbed.col, Sunbed.id]",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint('"rows" >= 0', name="check_zone_rows_non_negative"),
        CheckConstraint("cols >= 0", name="check_zone_cols_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Zone(id={self.id}, beach={self.beach_id}, name={self.name}, grid={self.rows}x{self.cols})>"


class Sunbed(Base, TimestampMixin):
    __tablename__ = "sunbeds"

    id = Column(Integer, primary_key=True, index=True)
    zone_id = Column(Integer, ForeignKey("zones.id"), nullable=False)
    code = Column(String(50), nullable=False)
    row = Column(Integer, nullable=False)
    col = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=SunbedStatus.AVAILABLE.value)
    price_modifier = Column(Float, nullable=False, default=0)

    zone = relationship("Zone", back_populates="sunbeds")

    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'reserved', 'unavailable', 'selected')",
            name="check_sunbed_status",
        ),
        CheckConstraint('"row" >= 1 AND col >= 1', name="check_sunbed_position_positive"),
        UniqueConstraint("zone_id", "code", name="uq_sunbed_zone_code"),
        # Grid lookups during resize go by (zone, row, col)
        Index("ix_sunbeds_zone_position", "zone_id", "row", "col"),
    )

    @property
    def position(self) -> tuple[int, int]:
        return self.row, self.col

    def __repr__(self) -> str:
        return f"<Sunbed(id={self.id}, zone={self.zone_id}, code={self.code}, status={self.status})>"
