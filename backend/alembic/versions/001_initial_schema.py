"""Initial schema: users, beaches, zones, sunbeds, bookings and ledger tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'admin'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Beaches table
    op.create_table(
        "beaches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("price_per_day", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("services", sa.JSON(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("total_capacity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_bookings", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("occupancy_rate", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("occupancy_rate >= 0 AND occupancy_rate <= 100", name="check_occupancy_rate_range"),
        sa.CheckConstraint("total_capacity >= 0", name="check_total_capacity_non_negative"),
        sa.CheckConstraint("status IN ('active', 'inactive', 'maintenance')", name="check_beach_status"),
    )
    op.create_index("ix_beaches_id", "beaches", ["id"])
    op.create_index("ix_beaches_name", "beaches", ["name"])

    # Admin assignment: user_id unique, one beach per admin
    op.create_table(
        "beach_admins",
        sa.Column("beach_id", sa.Integer(), sa.ForeignKey("beaches.id"), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
        sa.UniqueConstraint("user_id", name="uq_beach_admins_user_id"),
    )

    # Zones table
    op.create_table(
        "zones",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("beach_id", sa.Integer(), sa.ForeignKey("beaches.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("rows", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("cols", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint('"rows" >= 0', name="check_zone_rows_non_negative"),
        sa.CheckConstraint("cols >= 0", name="check_zone_cols_non_negative"),
    )
    op.create_index("ix_zones_id", "zones", ["id"])
    op.create_index("ix_zones_beach_id", "zones", ["beach_id"])

    # Sunbeds table
    op.create_table(
        "sunbeds",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("zone_id", sa.Integer(), sa.ForeignKey("zones.id"), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("row", sa.Integer(), nullable=False),
        sa.Column("col", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'available'")),
        sa.Column("price_modifier", sa.Float(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('available', 'reserved', 'unavailable', 'selected')",
            name="check_sunbed_status",
        ),
        sa.CheckConstraint('"row" >= 1 AND col >= 1', name="check_sunbed_position_positive"),
        sa.UniqueConstraint("zone_id", "code", name="uq_sunbed_zone_code"),
    )
    op.create_index("ix_sunbeds_id", "sunbeds", ["id"])
    # Occupancy counts group a beach's beds by status through the zone
    op.create_index("ix_sunbeds_zone_position", "sunbeds", ["zone_id", "row", "col"])

    # Bookings table
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("beach_id", sa.Integer(), sa.ForeignKey("beaches.id"), nullable=False),
        sa.Column("zone_id", sa.Integer(), sa.ForeignKey("zones.id"), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("check_in_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("check_out_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_amount", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'confirmed'")),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("notes", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="check_booking_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'paid', 'refunded', 'failed')",
            name="check_booking_payment_status",
        ),
        sa.CheckConstraint("total_amount >= 0", name="check_booking_amount_non_negative"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_beach_id", "bookings", ["beach_id"])
    op.create_index("ix_bookings_check_in", "bookings", ["check_in_date"])

    op.create_table(
        "booking_sunbeds",
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), primary_key=True),
        sa.Column("sunbed_id", sa.Integer(), sa.ForeignKey("sunbeds.id"), primary_key=True),
    )
    # Release checks look up other bookings holding a sunbed
    op.create_index("ix_booking_sunbeds_sunbed_id", "booking_sunbeds", ["sunbed_id"])

    # Ledger tables
    op.create_table(
        "finances",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=True),
        sa.Column("beach_id", sa.Integer(), sa.ForeignKey("beaches.id"), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_finances_id", "finances", ["id"])
    op.create_index("ix_finances_booking_id", "finances", ["booking_id"])
    op.create_index("ix_finances_beach_id", "finances", ["beach_id"])

    op.create_table(
        "payouts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("beach_id", sa.Integer(), sa.ForeignKey("beaches.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("requested_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("processed_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("notes", sa.String(1000), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_payouts_id", "payouts", ["id"])
    op.create_index("ix_payouts_beach_id", "payouts", ["beach_id"])

    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("message", sa.String(1000), nullable=False),
        sa.Column("beach_id", sa.Integer(), sa.ForeignKey("beaches.id"), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_alerts_id", "alerts", ["id"])
    op.create_index("ix_alerts_beach_id", "alerts", ["beach_id"])


def downgrade() -> None:
    op.drop_table("alerts")
    op.drop_table("payouts")
    op.drop_table("finances")
    op.drop_table("booking_sunbeds")
    op.drop_table("bookings")
    op.drop_table("sunbeds")
    op.drop_table("zones")
    op.drop_table("beach_admins")
    op.drop_table("beaches")
    op.drop_table("users")
