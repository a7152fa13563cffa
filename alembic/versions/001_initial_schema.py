"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2024-03-01

Creates all initial tables for StayFinder:
- Users, host profiles and favorites
- Listings and their blocked-date calendar
- Bookings and booking messages
- Reviews
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="guest"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("avatar_url", sa.Text),
        sa.Column("phone", sa.String(30)),
        sa.Column("bio", sa.String(500)),
        sa.Column("is_verified", sa.Boolean, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("preferred_language", sa.String(10), server_default="en"),
        sa.Column("preferred_currency", sa.String(3), server_default="USD"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "host_profiles",
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("host_since", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("response_rate", sa.Integer, server_default="0"),
        sa.Column("response_time", sa.String(30), server_default="within a day"),
        sa.Column("superhost", sa.Boolean, server_default=sa.false()),
    )

    # ==================== LISTINGS ====================
    op.create_table(
        "listings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("host_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("property_type", sa.String(30), nullable=False, index=True),
        sa.Column("room_type", sa.String(20), nullable=False),
        sa.Column("amenities", sa.JSON),
        sa.Column("images", sa.JSON),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False, index=True),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("zip_code", sa.String(20), nullable=False),
        sa.Column("latitude", sa.Numeric(10, 8)),
        sa.Column("longitude", sa.Numeric(11, 8)),
        sa.Column("max_guests", sa.Integer, nullable=False, server_default="1"),
        sa.Column("bedrooms", sa.Integer, server_default="0"),
        sa.Column("beds", sa.Integer, server_default="1"),
        sa.Column("bathrooms", sa.Numeric(3, 1), server_default="1"),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), server_default="USD"),
        sa.Column("cleaning_fee", sa.Numeric(10, 2), server_default="0"),
        sa.Column("weekly_discount", sa.Numeric(5, 2), server_default="0"),
        sa.Column("monthly_discount", sa.Numeric(5, 2), server_default="0"),
        sa.Column("min_nights", sa.Integer, server_default="1"),
        sa.Column("max_nights", sa.Integer, server_default="365"),
        sa.Column("instant_book", sa.Boolean, server_default=sa.false()),
        sa.Column("check_in_time", sa.String(5), server_default="15:00"),
        sa.Column("check_out_time", sa.String(5), server_default="11:00"),
        sa.Column("cancellation_policy", sa.String(20), server_default="moderate"),
        sa.Column("status", sa.String(20), server_default="draft", index=True),
        sa.Column("view_count", sa.Integer, server_default="0"),
        sa.Column("average_rating", sa.Numeric(2, 1), server_default="0"),
        sa.Column("review_count", sa.Integer, server_default="0"),
        sa.Column("total_bookings", sa.Integer, server_default="0"),
        sa.Column("availability_version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "user_favorites",
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("listing_id", sa.Uuid, sa.ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("booking_number", sa.String(20), unique=True, nullable=False, index=True),
        sa.Column("listing_id", sa.Uuid, sa.ForeignKey("listings.id"), nullable=False, index=True),
        sa.Column("guest_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("host_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("check_in", sa.Date, nullable=False, index=True),
        sa.Column("check_out", sa.Date, nullable=False, index=True),
        sa.Column("nights", sa.Integer, nullable=False),
        sa.Column("adults", sa.Integer, server_default="1"),
        sa.Column("children", sa.Integer, server_default="0"),
        sa.Column("infants", sa.Integer, server_default="0"),
        sa.Column("pets", sa.Integer, server_default="0"),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(10, 2), server_default="0"),
        sa.Column("service_fee", sa.Numeric(10, 2), server_default="0"),
        sa.Column("taxes", sa.Numeric(10, 2), server_default="0"),
        sa.Column("weekly_discount", sa.Numeric(10, 2), server_default="0"),
        sa.Column("monthly_discount", sa.Numeric(10, 2), server_default="0"),
        sa.Column("coupon_discount", sa.Numeric(10, 2), server_default="0"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), server_default="USD"),
        sa.Column("payment_method", sa.String(20), server_default="credit_card"),
        sa.Column("payment_status", sa.String(20), server_default="pending"),
        sa.Column("transaction_id", sa.String(100)),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("refunded_at", sa.DateTime(timezone=True)),
        sa.Column("refund_amount", sa.Numeric(10, 2), server_default="0"),
        sa.Column("refund_reason", sa.Text),
        sa.Column("status", sa.String(20), server_default="pending", index=True),
        sa.Column("cancelled_by", sa.Uuid, sa.ForeignKey("users.id")),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("refund_policy", sa.String(20), server_default="moderate"),
        sa.Column("cancellation_refund_amount", sa.Numeric(10, 2), server_default="0"),
        sa.Column("special_requests", sa.String(500)),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("checked_in_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "listing_blocked_dates",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("listing_id", sa.Uuid, sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("start_date", sa.Date, nullable=False, index=True),
        sa.Column("end_date", sa.Date, nullable=False, index=True),
        sa.Column("reason", sa.String(20), server_default="blocked"),
        sa.Column("booking_id", sa.Uuid, sa.ForeignKey("bookings.id", ondelete="SET NULL")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "booking_messages",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("booking_id", sa.Uuid, sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("sender_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("message", sa.String(1000), nullable=False),
        sa.Column("is_read", sa.Boolean, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )

    # ==================== REVIEWS ====================
    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("listing_id", sa.Uuid, sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("guest_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("booking_id", sa.Uuid, sa.ForeignKey("bookings.id")),
        sa.Column("overall_rating", sa.Integer, nullable=False),
        sa.Column("cleanliness_rating", sa.Integer),
        sa.Column("accuracy_rating", sa.Integer),
        sa.Column("communication_rating", sa.Integer),
        sa.Column("location_rating", sa.Integer),
        sa.Column("checkin_rating", sa.Integer),
        sa.Column("value_rating", sa.Integer),
        sa.Column("comment", sa.Text),
        sa.Column("host_response", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("listing_id", "guest_id", name="uq_review_listing_guest"),
    )


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_table("reviews")
    op.drop_table("booking_messages")
    op.drop_table("listing_blocked_dates")
    op.drop_table("bookings")
    op.drop_table("user_favorites")
    op.drop_table("listings")
    op.drop_table("host_profiles")
    op.drop_table("users")
