"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "experiences",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(length=512), nullable=False),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("price > 0", name="ck_experience_price_positive"),
    )

    op.create_table(
        "slots",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("experience_id", sa.String(length=36), sa.ForeignKey("experiences.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=40), nullable=False),
        sa.Column("total_spots", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("available_spots", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("available_spots >= 0", name="ck_slot_available_non_negative"),
        sa.CheckConstraint("available_spots <= total_spots", name="ck_slot_available_le_total"),
    )
    op.create_index("ix_slots_experience_id", "slots", ["experience_id"], unique=False)
    op.create_index("ix_slots_date", "slots", ["date"], unique=False)

    op.create_table(
        "promo_codes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=40), nullable=False),
        sa.Column("discount_type", sa.String(length=12), nullable=False),
        sa.Column("discount_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("discount_type IN ('percentage', 'fixed')", name="ck_promo_discount_type"),
        sa.CheckConstraint("discount_value >= 0", name="ck_promo_discount_value_non_negative"),
    )
    op.create_index("ix_promo_codes_code", "promo_codes", ["code"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_reference", sa.String(length=20), nullable=False),
        sa.Column("experience_id", sa.String(length=36), sa.ForeignKey("experiences.id"), nullable=False),
        sa.Column("slot_id", sa.String(length=36), sa.ForeignKey("slots.id"), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("subtotal", sa.Integer(), nullable=False),
        sa.Column("discount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("taxes", sa.Integer(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("promo_code", sa.String(length=40), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="confirmed"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity >= 1", name="ck_booking_quantity_positive"),
    )
    op.create_index("ix_bookings_booking_reference", "bookings", ["booking_reference"], unique=True)
    op.create_index("ix_bookings_experience_id", "bookings", ["experience_id"], unique=False)
    op.create_index("ix_bookings_slot_id", "bookings", ["slot_id"], unique=False)


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("promo_codes")
    op.drop_table("slots")
    op.drop_table("experiences")
