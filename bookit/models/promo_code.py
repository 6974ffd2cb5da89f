from decimal import Decimal
from sqlalchemy import String, Numeric, Boolean, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from bookit.db.session import Base

PERCENTAGE = "percentage"
FIXED = "fixed"
DISCOUNT_TYPES = (PERCENTAGE, FIXED)

class PromoCode(Base):
    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint("discount_type IN ('percentage', 'fixed')", name="ck_promo_discount_type"),
        CheckConstraint("discount_value >= 0", name="ck_promo_discount_value_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(40), unique=True, index=True)  # stored uppercased
    discount_type: Mapped[str] = mapped_column(String(12))
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    active: Mapped[bool] = mapped_column(Boolean, default=True)  # soft delete
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
