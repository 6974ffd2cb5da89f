from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from bookit.db.session import Base

FULL_NAME_MAX = 200
EMAIL_MAX = 320
PROMO_CODE_MAX = 40

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_booking_quantity_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_reference: Mapped[str] = mapped_column(String(20), unique=True, index=True)

    experience_id: Mapped[str] = mapped_column(String(36), ForeignKey("experiences.id"), index=True)
    slot_id: Mapped[str] = mapped_column(String(36), ForeignKey("slots.id"), index=True)

    full_name: Mapped[str] = mapped_column(String(FULL_NAME_MAX))
    email: Mapped[str] = mapped_column(String(EMAIL_MAX))
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    # Price snapshot at booking time
    subtotal: Mapped[int] = mapped_column(Integer)
    discount: Mapped[int] = mapped_column(Integer, default=0)
    taxes: Mapped[int] = mapped_column(Integer)
    total: Mapped[int] = mapped_column(Integer)
    promo_code: Mapped[str] = mapped_column(String(PROMO_CODE_MAX), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="confirmed")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
