from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
import datetime as dt
from datetime import datetime, timezone
from bookit.db.session import Base

class Slot(Base):
    __tablename__ = "slots"
    __table_args__ = (
        CheckConstraint("available_spots >= 0", name="ck_slot_available_non_negative"),
        CheckConstraint("available_spots <= total_spots", name="ck_slot_available_le_total"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    experience_id: Mapped[str] = mapped_column(String(36), ForeignKey("experiences.id"), index=True)

    date: Mapped[dt.date] = mapped_column(Date, index=True)
    time: Mapped[str] = mapped_column(String(40))  # display label, e.g. "07:00 am - 1pm"
    total_spots: Mapped[int] = mapped_column(Integer, default=10)
    available_spots: Mapped[int] = mapped_column(Integer, default=10)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
