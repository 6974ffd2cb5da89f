from sqlalchemy import String, Integer, DateTime, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from bookit.db.session import Base

class Experience(Base):
    __tablename__ = "experiences"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_experience_price_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    location: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    price: Mapped[int] = mapped_column(Integer)  # smallest currency unit
    image_url: Mapped[str] = mapped_column(String(512))
    about: Mapped[str] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
