from datetime import date, timedelta

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from bookit.core.config import settings
from bookit.core.errors import NotFoundError
from bookit.models.experience import Experience
from bookit.models.slot import Slot


def get_experience_by_id(db: Session, experience_id: str) -> Experience | None:
    return db.get(Experience, experience_id)


def list_experiences(db: Session, search: str | None = None) -> list[Experience]:
    stmt = select(Experience)
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        stmt = stmt.where(
            or_(
                Experience.title.ilike(pattern),
                Experience.location.ilike(pattern),
                Experience.description.ilike(pattern),
            )
        )
    return list(db.execute(stmt.order_by(Experience.created_at.asc(), Experience.id.asc())).scalars())


def list_upcoming_slots(db: Session, experience_id: str, today: date | None = None) -> list[Slot]:
    """Slots dated today through today + SLOT_WINDOW_DAYS, ordered by date then time label."""
    start = today or date.today()
    end = start + timedelta(days=settings.SLOT_WINDOW_DAYS)
    stmt = (
        select(Slot)
        .where(Slot.experience_id == experience_id, Slot.date >= start, Slot.date <= end)
        .order_by(Slot.date.asc(), Slot.time.asc())
    )
    return list(db.execute(stmt).scalars())


def get_experience_with_slots(db: Session, experience_id: str, today: date | None = None) -> tuple[Experience, list[Slot]]:
    experience = get_experience_by_id(db, experience_id)
    if not experience:
        raise NotFoundError("Experience not found")
    return experience, list_upcoming_slots(db, experience_id, today=today)
