import logging
import random
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from bookit.core.config import settings
from bookit.core.logging_config import configure_logging
from bookit.db.session import get_database, init_db
from bookit.models.experience import Experience
from bookit.models.slot import Slot
from bookit.models.promo_code import PromoCode, PERCENTAGE, FIXED

logger = logging.getLogger(__name__)

DESCRIPTION = "Curated small-group experience. Certified guide. Safety first with gear included."

EXPERIENCES = [
    ("Kayaking", "Udupi", 999, "https://images.unsplash.com/photo-1544551763-46a013bb70d5?w=800&auto=format&fit=crop",
     "Scenic routes, trained guides, and safety briefing. Helmet and Life jackets along with an expert will accompany in kayaking. Wellness age 10."),
    ("Nandi Hills Sunrise", "Bangalore", 899, "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800&auto=format&fit=crop",
     "Early morning trek to witness breathtaking sunrise views from Nandi Hills."),
    ("Coffee Trail", "Coorg", 1299, "https://images.unsplash.com/photo-1447933601403-0c6688de566e?w=800&auto=format&fit=crop",
     "Explore coffee plantations and learn about coffee making process."),
    ("Kayaking", "Udupi, Karnataka", 999, "https://images.unsplash.com/photo-1502680390469-be75c86b636f?w=800&auto=format&fit=crop",
     "Paddle through serene backwaters with expert guidance and safety equipment."),
    ("Boat Cruise", "Gundlupet", 999, "https://images.unsplash.com/photo-1544551763-77ef2d0cfc6c?w=800&auto=format&fit=crop",
     "Relaxing boat ride with scenic views and wildlife spotting opportunities."),
    ("Bunjee Jumping", "Mysore", 999, "https://images.unsplash.com/photo-1534367507873-d2d7e24c797f?w=800&auto=format&fit=crop",
     "Thrilling bungee jumping experience with professional safety measures."),
]

SLOT_TIMES = ["07:00 am - 1pm", "9:00 am - 1 pm", "11:00 am - 3 pm", "1:00 pm -later"]
SLOT_DAYS = 7
SLOT_CAPACITY = 10

PROMO_CODES = [
    ("SAVE10", PERCENTAGE, Decimal("10")),
    ("FLAT100", FIXED, Decimal("100")),
    ("WELCOME20", PERCENTAGE, Decimal("20")),
]


def ensure_promo(db: Session, code: str, discount_type: str, value: Decimal):
    p = db.query(PromoCode).filter(PromoCode.code == code.upper()).first()
    if p:
        return
    db.add(PromoCode(id=str(uuid.uuid4()), code=code.upper(), discount_type=discount_type, discount_value=value, active=True))


def ensure_experience(db: Session, title: str, location: str, price: int, image_url: str, about: str) -> Experience:
    # Two demo entries share title and location; the image tells them apart
    e = db.query(Experience).filter(
        Experience.title == title,
        Experience.location == location,
        Experience.image_url == image_url,
    ).first()
    if e:
        return e
    e = Experience(
        id=str(uuid.uuid4()),
        title=title,
        location=location,
        description=DESCRIPTION,
        price=price,
        image_url=image_url,
        about=about,
    )
    db.add(e)
    db.flush()
    return e


def ensure_slot(db: Session, experience: Experience, day: date, label: str, rng: random.Random) -> bool:
    """Add the slot if missing. Existing slots keep their availability."""
    exists = db.query(Slot.id).filter(
        Slot.experience_id == experience.id,
        Slot.date == day,
        Slot.time == label,
    ).first()
    if exists:
        return False
    db.add(Slot(
        id=str(uuid.uuid4()),
        experience_id=experience.id,
        date=day,
        time=label,
        total_spots=SLOT_CAPACITY,
        available_spots=rng.randint(6, SLOT_CAPACITY),
    ))
    return True


def run(db: Session | None = None, today: date | None = None, rng: random.Random | None = None):
    """Top up the demo catalog: experiences, a week of slots each, promo codes.

    Only missing rows are added, so this is safe on every start; bookings and
    the availability of existing slots are never touched.
    """
    own_session = db is None
    if own_session:
        db = get_database().SessionLocal()
    rng = rng or random.Random()
    today = today or date.today()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM experiences LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("experiences table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        experiences = [ensure_experience(db, *row) for row in EXPERIENCES]

        n_slots = 0
        for e in experiences:
            for i in range(SLOT_DAYS):
                for label in SLOT_TIMES:
                    if ensure_slot(db, e, today + timedelta(days=i), label, rng):
                        n_slots += 1

        for code, discount_type, value in PROMO_CODES:
            ensure_promo(db, code, discount_type, value)
        db.commit()
        logger.info("seed: %d experiences present, %d new slots", len(experiences), n_slots)
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    configure_logging()
    init_db(settings.DATABASE_URL)
    run()
