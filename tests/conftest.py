"""Shared fixtures: a throwaway SQLite database per test plus catalog factories."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from bookit.db.session import init_db, close_db
from bookit.main import create_app
from bookit.models.experience import Experience
from bookit.models.slot import Slot
from bookit.models.promo_code import PromoCode
from bookit.models.booking import Booking
from bookit.services.booking_service import BookingEngine


@pytest.fixture
def database(tmp_path):
    # File-backed so every thread/session sees the same data
    database = init_db(f"sqlite:///{tmp_path / 'bookit_test.db'}")
    database.create_all()
    yield database
    close_db()


@pytest.fixture
def db(database):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def booking_engine(database):
    return BookingEngine(
        database.SessionLocal,
        tax_rate=0.10,
        ref_prefix="HUF",
        ref_attempts=3,
        max_attempts=3,
    )


@pytest.fixture
def client(database):
    app = create_app(database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_experience(db):
    def _make(title="Kayaking", location="Udupi", price=999, description="Curated small-group experience."):
        e = Experience(
            id=str(uuid.uuid4()),
            title=title,
            location=location,
            description=description,
            price=price,
            image_url="https://example.com/kayak.jpg",
            about="Scenic routes and trained guides.",
        )
        db.add(e)
        db.commit()
        return e
    return _make


@pytest.fixture
def make_slot(db):
    def _make(experience, available=10, total=10, on=None, time="07:00 am - 1pm"):
        s = Slot(
            id=str(uuid.uuid4()),
            experience_id=experience.id,
            date=on or date.today(),
            time=time,
            total_spots=total,
            available_spots=available,
        )
        db.add(s)
        db.commit()
        return s
    return _make


@pytest.fixture
def make_promo(db):
    def _make(code, discount_type="percentage", value=10, active=True):
        p = PromoCode(
            id=str(uuid.uuid4()),
            code=code.upper(),
            discount_type=discount_type,
            discount_value=Decimal(str(value)),
            active=active,
        )
        db.add(p)
        db.commit()
        return p
    return _make


@pytest.fixture
def standard_promos(make_promo):
    return {
        "SAVE10": make_promo("SAVE10", "percentage", 10),
        "FLAT100": make_promo("FLAT100", "fixed", 100),
        "WELCOME20": make_promo("WELCOME20", "percentage", 20),
        "OLD50": make_promo("OLD50", "percentage", 50, active=False),
    }


@pytest.fixture
def spots_left(database):
    """Read a slot's availability through a fresh session."""
    def _read(slot_id: str) -> int:
        with database.SessionLocal() as s:
            return s.get(Slot, slot_id).available_spots
    return _read


@pytest.fixture
def count_bookings(database):
    def _count() -> int:
        with database.SessionLocal() as s:
            return s.query(Booking).count()
    return _count
