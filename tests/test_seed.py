import random
from datetime import date

from bookit import seed
from bookit.models.experience import Experience
from bookit.models.slot import Slot
from bookit.models.promo_code import PromoCode


def test_seed_populates_demo_catalog(db):
    seed.run(db, today=date(2026, 1, 5), rng=random.Random(7))
    assert db.query(Experience).count() == len(seed.EXPERIENCES)
    slots = db.query(Slot).all()
    assert len(slots) == len(seed.EXPERIENCES) * seed.SLOT_DAYS * len(seed.SLOT_TIMES)
    assert all(6 <= s.available_spots <= s.total_spots == 10 for s in slots)
    assert {p.code for p in db.query(PromoCode)} == {"SAVE10", "FLAT100", "WELCOME20"}


def test_seed_is_rerunnable(db):
    seed.run(db)
    seed.run(db)
    assert db.query(Experience).count() == len(seed.EXPERIENCES)
    assert db.query(PromoCode).count() == 3


def test_seed_keeps_bookings_and_availability(db, booking_engine, spots_left, count_bookings):
    today = date(2026, 1, 5)
    seed.run(db, today=today, rng=random.Random(7))
    slot = db.query(Slot).order_by(Slot.id).first()
    before = slot.available_spots
    booking = booking_engine.create_booking(slot.experience_id, slot.id, "Asha Rao", "asha@example.com", quantity=2)

    # a restart seeds again
    seed.run(db, today=today, rng=random.Random(8))

    assert count_bookings() == 1
    assert spots_left(slot.id) == before - 2
    assert db.query(Slot).count() == len(seed.EXPERIENCES) * seed.SLOT_DAYS * len(seed.SLOT_TIMES)
    from bookit.services.booking_service import get_booking_by_reference
    assert get_booking_by_reference(db, booking.booking_reference) is not None


def test_seed_tops_up_new_days(db):
    seed.run(db, today=date(2026, 1, 5))
    seed.run(db, today=date(2026, 1, 6))
    per_day = len(seed.EXPERIENCES) * len(seed.SLOT_TIMES)
    assert db.query(Slot).count() == per_day * (seed.SLOT_DAYS + 1)
