from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from bookit.db.session import get_db
from bookit.api.deps import get_booking_engine
from bookit.core.errors import NotFoundError
from bookit.schemas.booking import BookingCreate, BookingCreated, BookingOut, booking_out
from bookit.services.booking_service import BookingEngine, get_booking_by_reference

router = APIRouter(tags=["bookings"])


@router.post("/bookings", response_model=BookingCreated, status_code=201)
def create_booking(body: BookingCreate, engine: BookingEngine = Depends(get_booking_engine)):
    # Each attempt opens its own session; BookingError subclasses map to {error, kind} responses.
    booking = engine.create_booking(
        experience_id=body.experienceId,
        slot_id=body.slotId,
        full_name=body.fullName,
        email=body.email,
        quantity=body.quantity,
        promo_code=body.promoCode,
    )
    return BookingCreated(booking=booking_out(booking))


@router.get("/bookings/{booking_ref}", response_model=BookingOut)
def get_booking(booking_ref: str, db: Session = Depends(get_db)):
    b = get_booking_by_reference(db, booking_ref)
    if not b:
        raise NotFoundError("Booking not found")
    return booking_out(b)
