from pydantic import BaseModel
from typing import Optional

class BookingCreate(BaseModel):
    experienceId: Optional[str] = None
    slotId: Optional[str] = None
    fullName: Optional[str] = None
    email: Optional[str] = None  # plain str; shape is checked by the booking engine
    promoCode: Optional[str] = None
    quantity: Optional[int] = 1

class BookingOut(BaseModel):
    id: str
    bookingReference: str
    experienceId: str
    slotId: str
    fullName: str
    email: str
    quantity: int
    subtotal: int
    discount: int = 0
    taxes: int
    total: int
    promoCode: Optional[str] = None
    status: str
    createdAt: Optional[str] = None

class BookingCreated(BaseModel):
    success: bool = True
    booking: BookingOut
    message: str = "Booking created successfully"


def booking_out(b) -> BookingOut:
    return BookingOut(
        id=b.id,
        bookingReference=b.booking_reference,
        experienceId=b.experience_id,
        slotId=b.slot_id,
        fullName=b.full_name,
        email=b.email,
        quantity=b.quantity,
        subtotal=b.subtotal,
        discount=b.discount,
        taxes=b.taxes,
        total=b.total,
        promoCode=b.promo_code,
        status=b.status,
        createdAt=b.created_at.isoformat() if b.created_at else None,
    )
