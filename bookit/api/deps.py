from fastapi import Request
from bookit.services.booking_service import BookingEngine

def get_booking_engine(request: Request) -> BookingEngine:
    engine = getattr(request.app.state, "booking_engine", None)
    if engine is None:
        raise RuntimeError("booking engine not initialised")
    return engine
