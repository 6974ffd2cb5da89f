"""Booking error taxonomy.

Every failure raised by the booking core carries a machine-readable ``kind``,
a user-safe ``message`` and the HTTP status the API layer should answer with.
"""

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    PROMO_NOT_FOUND = "PROMO_NOT_FOUND"
    REFERENCE_COLLISION = "REFERENCE_COLLISION"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


class BookingError(Exception):
    kind: ErrorKind = ErrorKind.PERSISTENCE_FAILURE
    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind.value}


class InvalidInputError(BookingError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 400


class NotFoundError(BookingError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class InsufficientCapacityError(BookingError):
    kind = ErrorKind.INSUFFICIENT_CAPACITY
    status_code = 400

    def __init__(self, requested: int, available: int) -> None:
        super().__init__("Not enough spots available")
        self.requested = requested
        self.available = available


class PromoNotFoundError(BookingError):
    kind = ErrorKind.PROMO_NOT_FOUND
    status_code = 404

    def __init__(self, code: str) -> None:
        super().__init__("Invalid or expired promo code")
        self.code = code


class ReferenceCollisionError(BookingError):
    """Booking reference already taken; retried internally before surfacing."""

    kind = ErrorKind.REFERENCE_COLLISION
    status_code = 503

    def __init__(self, reference: str) -> None:
        super().__init__("Could not allocate a booking reference, please retry")
        self.reference = reference


class PersistenceError(BookingError):
    kind = ErrorKind.PERSISTENCE_FAILURE
    status_code = 500

    def __init__(self, message: str = "Failed to create booking") -> None:
        super().__init__(message)


class TransactionConflictError(PersistenceError):
    """Concurrent writer won; the whole unit of work may be retried."""

    def __init__(self, message: str = "Failed to create booking") -> None:
        super().__init__(message)
