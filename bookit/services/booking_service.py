import logging
import random
import re
import string
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bookit.core.config import settings
from bookit.core.errors import (
    BookingError,
    InsufficientCapacityError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
    ReferenceCollisionError,
    TransactionConflictError,
)
from bookit.db.session import transaction
from bookit.models.booking import Booking, FULL_NAME_MAX, EMAIL_MAX, PROMO_CODE_MAX
from bookit.services.catalog_service import get_experience_by_id
from bookit.services.inventory_service import get_slot_by_id, update_slot_availability
from bookit.services.pricing_service import quote
from bookit.services.promo_service import find_active_promo_by_code

logger = logging.getLogger(__name__)

REF_ALPHABET = string.ascii_uppercase + string.digits  # base-36 digits
REF_SUFFIX_LEN = 5
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}


def make_booking_ref(prefix: str | None = None) -> str:
    if prefix is None:
        prefix = settings.BOOKING_REF_PREFIX
    return prefix + "".join(random.choices(REF_ALPHABET, k=REF_SUFFIX_LEN))


def booking_reference_exists(db: Session, ref: str) -> bool:
    return db.execute(select(Booking.id).where(Booking.booking_reference == ref)).first() is not None


def get_booking_by_reference(db: Session, ref: str) -> Booking | None:
    ref = (ref or "").strip().upper()
    if not ref:
        return None
    return db.execute(
        select(Booking).where(func.upper(Booking.booking_reference) == ref)
    ).scalar_one_or_none()


def insert_booking(db: Session, booking: Booking) -> Booking:
    """Add and flush ``booking``; a taken reference raises ReferenceCollisionError."""
    db.add(booking)
    try:
        db.flush()
    except IntegrityError as e:
        if "booking_reference" in str(e.orig):
            raise ReferenceCollisionError(booking.booking_reference) from e
        raise
    return booking


@dataclass(frozen=True)
class BookingRequest:
    experience_id: str
    slot_id: str
    full_name: str
    email: str
    quantity: int = 1
    promo_code: str | None = None


def validate_booking_request(
    experience_id: str | None,
    slot_id: str | None,
    full_name: str | None,
    email: str | None,
    quantity: int | None = 1,
    promo_code: str | None = None,
) -> BookingRequest:
    full_name = (full_name or "").strip()
    email = (email or "").strip()
    if not experience_id or not slot_id or not full_name or not email:
        raise InvalidInputError("Missing required fields")
    if len(full_name) > FULL_NAME_MAX:
        raise InvalidInputError(f"fullName must be at most {FULL_NAME_MAX} characters")
    if len(email) > EMAIL_MAX or not EMAIL_RE.match(email):
        raise InvalidInputError("Email is invalid")
    if quantity is None:
        quantity = 1
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidInputError("quantity must be a positive integer")
    promo_code = (promo_code or "").strip() or None
    if promo_code and len(promo_code) > PROMO_CODE_MAX:
        # no stored code is this long; treat as unknown like any other bad code
        logger.info("ignoring over-long promo code (%d chars)", len(promo_code))
        promo_code = None
    return BookingRequest(
        experience_id=str(experience_id),
        slot_id=str(slot_id),
        full_name=full_name,
        email=email,
        quantity=quantity,
        promo_code=promo_code,
    )


def _is_retryable(e: DBAPIError) -> bool:
    return getattr(e.orig, "pgcode", None) in RETRYABLE_SQLSTATES


class BookingEngine:
    """Creates bookings, one serializable unit of work per attempt.

    Each attempt opens its own session from ``session_factory``; the slot
    decrement and the booking insert commit together or not at all. Lost
    races (serialization failures, a concurrent change to the slot row) and
    booking reference collisions retry the whole unit a bounded number of times.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        tax_rate: float | None = None,
        ref_prefix: str | None = None,
        ref_attempts: int | None = None,
        max_attempts: int | None = None,
        isolation_level: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.tax_rate = settings.TAX_RATE if tax_rate is None else tax_rate
        self.ref_prefix = settings.BOOKING_REF_PREFIX if ref_prefix is None else ref_prefix
        self.ref_attempts = ref_attempts or settings.BOOKING_REF_ATTEMPTS
        self.max_attempts = max_attempts or settings.BOOKING_MAX_ATTEMPTS
        self.isolation_level = settings.BOOKING_ISOLATION_LEVEL if isolation_level is None else isolation_level

    def create_booking(
        self,
        experience_id: str,
        slot_id: str,
        full_name: str,
        email: str,
        quantity: int = 1,
        promo_code: str | None = None,
    ) -> Booking:
        request = validate_booking_request(experience_id, slot_id, full_name, email, quantity, promo_code)

        collisions = conflicts = 0
        while True:
            try:
                booking = self._attempt(request)
            except ReferenceCollisionError as e:
                collisions += 1
                if collisions >= self.ref_attempts:
                    logger.error("giving up on booking reference after %d collisions (last %s)", collisions, e.reference)
                    raise
                logger.warning("booking reference %s already taken, retrying", e.reference)
                continue
            except TransactionConflictError:
                conflicts += 1
                if conflicts >= self.max_attempts:
                    logger.error("slot %s: booking aborted after %d conflicting attempts", request.slot_id, conflicts)
                    raise
                logger.info("slot %s: concurrent update, retrying booking", request.slot_id)
                continue
            logger.info(
                "booking %s confirmed: slot=%s quantity=%d total=%d",
                booking.booking_reference, booking.slot_id, booking.quantity, booking.total,
            )
            return booking

    def _attempt(self, request: BookingRequest) -> Booking:
        try:
            with self._session_factory() as db:
                with transaction(db, self.isolation_level or None):
                    booking = self._book(db, request)
                    # keep the loaded snapshot usable once the session closes
                    db.expunge(booking)
                return booking
        except BookingError:
            raise
        except DBAPIError as e:
            if _is_retryable(e):
                raise TransactionConflictError() from e
            logger.exception("booking transaction failed for slot %s", request.slot_id)
            raise PersistenceError() from e
        except SQLAlchemyError as e:
            logger.exception("booking transaction failed for slot %s", request.slot_id)
            raise PersistenceError() from e

    def _book(self, db: Session, request: BookingRequest) -> Booking:
        experience = get_experience_by_id(db, request.experience_id)
        if not experience:
            raise NotFoundError("Experience not found")

        # Lock the slot row for the rest of the transaction
        slot = get_slot_by_id(db, request.slot_id, for_update=True)
        if not slot:
            raise NotFoundError("Slot not found")
        if slot.experience_id != experience.id:
            raise InvalidInputError("Slot does not belong to this experience")

        available = slot.available_spots
        if available < request.quantity:
            raise InsufficientCapacityError(request.quantity, available)

        promo = find_active_promo_by_code(db, request.promo_code) if request.promo_code else None
        price = quote(experience.price, request.quantity, promo, tax_rate=self.tax_rate)

        if not update_slot_availability(db, slot.id, available - request.quantity, expected=available):
            raise TransactionConflictError()

        return insert_booking(db, Booking(
            id=str(uuid.uuid4()),
            booking_reference=self._new_reference(db),
            experience_id=experience.id,
            slot_id=slot.id,
            full_name=request.full_name,
            email=request.email,
            quantity=request.quantity,
            subtotal=price.subtotal,
            discount=price.discount,
            taxes=price.taxes,
            total=price.total,
            promo_code=request.promo_code,
            status="confirmed",
            created_at=datetime.now(timezone.utc),
        ))

    def _new_reference(self, db: Session) -> str:
        ref = make_booking_ref(self.ref_prefix)
        for _ in range(self.ref_attempts - 1):
            if not booking_reference_exists(db, ref):
                break
            ref = make_booking_ref(self.ref_prefix)
        # a concurrent insert can still take it; the unique index decides
        return ref
