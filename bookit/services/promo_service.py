from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from bookit.core.errors import InvalidInputError, PromoNotFoundError
from bookit.models.promo_code import PromoCode
from bookit.services.pricing_service import compute_discount


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def find_active_promo_by_code(db: Session, code: str | None) -> PromoCode | None:
    """Case-insensitive lookup of an active promo code; None if unknown or deactivated."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    return db.execute(
        select(PromoCode).where(PromoCode.code == normalized, PromoCode.active.is_(True))
    ).scalar_one_or_none()


@dataclass(frozen=True)
class PromoValidation:
    valid: bool
    code: str
    discount_type: str
    discount_value: Decimal
    discount_amount: int


def validate_promo(db: Session, code: str | None, amount: int | None) -> PromoValidation:
    """Report the discount ``code`` would give on ``amount``.

    Unlike booking, an unknown or inactive code is an error here.
    """
    if not normalize_code(code):
        raise InvalidInputError("Promo code is required")
    if amount is not None and amount < 0:
        raise InvalidInputError("amount must be >= 0")
    promo = find_active_promo_by_code(db, code)
    if not promo:
        raise PromoNotFoundError(normalize_code(code))
    return PromoValidation(
        valid=True,
        code=promo.code,
        discount_type=promo.discount_type,
        discount_value=promo.discount_value,
        discount_amount=compute_discount(amount, promo),
    )
