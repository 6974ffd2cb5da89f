"""Booking price computation.

All amounts are integers in the smallest currency unit. Discount and taxes are
each rounded half away from zero, independently, so ``total`` is exactly
``subtotal - discount + taxes`` but may differ by one unit from a single
rounding of the whole expression.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from bookit.core.config import settings
from bookit.models.promo_code import PromoCode, PERCENTAGE, FIXED


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_discount(amount: int | None, promo: PromoCode | None) -> int:
    """Discount for ``amount`` under ``promo``, clamped to ``[0, amount]``.

    With no amount there is nothing to clamp against: a fixed promo reports its
    face value and a percentage promo reports 0.
    """
    if promo is None:
        return 0
    value = Decimal(str(promo.discount_value))
    if amount is None:
        return max(0, round_half_up(value)) if promo.discount_type == FIXED else 0
    if amount <= 0:
        return 0
    if promo.discount_type == PERCENTAGE:
        discount = round_half_up(Decimal(amount) * value / 100)
    elif promo.discount_type == FIXED:
        discount = round_half_up(value)
    else:
        discount = 0
    return max(0, min(discount, amount))


def compute_taxes(taxable: int, tax_rate: float | None = None) -> int:
    rate = Decimal(str(settings.TAX_RATE if tax_rate is None else tax_rate))
    return round_half_up(Decimal(taxable) * rate)


@dataclass(frozen=True)
class Quote:
    subtotal: int
    discount: int
    taxes: int
    total: int


def quote(unit_price: int, quantity: int, promo: PromoCode | None = None, tax_rate: float | None = None) -> Quote:
    subtotal = unit_price * quantity
    discount = compute_discount(subtotal, promo)
    taxes = compute_taxes(subtotal - discount, tax_rate)
    return Quote(subtotal=subtotal, discount=discount, taxes=taxes, total=subtotal - discount + taxes)
