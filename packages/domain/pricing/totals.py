"""
Totals Calculator - subtotal, coupon discount, shipping, tax and grand total

Pure function over a line-item list. No I/O, never raises for well-formed
input (an empty cart is fine). Input validation (quantity >= 1, prices >= 0)
belongs to LineItem, not here.

Rounding: every output field is rounded once, half-up to 0.01, after all
intermediate arithmetic is done at full precision.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from packages.domain.pricing.schemas import (
    ZERO,
    Coupon,
    CouponType,
    LineItem,
    TotalsBreakdown,
)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PricingPolicy:
    """Business constants for totals"""
    tax_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: Decimal = Decimal("1000")
    flat_shipping_fee: Decimal = Decimal("100")
    currency: str = "INR"

    @classmethod
    def from_settings(cls, settings=None) -> "PricingPolicy":
        """Build from application settings (defaults to the cached settings)."""
        if settings is None:
            from packages.common.config import get_settings
            settings = get_settings()
        return cls(
            tax_rate=settings.tax_rate,
            free_shipping_threshold=settings.free_shipping_threshold,
            flat_shipping_fee=settings.flat_shipping_fee,
            currency=settings.currency,
        )


DEFAULT_POLICY = PricingPolicy()


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def coupon_discount(subtotal: Decimal, coupon: Optional[Coupon]) -> Decimal:
    """
    Unrounded discount for a subtotal, clamped to [0, subtotal].

    Zero when there is no coupon or the subtotal is below its minimum.
    """
    if coupon is None or subtotal < coupon.min_amount:
        return ZERO

    if coupon.type == CouponType.PERCENTAGE:
        raw = subtotal * coupon.discount / HUNDRED
    else:
        raw = coupon.discount

    return max(ZERO, min(raw, subtotal))


def compute_totals(
    line_items: Iterable[LineItem],
    coupon: Optional[Coupon] = None,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> TotalsBreakdown:
    """
    Compute the pricing breakdown for a cart.

    Args:
        line_items: All cart rows; saved-for-later rows are ignored
        coupon: Applied coupon, if any
        policy: Tax rate and shipping rules

    Returns:
        TotalsBreakdown with every field rounded to 2 places
    """
    subtotal = sum((item.line_total for item in line_items if item.is_active), ZERO)
    discount = coupon_discount(subtotal, coupon)

    # Flat fee applies at or below the threshold, including an empty cart
    shipping = ZERO if subtotal > policy.free_shipping_threshold else policy.flat_shipping_fee

    tax = (subtotal - discount) * policy.tax_rate
    total = subtotal - discount + tax + shipping

    return TotalsBreakdown(
        subtotal=round_money(subtotal),
        discount=round_money(discount),
        tax=round_money(tax),
        shipping=round_money(shipping),
        total=round_money(total),
    )
