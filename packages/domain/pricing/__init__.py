"""
Pricing Module - cart totals

compute_totals() is the single source of cart pricing:
- subtotal: sum of active (not saved-for-later) line totals
- discount: coupon, only at or above its minimum, capped at the subtotal
- shipping: flat fee unless the subtotal is above the free-shipping threshold
- tax: rate applied to (subtotal - discount)
- total: subtotal - discount + tax + shipping

Example (defaults: 18% tax, free shipping above 1000, fee 100):
- subtotal 1500, 10% coupon (min 1000) → discount 150, tax 243, shipping 0, total 1593
- subtotal 500, same coupon → discount 0, tax 90, shipping 100, total 690
"""

from packages.domain.pricing.cart import Cart
from packages.domain.pricing.schemas import (
    Coupon,
    CouponType,
    LineItem,
    TotalsBreakdown,
    VariantSelection,
)
from packages.domain.pricing.totals import (
    DEFAULT_POLICY,
    PricingPolicy,
    compute_totals,
)

__all__ = [
    'Cart',
    'Coupon',
    'CouponType',
    'LineItem',
    'TotalsBreakdown',
    'VariantSelection',
    'DEFAULT_POLICY',
    'PricingPolicy',
    'compute_totals',
]
