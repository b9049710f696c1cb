"""
Cart aggregate

Every mutation ends in recalculate() (via _changed()), which reruns
compute_totals() over the whole item list. There is no incremental update path, so the stored totals
always describe the current items and coupon.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from packages.common.errors import CartItemNotFoundError, InvalidLineItemError
from packages.domain.pricing.schemas import (
    Coupon,
    LineItem,
    TotalsBreakdown,
    VariantSelection,
    utcnow,
)
from packages.domain.pricing.totals import DEFAULT_POLICY, PricingPolicy, compute_totals

logger = structlog.get_logger()


class Cart(BaseModel):
    """A user's cart: active items, saved-for-later items, coupon and totals"""
    user_id: str
    items: List[LineItem] = Field(default_factory=list)
    coupon: Optional[Coupon] = None
    totals: TotalsBreakdown = Field(default_factory=TotalsBreakdown)
    currency: str = "INR"
    last_updated: datetime = Field(default_factory=utcnow)

    # ---- Views ------------------------------------------------------------

    @property
    def active_items(self) -> List[LineItem]:
        return [item for item in self.items if item.is_active]

    @property
    def saved_items(self) -> List[LineItem]:
        return [item for item in self.items if item.is_saved_for_later]

    @property
    def item_count(self) -> int:
        """Total quantity of active items"""
        return sum(item.quantity for item in self.active_items)

    def is_empty(self) -> bool:
        return not self.active_items

    def summary(self) -> Dict[str, Any]:
        return {
            "item_count": self.item_count,
            **self.totals.model_dump(),
            "currency": self.currency,
        }

    # ---- Mutations --------------------------------------------------------

    def add_item(
        self,
        product_id: str,
        variant: VariantSelection,
        price: Decimal,
        quantity: int = 1,
        discounted_price: Optional[Decimal] = None,
        policy: PricingPolicy = DEFAULT_POLICY,
    ) -> LineItem:
        """
        Add a product variant, merging with an active row for the same
        product, size and color.

        Returns:
            The new or merged line item
        """
        if quantity < 1:
            raise InvalidLineItemError("Quantity must be at least 1")

        existing = next(
            (item for item in self.active_items if item.matches(product_id, variant)),
            None,
        )

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = LineItem(
                product_id=product_id,
                variant=variant,
                quantity=quantity,
                price=price,
                discounted_price=discounted_price,
            )
            self.items.append(item)

        logger.debug("cart_item_added",
                     user_id=self.user_id,
                     product_id=product_id,
                     quantity=item.quantity,
                     merged=existing is not None)

        self._changed(policy)
        return item

    def update_item_quantity(
        self,
        item_id: UUID,
        quantity: int,
        policy: PricingPolicy = DEFAULT_POLICY,
    ) -> LineItem:
        if quantity < 1:
            raise InvalidLineItemError("Quantity must be at least 1")

        item = self._get_item(item_id)
        item.quantity = quantity
        self._changed(policy)
        return item

    def remove_item(self, item_id: UUID, policy: PricingPolicy = DEFAULT_POLICY) -> None:
        item = self._get_item(item_id)
        self.items.remove(item)
        self._changed(policy)

    def save_for_later(self, item_id: UUID, policy: PricingPolicy = DEFAULT_POLICY) -> LineItem:
        item = self._get_item(item_id)
        item.is_saved_for_later = True
        self._changed(policy)
        return item

    def move_to_cart(self, item_id: UUID, policy: PricingPolicy = DEFAULT_POLICY) -> LineItem:
        item = self._get_item(item_id)
        item.is_saved_for_later = False
        self._changed(policy)
        return item

    def apply_coupon(self, coupon: Coupon, policy: PricingPolicy = DEFAULT_POLICY) -> None:
        """Attach a coupon; it only discounts once the subtotal reaches its minimum."""
        self.coupon = coupon
        self._changed(policy)

        logger.info("cart_coupon_applied",
                    user_id=self.user_id,
                    code=coupon.code,
                    discount=str(self.totals.discount))

    def remove_coupon(self, policy: PricingPolicy = DEFAULT_POLICY) -> None:
        self.coupon = None
        self._changed(policy)

    def clear(self, policy: PricingPolicy = DEFAULT_POLICY) -> None:
        """Drop every item (saved ones included) and the coupon."""
        self.items = []
        self.coupon = None
        self._changed(policy)

    def recalculate(self, policy: PricingPolicy = DEFAULT_POLICY) -> TotalsBreakdown:
        self.totals = compute_totals(self.items, self.coupon, policy)
        self.currency = policy.currency
        return self.totals

    def _changed(self, policy: PricingPolicy) -> None:
        self.last_updated = utcnow()
        self.recalculate(policy)

    def _get_item(self, item_id: UUID) -> LineItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise CartItemNotFoundError(item_id)
        return item
