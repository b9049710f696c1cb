"""
Data schemas for cart pricing

All money is Decimal. LineItem.line_total is always derived from quantity
and prices; a client-supplied total is never read.
"""
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field, model_validator

ZERO = Decimal("0")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VariantSelection(BaseModel):
    """Chosen variant attributes for a line item"""
    size: Optional[str] = None
    color: Optional[str] = None
    sku: Optional[str] = None


class LineItem(BaseModel):
    """One product/variant/quantity row in a cart"""
    id: UUID = Field(default_factory=uuid4)
    product_id: str = Field(..., description="Product reference")
    variant: VariantSelection = Field(default_factory=VariantSelection)
    quantity: int = Field(1, ge=1)
    price: Decimal = Field(..., ge=0, description="Unit price")
    discounted_price: Optional[Decimal] = Field(None, ge=0, description="Unit sale price, if any")
    is_saved_for_later: bool = False
    added_at: datetime = Field(default_factory=utcnow)

    @property
    def unit_price(self) -> Decimal:
        """Price actually charged per unit (sale price when present)."""
        return self.discounted_price if self.discounted_price is not None else self.price

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def is_active(self) -> bool:
        return not self.is_saved_for_later

    def matches(self, product_id: str, variant: VariantSelection) -> bool:
        """Same product and same size/color (sku is not part of identity)."""
        return (
            self.product_id == product_id
            and self.variant.size == variant.size
            and self.variant.color == variant.color
        )


class CouponType(str, Enum):
    """How a coupon's discount value is interpreted"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(BaseModel):
    """Discount code applied to a cart"""
    code: str = Field(..., min_length=1)
    discount: Decimal = Field(..., ge=0, description="Percent (0-100) or flat amount")
    type: CouponType = CouponType.PERCENTAGE
    min_amount: Decimal = Field(ZERO, ge=0, description="Minimum subtotal to apply")

    @model_validator(mode="after")
    def check_percentage_range(self):
        if self.type == CouponType.PERCENTAGE and self.discount > 100:
            raise ValueError("percentage discount must be between 0 and 100")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "code": "FESTIVE10",
                "discount": 10,
                "type": "percentage",
                "min_amount": 1000,
            }
        }


class TotalsBreakdown(BaseModel):
    """Result of a totals computation, rounded to 2 places"""
    subtotal: Decimal = ZERO
    discount: Decimal = ZERO
    tax: Decimal = ZERO
    shipping: Decimal = ZERO
    total: Decimal = ZERO

    class Config:
        json_schema_extra = {
            "example": {
                "subtotal": 1500.00,
                "discount": 150.00,
                "tax": 243.00,
                "shipping": 0.00,
                "total": 1593.00,
            }
        }
