"""
Shared FastAPI dependencies

Authentication happens upstream (auth proxy / token service); by the time a
request reaches us the proxy has put the verified user id in X-User-Id.
"""
from typing import Optional

from fastapi import Header, HTTPException, status

from packages.common.cart_repository import CartRepository, cart_repository
from packages.common.category_repository import CategoryRepository, category_repository
from packages.common.coupon_repository import CouponRepository, coupon_repository
from packages.common.product_repository import ProductRepository, product_repository
from packages.domain.categorization.categorization_service import (
    CategorizationService,
    categorization_service,
)
from packages.domain.pricing.totals import PricingPolicy


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


def get_pricing_policy() -> PricingPolicy:
    return PricingPolicy.from_settings()


def get_cart_repository() -> CartRepository:
    return cart_repository


def get_coupon_repository() -> CouponRepository:
    return coupon_repository


def get_category_repository() -> CategoryRepository:
    return category_repository


def get_product_repository() -> ProductRepository:
    return product_repository


def get_categorization_service() -> CategorizationService:
    return categorization_service
