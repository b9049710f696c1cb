"""
Cart API Router
Every mutation locks and loads the cart, applies one aggregate operation
(which recomputes totals) and saves the whole document back.
"""
from decimal import Decimal
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import (
    get_cart_repository,
    get_coupon_repository,
    get_current_user_id,
    get_pricing_policy,
    get_product_repository,
)
from packages.common.cart_repository import CartRepository
from packages.common.coupon_repository import CouponRepository
from packages.common.database import get_db_session
from packages.common.product_repository import ProductRepository
from packages.domain.pricing.cart import Cart
from packages.domain.pricing.schemas import VariantSelection
from packages.domain.pricing.totals import PricingPolicy

logger = structlog.get_logger()
router = APIRouter()


class AddItemRequest(BaseModel):
    """Prices are looked up server-side; any price fields sent are ignored"""
    product_id: UUID
    variant: VariantSelection = Field(default_factory=VariantSelection)
    quantity: int = Field(1, ge=1)


class ApplyCouponRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class CartSummary(BaseModel):
    item_count: int
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    currency: str


class CartContext:
    """Per-request bundle: user, session, repository, pricing policy"""

    def __init__(
        self,
        user_id: str = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db_session),
        carts: CartRepository = Depends(get_cart_repository),
        policy: PricingPolicy = Depends(get_pricing_policy),
    ):
        self.user_id = user_id
        self.db = db
        self.carts = carts
        self.policy = policy

    async def load(self, for_update: bool = False) -> Cart:
        return await self.carts.get_or_create(
            self.user_id, self.db, self.policy, for_update=for_update
        )

    async def save(self, cart: Cart) -> dict:
        await self.carts.save(cart, self.db)
        return cart_response(cart)


def cart_response(cart: Cart) -> dict:
    data = cart.model_dump(mode="json")
    data["item_count"] = cart.item_count
    data["is_empty"] = cart.is_empty()
    return data


@router.get("")
async def get_cart(ctx: CartContext = Depends()):
    """Current user's cart (an empty cart if none has been saved yet)"""
    return cart_response(await ctx.load())


@router.get("/summary", response_model=CartSummary)
async def get_cart_summary(ctx: CartContext = Depends()):
    """Item count and totals only"""
    cart = await ctx.load()
    return cart.summary()


@router.post("/items")
async def add_item(
    body: AddItemRequest,
    ctx: CartContext = Depends(),
    products: ProductRepository = Depends(get_product_repository),
):
    """
    Add a product variant (merges with an existing row for the same size/color)

    404 if the product does not exist or is inactive.
    """
    price, discounted_price = await products.get_price(body.product_id, ctx.db)

    cart = await ctx.load(for_update=True)
    cart.add_item(
        product_id=str(body.product_id),
        variant=body.variant,
        price=price,
        quantity=body.quantity,
        discounted_price=discounted_price,
        policy=ctx.policy,
    )
    logger.info("cart_item_add_requested",
                user_id=ctx.user_id,
                product_id=str(body.product_id),
                quantity=body.quantity)
    return await ctx.save(cart)


@router.patch("/items/{item_id}")
async def update_item_quantity(item_id: UUID, body: UpdateQuantityRequest, ctx: CartContext = Depends()):
    cart = await ctx.load(for_update=True)
    cart.update_item_quantity(item_id, body.quantity, policy=ctx.policy)
    return await ctx.save(cart)


@router.delete("/items/{item_id}")
async def remove_item(item_id: UUID, ctx: CartContext = Depends()):
    cart = await ctx.load(for_update=True)
    cart.remove_item(item_id, policy=ctx.policy)
    return await ctx.save(cart)


@router.post("/items/{item_id}/save-for-later")
async def save_item_for_later(item_id: UUID, ctx: CartContext = Depends()):
    cart = await ctx.load(for_update=True)
    cart.save_for_later(item_id, policy=ctx.policy)
    return await ctx.save(cart)


@router.post("/items/{item_id}/move-to-cart")
async def move_item_to_cart(item_id: UUID, ctx: CartContext = Depends()):
    cart = await ctx.load(for_update=True)
    cart.move_to_cart(item_id, policy=ctx.policy)
    return await ctx.save(cart)


@router.post("/coupon")
async def apply_coupon(
    body: ApplyCouponRequest,
    ctx: CartContext = Depends(),
    coupons: CouponRepository = Depends(get_coupon_repository),
):
    """
    Attach a coupon by code

    Terms come from the coupons table (404 for an unknown, inactive or
    expired code). The discount only applies while the subtotal is at or
    above the coupon's minimum.
    """
    coupon = await coupons.find_active(body.code, ctx.db)

    cart = await ctx.load(for_update=True)
    cart.apply_coupon(coupon, policy=ctx.policy)
    return await ctx.save(cart)


@router.delete("/coupon")
async def remove_coupon(ctx: CartContext = Depends()):
    cart = await ctx.load(for_update=True)
    cart.remove_coupon(policy=ctx.policy)
    return await ctx.save(cart)


@router.delete("")
async def clear_cart(ctx: CartContext = Depends()):
    """Remove all items (saved-for-later included) and the coupon"""
    cart = await ctx.load(for_update=True)
    cart.clear(policy=ctx.policy)
    logger.info("cart_cleared", user_id=ctx.user_id)
    return await ctx.save(cart)
