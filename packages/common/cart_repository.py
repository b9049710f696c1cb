"""
Cart Repository - one cart document per user

Items and coupon are stored as JSONB documents alongside denormalized
totals (for reporting queries). The stored totals are informational only:
every loaded cart is recalculated from its items before it is returned.
"""
import json
from uuid import uuid4

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.errors import RepositoryError
from packages.domain.pricing.cart import Cart
from packages.domain.pricing.schemas import Coupon, LineItem
from packages.domain.pricing.totals import DEFAULT_POLICY, PricingPolicy

logger = structlog.get_logger()

_ENSURE_CART_ROW = text("""
    INSERT INTO carts (id, user_id, currency)
    VALUES (:id, :user_id, :currency)
    ON CONFLICT (user_id) DO NOTHING
""")


class CartRepository:
    """Load and persist Cart aggregates"""

    async def get_or_create(
        self,
        user_id: str,
        db: AsyncSession,
        policy: PricingPolicy = DEFAULT_POLICY,
        for_update: bool = False,
    ) -> Cart:
        """
        Load the user's cart, or return a new empty one (not yet saved).

        Args:
            user_id: Cart owner
            db: Database session
            policy: Pricing rules for the recalculation
            for_update: Lock the cart row until the transaction ends
                (load-modify-save requests). A missing row is inserted
                empty first so there is always a row to lock.

        Returns:
            Cart with freshly computed totals
        """
        query = text(f"""
            SELECT user_id, items, coupon, currency, updated_at
            FROM carts
            WHERE user_id = :user_id
            {"FOR UPDATE" if for_update else ""}
        """)

        try:
            if for_update:
                await db.execute(_ENSURE_CART_ROW, {
                    "id": uuid4(),
                    "user_id": user_id,
                    "currency": policy.currency,
                })
            result = await db.execute(query, {"user_id": user_id})
        except SQLAlchemyError as e:
            logger.error("cart_load_failed", user_id=user_id, error=str(e))
            raise RepositoryError(f"Failed to load cart for user {user_id}") from e

        row = result.fetchone()
        if row is None:
            cart = Cart(user_id=user_id, currency=policy.currency)
        else:
            data = row._mapping
            cart = Cart(
                user_id=data["user_id"],
                items=[LineItem.model_validate(item) for item in _load_json(data["items"]) or []],
                coupon=Coupon.model_validate(_load_json(data["coupon"])) if data["coupon"] else None,
                currency=data["currency"],
                last_updated=data["updated_at"],
            )

        cart.recalculate(policy)
        return cart

    async def save(self, cart: Cart, db: AsyncSession) -> None:
        """Upsert the cart document and its totals."""
        query = text("""
            INSERT INTO carts (
                id,
                user_id,
                items,
                coupon,
                subtotal,
                discount,
                tax,
                shipping,
                total,
                currency,
                created_at,
                updated_at
            ) VALUES (
                :id,
                :user_id,
                CAST(:items AS JSONB),
                CAST(:coupon AS JSONB),
                :subtotal,
                :discount,
                :tax,
                :shipping,
                :total,
                :currency,
                NOW(),
                NOW()
            )
            ON CONFLICT (user_id) DO UPDATE SET
                items = EXCLUDED.items,
                coupon = EXCLUDED.coupon,
                subtotal = EXCLUDED.subtotal,
                discount = EXCLUDED.discount,
                tax = EXCLUDED.tax,
                shipping = EXCLUDED.shipping,
                total = EXCLUDED.total,
                currency = EXCLUDED.currency,
                updated_at = EXCLUDED.updated_at
        """)

        totals = cart.totals
        params = {
            "id": uuid4(),
            "user_id": cart.user_id,
            "items": json.dumps([item.model_dump(mode="json") for item in cart.items]),
            "coupon": json.dumps(cart.coupon.model_dump(mode="json")) if cart.coupon else None,
            "subtotal": totals.subtotal,
            "discount": totals.discount,
            "tax": totals.tax,
            "shipping": totals.shipping,
            "total": totals.total,
            "currency": cart.currency,
        }

        try:
            await db.execute(query, params)
        except SQLAlchemyError as e:
            logger.error("cart_save_failed", user_id=cart.user_id, error=str(e))
            raise RepositoryError(f"Failed to save cart for user {cart.user_id}") from e

        logger.info("cart_saved",
                    user_id=cart.user_id,
                    items=len(cart.items),
                    total=str(totals.total))


def _load_json(value):
    """asyncpg returns JSONB as str unless a codec is registered."""
    if isinstance(value, str):
        return json.loads(value)
    return value


# Singleton instance
cart_repository = CartRepository()
