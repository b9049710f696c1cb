"""
Product Repository - the slice of product persistence the catalog and the
categorizer need (listing by category, bulk recategorization)
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.errors import ProductNotFoundError, RepositoryError

logger = structlog.get_logger()

# Column whitelist for ORDER BY (never interpolate user input directly)
SORTABLE_COLUMNS = {
    "createdAt": "p.created_at",
    "created_at": "p.created_at",
    "name": "p.name",
    "price": "p.base_price",
    "base_price": "p.base_price",
}
DEFAULT_SORT = "created_at"


def build_order_clause(sort: str, order: str) -> str:
    """Translate a requested sort into a safe ORDER BY clause."""
    column = SORTABLE_COLUMNS.get(sort, SORTABLE_COLUMNS[DEFAULT_SORT])
    direction = "ASC" if order.lower() == "asc" else "DESC"
    return f"{column} {direction}, p.id"


class ProductRepository:
    """Product queries (text SQL, stateless)"""

    async def list_by_category(
        self,
        category_id: UUID,
        db: AsyncSession,
        page: int = 1,
        limit: int = 12,
        sort: str = DEFAULT_SORT,
        order: str = "desc",
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Page through active products filed under a category.

        A product matches when the category is its primary or its secondary
        category.

        Returns:
            (rows for the page, total matching count)
        """
        where_sql = """
            p.is_active = TRUE
            AND (p.primary_category_id = :category_id
                 OR p.secondary_category_id = :category_id)
        """

        count_query = text(f"SELECT COUNT(*) AS total FROM products p WHERE {where_sql}")

        data_query = text(f"""
            SELECT
                p.id,
                p.name,
                p.brand,
                p.base_price,
                p.discounted_price,
                p.is_on_sale,
                p.images,
                p.rating_average,
                p.rating_count,
                c.name AS category_name
            FROM products p
            LEFT JOIN categories c ON c.id = p.primary_category_id
            WHERE {where_sql}
            ORDER BY {build_order_clause(sort, order)}
            LIMIT :limit OFFSET :offset
        """)

        params = {"category_id": category_id}

        try:
            total = (await db.execute(count_query, params)).scalar() or 0
            result = await db.execute(data_query, {
                **params,
                "limit": limit,
                "offset": (page - 1) * limit,
            })
        except SQLAlchemyError as e:
            logger.error("product_list_failed", category_id=str(category_id), error=str(e))
            raise RepositoryError("Failed to list products by category") from e

        rows = [dict(row._mapping) for row in result.fetchall()]

        logger.debug("products_listed",
                     category_id=str(category_id),
                     page=page,
                     returned=len(rows),
                     total=total)

        return rows, total

    async def get_price(
        self,
        product_id: UUID,
        db: AsyncSession,
    ) -> Tuple[Decimal, Optional[Decimal]]:
        """
        Current selling price of an active product.

        Cart lines are always priced from here, never from the request.

        Returns:
            (base_price, discounted_price); discounted_price is None when the
            product has no sale price

        Raises:
            ProductNotFoundError: unknown or inactive product
        """
        query = text("""
            SELECT base_price, discounted_price
            FROM products
            WHERE id = :product_id
              AND is_active = TRUE
        """)

        try:
            result = await db.execute(query, {"product_id": product_id})
        except SQLAlchemyError as e:
            logger.error("product_price_lookup_failed", product_id=str(product_id), error=str(e))
            raise RepositoryError(f"Failed to look up price for product {product_id}") from e

        row = result.fetchone()
        if row is None:
            raise ProductNotFoundError(product_id)

        data = row._mapping
        return data["base_price"], data["discounted_price"]

    async def list_for_recategorization(
        self,
        db: AsyncSession,
        only_uncategorized: bool = False,
    ) -> List[Dict[str, Any]]:
        """Text fields the categorizer reads, for every product."""
        where_sql = "WHERE primary_category_id IS NULL" if only_uncategorized else ""
        query = text(f"""
            SELECT id, name, description, brand, tags
            FROM products
            {where_sql}
            ORDER BY created_at
        """)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("product_scan_failed", error=str(e))
            raise RepositoryError("Failed to list products for recategorization") from e

        return [dict(row._mapping) for row in result.fetchall()]

    async def update_categories(
        self,
        product_id: UUID,
        primary_category_id: UUID,
        secondary_category_id: Optional[UUID],
        db: AsyncSession,
    ) -> bool:
        """
        Point a product at its (re)computed categories.

        Returns:
            True if the product row was updated
        """
        query = text("""
            UPDATE products
            SET
                primary_category_id = :primary_category_id,
                secondary_category_id = :secondary_category_id,
                updated_at = NOW()
            WHERE id = :product_id
        """)

        try:
            result = await db.execute(query, {
                "product_id": product_id,
                "primary_category_id": primary_category_id,
                "secondary_category_id": secondary_category_id,
            })
        except SQLAlchemyError as e:
            logger.error("product_category_update_failed",
                         product_id=str(product_id),
                         error=str(e))
            raise RepositoryError(f"Failed to update categories for product {product_id}") from e

        return result.rowcount > 0


# Singleton instance
product_repository = ProductRepository()
