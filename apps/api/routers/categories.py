"""
Categories API Router
Category listing, products by category, and automatic categorization
"""
import math
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import (
    get_categorization_service,
    get_category_repository,
    get_product_repository,
)
from packages.common.category_repository import CategoryRepository
from packages.common.config import get_settings
from packages.common.database import get_db_session
from packages.common.product_repository import ProductRepository
from packages.domain.categorization.categorization_service import CategorizationService
from packages.domain.categorization.schemas import CategorizationResult, ProductText

logger = structlog.get_logger()
router = APIRouter()
settings = get_settings()


class CategoryOut(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None


class CategorySelection(BaseModel):
    selection: str = Field(..., min_length=1, description="'gender-type' (e.g. men-jackets) or a slug")


def to_category_out(category) -> CategoryOut:
    return CategoryOut(
        id=str(category.id),
        name=category.name,
        slug=category.slug,
        description=category.description,
        image=category.image,
    )


def to_product_card(row: dict) -> dict:
    """Shape a product row the way the storefront grid expects it"""
    images = row.get("images") or []
    first = images[0] if images else None
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "price": row.get("base_price") or 0,
        "image": first.get("url") if isinstance(first, dict) else first,
        "category": row.get("category_name") or "Uncategorized",
        "brand": row.get("brand"),
        "is_on_sale": row.get("is_on_sale", False),
        "discounted_price": row.get("discounted_price"),
        "ratings": {
            "average": row.get("rating_average") or 0,
            "count": row.get("rating_count") or 0,
        },
    }


def build_pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
        "has_next": page * limit < total,
        "has_prev": page > 1,
    }


@router.get("", response_model=List[CategoryOut])
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
    categories: CategoryRepository = Depends(get_category_repository),
):
    """All active categories, sorted by name"""
    return [to_category_out(c) for c in await categories.list_active(db)]


@router.get("/{slug}/products")
async def list_category_products(
    slug: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.catalog_page_size, ge=1, le=settings.catalog_max_page_size),
    sort: str = Query("created_at", description="created_at, name or price"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db_session),
    categories: CategoryRepository = Depends(get_category_repository),
    products: ProductRepository = Depends(get_product_repository),
):
    """
    Paginated products in a category (primary or secondary)

    404 if the category does not exist or is inactive.
    """
    category = await categories.get_active_by_slug(slug, db)

    rows, total = await products.list_by_category(
        category.id, db, page=page, limit=limit, sort=sort, order=order
    )

    return {
        "products": [to_product_card(row) for row in rows],
        "pagination": build_pagination(page, limit, total),
        "category": to_category_out(category),
    }


@router.post("/categorize", response_model=CategorizationResult)
async def categorize_product(
    product: ProductText,
    db: AsyncSession = Depends(get_db_session),
    service: CategorizationService = Depends(get_categorization_service),
):
    """
    Run automatic categorization on product text

    Creates any category the result needs that does not exist yet.
    """
    return await service.categorize(
        name=product.name,
        description=product.description,
        brand=product.brand,
        tags=product.tags,
        db=db,
    )


@router.post("/resolve", response_model=CategoryOut)
async def resolve_category_selection(
    body: CategorySelection,
    db: AsyncSession = Depends(get_db_session),
    service: CategorizationService = Depends(get_categorization_service),
):
    """Resolve a manual category selection from the admin product form"""
    category = await service.resolve_selected_category(body.selection, db)
    return to_category_out(category)
