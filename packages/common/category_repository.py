"""
Category Repository - get-or-create lookups for the product categorizer

Slug uniqueness is enforced by the database (unique constraint on
categories.slug), not by this class. create_if_absent() inserts inside a
savepoint and, when the insert loses a race to a concurrent request, reads
back the row that won. Callers never see a duplicate-key error and never get
two categories with the same slug.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

import structlog
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.errors import CategoryNotFoundError, RepositoryError

logger = structlog.get_logger()

_CATEGORY_COLUMNS = """
    id,
    name,
    slug,
    description,
    image,
    is_active,
    sort_order,
    created_at
"""


class Category(BaseModel):
    """Persisted category record"""
    id: UUID
    name: str
    slug: str = Field(..., description="Unique URL-safe identifier")
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    created_at: Optional[datetime] = None


class CategoryRepository:
    """
    Repository for category reads and idempotent creation.

    Stateless: every method takes the session it should run in.
    """

    async def find_by_slug(self, slug: str, db: AsyncSession) -> Optional[Category]:
        """
        Look up a category by slug (active or not).

        Returns:
            Category or None if no row has this slug
        """
        query = text(f"""
            SELECT {_CATEGORY_COLUMNS}
            FROM categories
            WHERE slug = :slug
        """)

        try:
            result = await db.execute(query, {"slug": slug})
        except SQLAlchemyError as e:
            logger.error("category_lookup_failed", slug=slug, error=str(e))
            raise RepositoryError(f"Failed to look up category {slug!r}") from e

        row = result.fetchone()
        if row is None:
            return None
        return Category(**dict(row._mapping))

    async def create_if_absent(
        self,
        name: str,
        slug: str,
        description: Optional[str],
        db: AsyncSession,
    ) -> Category:
        """
        Create a category unless one with this slug already exists.

        Safe under concurrent duplicate attempts: the loser of an insert race
        gets the winner's row.

        Args:
            name: Display name (e.g. "Men")
            slug: Unique slug (e.g. "men")
            description: Default description
            db: Database session

        Returns:
            The created or pre-existing Category
        """
        query = text(f"""
            INSERT INTO categories (
                id,
                name,
                slug,
                description,
                is_active,
                sort_order,
                created_at
            ) VALUES (
                :id,
                :name,
                :slug,
                :description,
                TRUE,
                0,
                NOW()
            )
            RETURNING {_CATEGORY_COLUMNS}
        """)

        try:
            async with db.begin_nested():
                result = await db.execute(query, {
                    "id": uuid4(),
                    "name": name,
                    "slug": slug,
                    "description": description,
                })
                row = result.fetchone()
        except IntegrityError:
            logger.info("category_create_conflict", slug=slug)
            existing = await self.find_by_slug(slug, db)
            if existing is None:
                raise RepositoryError(
                    f"Category {slug!r} conflicted on insert but could not be re-read"
                )
            return existing
        except SQLAlchemyError as e:
            logger.error("category_create_failed", slug=slug, error=str(e))
            raise RepositoryError(f"Failed to create category {slug!r}") from e

        logger.info("category_created", name=name, slug=slug)
        return Category(**dict(row._mapping))

    async def list_active(self, db: AsyncSession) -> List[Category]:
        """All active categories sorted by name."""
        query = text(f"""
            SELECT {_CATEGORY_COLUMNS}
            FROM categories
            WHERE is_active = TRUE
            ORDER BY name
        """)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("category_list_failed", error=str(e))
            raise RepositoryError("Failed to list categories") from e

        return [Category(**dict(row._mapping)) for row in result.fetchall()]

    async def get_active_by_slug(self, slug: str, db: AsyncSession) -> Category:
        """
        Get an active category by slug.

        Raises:
            CategoryNotFoundError: if missing or inactive
        """
        category = await self.find_by_slug(slug, db)
        if category is None or not category.is_active:
            raise CategoryNotFoundError(slug)
        return category


# Singleton instance
category_repository = CategoryRepository()
