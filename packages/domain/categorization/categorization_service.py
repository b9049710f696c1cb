"""
Categorization Service - keyword classification + category resolution

Flow:
1. Stage 1 (pure): classifier.classify() turns product text into tags
2. Stage 2 (repository): each tag is resolved to a stored Category,
   creating it on first sight (get-or-create by slug)

Example:
- Input: "Men's Leather Belt"
- Stage 1: primary=men (explicit marker), secondary=accessories ("belt")
- Stage 2: men → categories.slug='men', accessories → 'accessories'
- Output: CategorizationResult with both category ids, confidence high/high

Category creation is the only side effect. It is idempotent: concurrent
first-time requests for the same tag end with one category row.
"""
from typing import Any, Dict, Optional, Protocol, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.category_repository import Category, category_repository
from packages.common.config import get_settings
from packages.common.errors import CategoryNotFoundError, StorefrontError
from packages.common.product_repository import product_repository
from packages.domain.categorization.classifier import MatchMode, classify
from packages.domain.categorization.schemas import (
    CategorizationResult,
    ConfidenceLabels,
    DetectedKeywords,
    DetectedTags,
)
from packages.domain.categorization.slugs import default_description, display_name, slugify

logger = structlog.get_logger()


class CategoryStore(Protocol):
    """Lookup/creation collaborator the service needs"""

    async def find_by_slug(self, slug: str, db: AsyncSession) -> Optional[Category]:
        ...

    async def create_if_absent(
        self,
        name: str,
        slug: str,
        description: Optional[str],
        db: AsyncSession,
    ) -> Category:
        ...


class CategorizationService:
    """
    Assigns products to a primary (gender) and secondary (product type)
    category.

    Usage:
        service = CategorizationService()
        result = await service.categorize(
            name="Women's Floral Maxi Dress",
            description="Lightweight summer dress",
            brand="Thrifty",
            tags=["summer"],
            db=db_session,
        )
        print(result.primary_category_id, result.confidence.primary)
    """

    def __init__(
        self,
        repository: Optional[CategoryStore] = None,
        match_mode: Optional[MatchMode] = None,
        products=None,
    ):
        self.repository = repository or category_repository
        self.products = products or product_repository
        self.match_mode = match_mode or MatchMode(get_settings().keyword_match_mode)

    def detect(
        self,
        name: Optional[str] = "",
        description: Optional[str] = "",
        brand: Optional[str] = "",
        tags: Optional[Sequence[str]] = None,
    ) -> DetectedTags:
        """Stage 1 only (no database)."""
        return classify(name, description, brand, tags, match_mode=self.match_mode)

    async def categorize(
        self,
        name: Optional[str],
        description: Optional[str],
        brand: Optional[str],
        tags: Optional[Sequence[str]],
        db: AsyncSession,
    ) -> CategorizationResult:
        """
        Categorize a product and resolve the result to stored categories.

        Args:
            name: Product name
            description: Product description
            brand: Brand
            tags: Free-form tags
            db: Database session for category get-or-create

        Returns:
            CategorizationResult (primary always set)

        Raises:
            RepositoryError: category lookup/creation failed
        """
        detected = self.detect(name, description, brand, tags)

        logger.info("categorization_detected",
                    product=name,
                    primary=detected.primary.value,
                    secondary=detected.secondary.value if detected.secondary else None,
                    primary_confidence=detected.primary_confidence.value,
                    matched=detected.matched_keywords)

        primary = await self.get_or_create_category(detected.primary.value, db)
        secondary = (
            await self.get_or_create_category(detected.secondary.value, db)
            if detected.secondary
            else None
        )

        result = CategorizationResult(
            primary_category_id=primary.id,
            secondary_category_id=secondary.id if secondary else None,
            confidence=ConfidenceLabels(
                primary=detected.primary_confidence,
                secondary=detected.secondary_confidence,
            ),
            detected_keywords=DetectedKeywords(
                primary=detected.primary.value,
                secondary=detected.secondary.value if detected.secondary else None,
                matched=detected.matched_keywords,
            ),
        )

        logger.info("categorization_complete",
                    product=name,
                    primary_category=primary.slug,
                    secondary_category=secondary.slug if secondary else None)

        return result

    async def get_or_create_category(self, tag: str, db: AsyncSession) -> Category:
        """Resolve a tag to its category, creating it on first use."""
        slug = slugify(tag)

        category = await self.repository.find_by_slug(slug, db)
        if category is not None:
            return category

        logger.info("category_missing_creating", tag=tag, slug=slug)
        return await self.repository.create_if_absent(
            display_name(tag),
            slug,
            default_description(tag),
            db,
        )

    async def resolve_selected_category(self, selection: str, db: AsyncSession) -> Category:
        """
        Resolve a manual category choice from the admin product form.

        "<gender>-<type>" (e.g. "men-jackets") maps to the category
        "Men Jackets", created if needed. Anything else must be the slug of
        an existing active category.

        Raises:
            CategoryNotFoundError: plain slug with no active category
        """
        selection = selection.strip()

        if "-" in selection:
            gender, category_type = selection.split("-", 1)
            name = f"{display_name(gender.lower())} {display_name(category_type.lower())}"
            slug = slugify(name)

            category = await self.repository.find_by_slug(slug, db)
            if category is None:
                category = await self.repository.create_if_absent(name, slug, f"{name} category", db)

            logger.info("manual_category_selected", selection=selection, slug=category.slug)
            return category

        category = await self.repository.find_by_slug(slugify(selection), db)
        if category is None or not category.is_active:
            raise CategoryNotFoundError(selection)
        return category

    async def recategorize_products(
        self,
        db: AsyncSession,
        only_uncategorized: bool = False,
    ) -> Dict[str, Any]:
        """
        Re-run categorization over stored products and update their
        category references.

        Each product runs in its own savepoint so one failure does not undo
        or block the others.

        Returns:
            Counts: processed, updated, failed
        """
        products = await self.products.list_for_recategorization(db, only_uncategorized)

        logger.info("recategorization_started",
                    product_count=len(products),
                    only_uncategorized=only_uncategorized)

        updated = 0
        failed = 0

        for product in products:
            try:
                async with db.begin_nested():
                    result = await self.categorize(
                        name=product.get("name"),
                        description=product.get("description"),
                        brand=product.get("brand"),
                        tags=product.get("tags") or [],
                        db=db,
                    )
                    changed = await self.products.update_categories(
                        product["id"],
                        result.primary_category_id,
                        result.secondary_category_id,
                        db,
                    )
            except StorefrontError as e:
                failed += 1
                logger.error("product_recategorization_failed",
                             product_id=str(product["id"]),
                             error=str(e))
                continue

            if changed:
                updated += 1

        summary = {
            "processed": len(products),
            "updated": updated,
            "failed": failed,
        }

        logger.info("recategorization_complete", **summary)

        return summary


# Singleton instance
categorization_service = CategorizationService()
