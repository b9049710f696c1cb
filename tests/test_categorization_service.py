import asyncio
from uuid import uuid4

import pytest

from packages.common.errors import CategoryNotFoundError
from packages.domain.categorization.schemas import Confidence


class TestCategorize:
    async def test_creates_missing_categories(self, service, category_store, fake_db):
        result = await service.categorize("Men's Leather Belt", "", "", [], fake_db)

        men = category_store.rows["men"]
        accessories = category_store.rows["accessories"]
        assert result.primary_category_id == men.id
        assert result.secondary_category_id == accessories.id
        assert men.name == "Men"
        assert men.description == "Men clothing and accessories"
        assert accessories.name == "Accessories"

    async def test_reuses_existing_categories(self, service, category_store, fake_db):
        existing = category_store.add("Women", "women")

        result = await service.categorize("Women's Kurta", "", "", [], fake_db)

        assert result.primary_category_id == existing.id
        assert category_store.create_calls == 0

    async def test_reports_labels_and_keywords(self, service, fake_db):
        result = await service.categorize("Men's Leather Belt", "", "", [], fake_db)

        assert result.confidence.primary == Confidence.HIGH
        assert result.confidence.secondary == Confidence.HIGH
        assert result.detected_keywords.primary == "men"
        assert result.detected_keywords.secondary == "accessories"
        assert "belt" in result.detected_keywords.matched["accessories"]

    async def test_unmatched_product_goes_to_unisex(self, service, category_store, fake_db):
        result = await service.categorize("Blue Widget", None, None, None, fake_db)

        assert result.primary_category_id == category_store.rows["unisex"].id
        assert result.secondary_category_id is None
        assert result.confidence.primary == Confidence.LOW
        assert result.confidence.secondary == Confidence.LOW
        assert result.detected_keywords.secondary is None

    async def test_concurrent_first_use_creates_one_category(self, service, category_store, fake_db):
        results = await asyncio.gather(*(
            service.categorize("Men's Oxford Shirt", "", "", [], fake_db)
            for _ in range(10)
        ))

        assert set(category_store.rows) == {"men"}
        assert category_store.create_calls == 10
        assert {r.primary_category_id for r in results} == {category_store.rows["men"].id}

    def test_detect_does_not_touch_storage(self, service, category_store):
        detected = service.detect(name="Kids Sneakers")

        assert detected.primary.value == "kids"
        assert detected.secondary.value == "footwear"
        assert category_store.rows == {}


class TestResolveSelectedCategory:
    async def test_gender_type_selection_is_created(self, service, category_store, fake_db):
        category = await service.resolve_selected_category("men-jackets", fake_db)

        assert category.name == "Men Jackets"
        assert category.slug == "men-jackets"
        assert category.description == "Men Jackets category"

    async def test_gender_type_selection_is_reused(self, service, fake_db):
        first = await service.resolve_selected_category("women-tops", fake_db)
        second = await service.resolve_selected_category("Women-Tops", fake_db)

        assert first.id == second.id
        assert second.name == "Women Tops"

    async def test_plain_slug_must_exist(self, service, category_store, fake_db):
        kids = category_store.add("Kids", "kids")

        assert (await service.resolve_selected_category("kids", fake_db)).id == kids.id

        with pytest.raises(CategoryNotFoundError):
            await service.resolve_selected_category("outerwear", fake_db)

    async def test_inactive_category_is_not_selectable(self, service, category_store, fake_db):
        category_store.add("Sale", "sale", is_active=False)

        with pytest.raises(CategoryNotFoundError) as exc_info:
            await service.resolve_selected_category("sale", fake_db)

        assert exc_info.value.slug == "sale"


class TestRecategorizeProducts:
    async def test_counts_updated_and_failed(self, service, product_repo, fake_db):
        shirt, dress, ghost, broken = uuid4(), uuid4(), uuid4(), uuid4()
        product_repo.products = [
            {"id": shirt, "name": "Men's Shirt", "description": None, "brand": None, "tags": None},
            {"id": dress, "name": "Floral Dress", "description": "", "brand": "", "tags": ["ladies"]},
            {"id": ghost, "name": "Deleted Item", "description": "", "brand": "", "tags": []},
            {"id": broken, "name": "Tote Bag", "description": "", "brand": "", "tags": []},
        ]
        product_repo.rowcounts = {ghost: False}
        product_repo.failing_ids = {broken}

        summary = await service.recategorize_products(fake_db)

        assert summary == {"processed": 4, "updated": 2, "failed": 1}
        assert fake_db.savepoints == 4
        assert [update[0] for update in product_repo.updates] == [shirt, dress, ghost]

    async def test_only_uncategorized_is_passed_through(self, service, product_repo, fake_db):
        summary = await service.recategorize_products(fake_db, only_uncategorized=True)

        assert product_repo.listed_with is True
        assert summary == {"processed": 0, "updated": 0, "failed": 0}

    async def test_updates_point_at_resolved_categories(self, service, category_store, product_repo, fake_db):
        product_id = uuid4()
        product_repo.products = [
            {"id": product_id, "name": "Women's Sandals", "description": "", "brand": "", "tags": []},
        ]

        await service.recategorize_products(fake_db)

        assert product_repo.updates == [(
            product_id,
            category_store.rows["women"].id,
            category_store.rows["footwear"].id,
        )]
