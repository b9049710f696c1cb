import json
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from packages.common.cart_repository import CartRepository
from packages.common.category_repository import CategoryRepository
from packages.common.coupon_repository import CouponRepository
from packages.common.errors import (
    CategoryNotFoundError,
    CouponNotFoundError,
    ProductNotFoundError,
    RepositoryError,
)
from packages.common.product_repository import ProductRepository, build_order_clause
from packages.domain.pricing.cart import Cart
from packages.domain.pricing.schemas import CouponType, VariantSelection


def category_row(slug="men", name="Men", is_active=True):
    return {
        "id": uuid4(),
        "name": name,
        "slug": slug,
        "description": f"{name} clothing and accessories",
        "image": None,
        "is_active": is_active,
        "sort_order": 0,
        "created_at": datetime(2026, 1, 5, tzinfo=timezone.utc),
    }


def duplicate_key():
    return IntegrityError("INSERT INTO categories", {}, Exception("duplicate key value"))


class TestCategoryRepository:
    async def test_find_by_slug_missing(self, scripted_session, fake_result):
        db = scripted_session([fake_result()])

        assert await CategoryRepository().find_by_slug("men", db) is None
        assert db.statements[0][1] == {"slug": "men"}

    async def test_create_inserts_in_savepoint(self, scripted_session, fake_result):
        row = category_row()
        db = scripted_session([fake_result([row])])

        category = await CategoryRepository().create_if_absent("Men", "men", "desc", db)

        assert category.id == row["id"]
        assert db.savepoints == 1
        assert "INSERT INTO categories" in db.statements[0][0]

    async def test_create_conflict_returns_winner(self, scripted_session, fake_result):
        winner = category_row()
        db = scripted_session([duplicate_key(), fake_result([winner])])

        category = await CategoryRepository().create_if_absent("Men", "men", "desc", db)

        assert category.id == winner["id"]
        assert len(db.statements) == 2

    async def test_create_conflict_without_winner_is_an_error(self, scripted_session, fake_result):
        db = scripted_session([duplicate_key(), fake_result()])

        with pytest.raises(RepositoryError):
            await CategoryRepository().create_if_absent("Men", "men", "desc", db)

    async def test_database_failure_is_wrapped(self, scripted_session):
        cause = OperationalError("SELECT", {}, Exception("connection refused"))
        db = scripted_session([cause])

        with pytest.raises(RepositoryError) as exc_info:
            await CategoryRepository().find_by_slug("men", db)

        assert exc_info.value.__cause__ is cause

    async def test_get_active_by_slug_rejects_inactive(self, scripted_session, fake_result):
        db = scripted_session([fake_result([category_row("sale", "Sale", is_active=False)])])

        with pytest.raises(CategoryNotFoundError):
            await CategoryRepository().get_active_by_slug("sale", db)

    async def test_list_active(self, scripted_session, fake_result):
        db = scripted_session([fake_result([category_row("kids", "Kids"), category_row("men", "Men")])])

        categories = await CategoryRepository().list_active(db)

        assert [c.slug for c in categories] == ["kids", "men"]


class TestProductRepository:
    @pytest.mark.parametrize("sort, order, clause", [
        ("price", "asc", "p.base_price ASC, p.id"),
        ("createdAt", "desc", "p.created_at DESC, p.id"),
        ("name", "ASC", "p.name ASC, p.id"),
        ("id; DROP TABLE products", "desc", "p.created_at DESC, p.id"),
    ])
    def test_build_order_clause(self, sort, order, clause):
        assert build_order_clause(sort, order) == clause

    async def test_list_by_category_pages(self, scripted_session, fake_result):
        category_id = uuid4()
        row = {"id": uuid4(), "name": "Oxford Shirt", "base_price": Decimal("899.00")}
        db = scripted_session([fake_result(scalar=30), fake_result([row])])

        rows, total = await ProductRepository().list_by_category(category_id, db, page=3, limit=12)

        assert total == 30
        assert rows == [row]
        params = db.statements[1][1]
        assert params["offset"] == 24
        assert params["limit"] == 12
        assert params["category_id"] == category_id

    async def test_update_categories_reports_missing_product(self, scripted_session, fake_result):
        db = scripted_session([fake_result(rowcount=0)])

        assert await ProductRepository().update_categories(uuid4(), uuid4(), None, db) is False

    async def test_list_for_recategorization_filters_uncategorized(self, scripted_session, fake_result):
        db = scripted_session([fake_result()])

        await ProductRepository().list_for_recategorization(db, only_uncategorized=True)

        assert "primary_category_id IS NULL" in db.statements[0][0]

    async def test_get_price(self, scripted_session, fake_result):
        product_id = uuid4()
        db = scripted_session([fake_result([
            {"base_price": Decimal("2000.00"), "discounted_price": Decimal("1200.00")},
        ])])

        price = await ProductRepository().get_price(product_id, db)

        assert price == (Decimal("2000.00"), Decimal("1200.00"))
        assert "is_active = TRUE" in db.statements[0][0]
        assert db.statements[0][1] == {"product_id": product_id}

    async def test_get_price_unknown_product(self, scripted_session, fake_result):
        db = scripted_session([fake_result()])

        with pytest.raises(ProductNotFoundError):
            await ProductRepository().get_price(uuid4(), db)


class TestCartRepository:
    async def test_missing_cart_is_new_and_empty(self, scripted_session, fake_result):
        db = scripted_session([fake_result()])

        cart = await CartRepository().get_or_create("user-1", db)

        assert cart.user_id == "user-1"
        assert cart.items == []
        assert cart.totals.shipping == Decimal("100.00")

    async def test_loaded_cart_is_recalculated(self, scripted_session, fake_result):
        stored_at = datetime(2026, 3, 1, tzinfo=timezone.utc)
        db = scripted_session([fake_result([{
            "user_id": "user-1",
            "items": json.dumps([{"product_id": "p1", "price": "500", "quantity": 2}]),
            "coupon": None,
            "currency": "INR",
            "updated_at": stored_at,
        }])])

        cart = await CartRepository().get_or_create("user-1", db)

        assert cart.totals.subtotal == Decimal("1000.00")
        assert cart.totals.shipping == Decimal("100.00")
        assert cart.totals.tax == Decimal("180.00")
        assert cart.totals.total == Decimal("1280.00")
        assert cart.last_updated == stored_at

    async def test_plain_load_does_not_lock(self, scripted_session, fake_result):
        db = scripted_session([fake_result()])

        await CartRepository().get_or_create("user-1", db)

        assert len(db.statements) == 1
        assert "FOR UPDATE" not in db.statements[0][0]

    async def test_load_for_update_locks_row(self, scripted_session, fake_result):
        db = scripted_session([fake_result(rowcount=1), fake_result([{
            "user_id": "user-1",
            "items": [],
            "coupon": None,
            "currency": "INR",
            "updated_at": datetime(2026, 3, 1, tzinfo=timezone.utc),
        }])])

        cart = await CartRepository().get_or_create("user-1", db, for_update=True)

        ensure_sql, ensure_params = db.statements[0]
        assert "ON CONFLICT (user_id) DO NOTHING" in ensure_sql
        assert ensure_params["user_id"] == "user-1"
        assert "FOR UPDATE" in db.statements[1][0]
        assert cart.items == []

    async def test_load_for_update_failure_is_wrapped(self, scripted_session):
        db = scripted_session([OperationalError("INSERT INTO carts", {}, Exception("lock timeout"))])

        with pytest.raises(RepositoryError):
            await CartRepository().get_or_create("user-1", db, for_update=True)

    async def test_save_serializes_items_and_totals(self, scripted_session, fake_result):
        cart = Cart(user_id="user-1")
        cart.add_item("p1", VariantSelection(size="M"), Decimal("1500"))
        db = scripted_session([fake_result()])

        await CartRepository().save(cart, db)

        sql, params = db.statements[0]
        assert "ON CONFLICT (user_id)" in sql
        assert json.loads(params["items"])[0]["product_id"] == "p1"
        assert params["coupon"] is None
        assert params["total"] == Decimal("1770.00")


class TestCouponRepository:
    async def test_find_active_normalizes_code(self, scripted_session, fake_result):
        db = scripted_session([fake_result([{
            "code": "SAVE10",
            "discount": Decimal("10.00"),
            "type": "percentage",
            "min_amount": Decimal("1000.00"),
        }])])

        coupon = await CouponRepository().find_active("  save10 ", db)

        assert coupon.code == "SAVE10"
        assert coupon.type == CouponType.PERCENTAGE
        assert coupon.min_amount == Decimal("1000.00")
        assert db.statements[0][1] == {"code": "SAVE10"}
        assert "expires_at" in db.statements[0][0]

    async def test_unknown_or_expired_code(self, scripted_session, fake_result):
        db = scripted_session([fake_result()])

        with pytest.raises(CouponNotFoundError) as exc_info:
            await CouponRepository().find_active("old20", db)

        assert exc_info.value.code == "OLD20"
