import asyncio
from contextlib import asynccontextmanager
from uuid import uuid4

import pytest

from packages.common.category_repository import Category
from packages.common.errors import CategoryNotFoundError, ProductNotFoundError, RepositoryError
from packages.domain.categorization.categorization_service import CategorizationService
from packages.domain.categorization.classifier import MatchMode


class FakeSession:
    """Stands in for AsyncSession where only savepoints are used"""

    def __init__(self):
        self.savepoints = 0

    @asynccontextmanager
    async def begin_nested(self):
        self.savepoints += 1
        yield self


class FakeRow:
    def __init__(self, mapping):
        self._mapping = mapping


class FakeResult:
    def __init__(self, rows=None, scalar=None, rowcount=0):
        self._rows = [FakeRow(row) for row in rows or []]
        self._scalar = scalar
        self.rowcount = rowcount

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def scalar(self):
        return self._scalar


class ScriptedSession(FakeSession):
    """
    Replays queued responses to execute() in order; an exception in the
    queue is raised instead of returned.
    """

    def __init__(self, responses):
        super().__init__()
        self.responses = list(responses)
        self.statements = []

    async def execute(self, query, params=None):
        self.statements.append((str(query), params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeCategoryStore:
    """
    In-memory category table with a unique slug.

    find_by_slug yields after reading, so concurrent callers can all miss;
    the check-and-insert in create_if_absent has no await, so it is atomic
    the way the database constraint is.
    """

    def __init__(self):
        self.rows = {}
        self.create_calls = 0

    def add(self, name, slug, is_active=True):
        category = Category(id=uuid4(), name=name, slug=slug, is_active=is_active)
        self.rows[slug] = category
        return category

    async def find_by_slug(self, slug, db):
        category = self.rows.get(slug)
        await asyncio.sleep(0)
        return category

    async def create_if_absent(self, name, slug, description, db):
        self.create_calls += 1
        existing = self.rows.get(slug)
        if existing is not None:
            return existing
        category = Category(id=uuid4(), name=name, slug=slug, description=description)
        self.rows[slug] = category
        return category

    async def list_active(self, db):
        return sorted((c for c in self.rows.values() if c.is_active), key=lambda c: c.name)

    async def get_active_by_slug(self, slug, db):
        category = self.rows.get(slug)
        if category is None or not category.is_active:
            raise CategoryNotFoundError(slug)
        return category


class FakeProductRepository:
    def __init__(self, products=None, rowcounts=None, failing_ids=()):
        self.products = products or []
        self.rowcounts = rowcounts or {}
        self.failing_ids = set(failing_ids)
        self.updates = []
        self.listed_with = None
        self.category_rows = []
        self.category_total = 0
        self.prices = {}

    async def get_price(self, product_id, db):
        if product_id not in self.prices:
            raise ProductNotFoundError(product_id)
        return self.prices[product_id]

    async def list_for_recategorization(self, db, only_uncategorized=False):
        self.listed_with = only_uncategorized
        return list(self.products)

    async def update_categories(self, product_id, primary_id, secondary_id, db):
        if product_id in self.failing_ids:
            raise RepositoryError(f"update failed for {product_id}")
        self.updates.append((product_id, primary_id, secondary_id))
        return self.rowcounts.get(product_id, True)

    async def list_by_category(self, category_id, db, page=1, limit=12, sort="created_at", order="desc"):
        return list(self.category_rows), self.category_total


@pytest.fixture
def fake_db():
    return FakeSession()


@pytest.fixture
def category_store():
    return FakeCategoryStore()


@pytest.fixture
def product_repo():
    return FakeProductRepository()


@pytest.fixture
def service(category_store, product_repo):
    return CategorizationService(
        repository=category_store,
        match_mode=MatchMode.WORD,
        products=product_repo,
    )


@pytest.fixture
def scripted_session():
    return ScriptedSession


@pytest.fixture
def fake_result():
    return FakeResult
