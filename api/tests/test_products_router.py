"""
Tests for the product API endpoints.

The database session, candidate provider and Redis client are swapped out
through FastAPI's dependency_overrides, so no services need to be running.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from core.cache import RedisCache, get_product_cache
from core.database import get_db
from engines.search import RetrievalError, SearchEngine, SearchOptions
from main import app
from routers.products import get_search_engine


@dataclass
class MockProduct:
    """Mock product row for testing."""
    id: int
    name: str
    price: float
    description: Optional[str] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    stock: int = 0
    category_id: Optional[int] = None
    category: Any = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@pytest.fixture
def client():
    """Create a FastAPI TestClient and reset overrides afterwards."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_engine(candidate_provider, search_cache):
    def _use(provider=None, cache=None):
        engine = SearchEngine(provider or candidate_provider, cache or search_cache)
        app.dependency_overrides[get_search_engine] = lambda: engine
        return engine
    return _use


@pytest.fixture
def use_db(mock_db_session, fake_redis):
    """Route list/detail endpoints to a mock session and in-memory cache."""
    async def override_get_db():
        yield mock_db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_product_cache] = lambda: RedisCache("product", default_ttl=3600, client=fake_redis)
    return mock_db_session


def _rows_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    result.scalar_one_or_none.return_value = rows[0] if rows else None
    return result


class TestSearchEndpoint:
    """GET /api/products/search"""

    def test_ranked_results(self, client, use_engine):
        use_engine()
        response = client.get("/api/products/search", params={"query": "earbud"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [item["id"] for item in body["data"]] == [1]
        assert 0.5 < body["data"][0]["relevance_score"] <= 1.0

    def test_empty_query_lists_recent_products(self, client, use_engine, fake_redis):
        use_engine()
        response = client.get("/api/products/search", params={"query": "", "limit": 2})

        assert response.status_code == 200
        assert [item["id"] for item in response.json()["data"]] == [1, 2]
        assert fake_redis.store == {}

    def test_filters_are_applied(self, client, use_engine, candidate_provider):
        use_engine()
        response = client.get(
            "/api/products/search",
            params={"query": "stand", "category_id": 3, "min_price": 30, "max_price": 40},
        )

        assert [item["id"] for item in response.json()["data"]] == [4]
        filters = candidate_provider.calls[0]["filters"]
        assert (filters.category_id, filters.min_price, filters.max_price) == (3, 30.0, 40.0)

    @pytest.mark.parametrize("params", [
        {},
        {"query": "watch", "limit": 0},
        {"query": "watch", "limit": 101},
        {"query": "watch", "offset": -1},
        {"query": "watch", "min_price": "cheap"},
        {"query": "watch", "min_price": 50, "max_price": 10},
    ])
    def test_invalid_parameters(self, client, use_engine, params):
        use_engine()
        response = client.get("/api/products/search", params=params)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid search parameters"}

    def test_retrieval_failure(self, client, use_engine):
        provider = MagicMock()
        provider.fetch = AsyncMock(side_effect=RetrievalError("catalog store unavailable"))
        use_engine(provider=provider)

        response = client.get("/api/products/search", params={"query": "watch"})

        assert response.status_code == 503
        assert response.json() == {"success": False, "error": "Failed to search products"}

    def test_long_query_is_accepted(self, client, use_engine):
        use_engine()
        response = client.get("/api/products/search", params={"query": "smart watch " * 20})

        assert response.status_code == 200
        assert [item["id"] for item in response.json()["data"]] == [3]

    def test_cache_outage_does_not_fail_search(self, client, use_engine, broken_cache):
        use_engine(cache=broken_cache)
        response = client.get("/api/products/search", params={"query": "smart watch"})

        assert response.status_code == 200
        assert [item["id"] for item in response.json()["data"]] == [3]


class TestListEndpoint:
    """GET /api/products"""

    def test_lists_and_caches_products(self, client, use_db, fake_redis):
        use_db.execute = AsyncMock(return_value=_rows_result([
            MockProduct(id=2, name="Wired Headphones", price=89.0, created_at=datetime(2024, 1, 2)),
            MockProduct(id=1, name="Wireless Earbuds", price=59.0, created_at=datetime(2024, 1, 1)),
        ]))

        first = client.get("/api/products", params={"limit": 2})
        second = client.get("/api/products", params={"limit": 2})

        assert first.status_code == 200
        assert [item["id"] for item in first.json()["data"]] == [2, 1]
        assert second.json() == first.json()
        use_db.execute.assert_awaited_once()
        assert "product:products:" + SearchOptions(limit=2).canonical_json() in fake_redis.store

    def test_served_without_trailing_slash(self, client, use_db):
        use_db.execute = AsyncMock(return_value=_rows_result([]))

        response = client.get("/api/products", follow_redirects=False)

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_zero_category_is_cached_separately(self, client, use_db, fake_redis):
        use_db.execute = AsyncMock(side_effect=[
            _rows_result([MockProduct(id=1, name="Wireless Earbuds", price=59.0, category_id=5)]),
            _rows_result([]),
        ])

        unfiltered = client.get("/api/products")
        category_zero = client.get("/api/products", params={"category_id": 0})

        assert [item["id"] for item in unfiltered.json()["data"]] == [1]
        assert category_zero.json()["data"] == []
        assert use_db.execute.await_count == 2
        assert len(fake_redis.store) == 2

    def test_invalid_parameters(self, client, use_db):
        response = client.get("/api/products", params={"limit": "many"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid query parameters"}

    def test_database_failure(self, client, use_db):
        use_db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        response = client.get("/api/products")

        assert response.status_code == 503
        assert response.json() == {"success": False, "error": "Failed to fetch products"}


class TestDetailEndpoint:
    """GET /api/products/{product_id}"""

    def test_returns_product(self, client, use_db):
        use_db.execute = AsyncMock(return_value=_rows_result([
            MockProduct(id=5, name="Mechanical Keyboard", price=129.0, sku="ACC-500"),
        ]))

        response = client.get("/api/products/5")

        assert response.status_code == 200
        assert response.json()["data"]["sku"] == "ACC-500"

    def test_not_found(self, client, use_db):
        use_db.execute = AsyncMock(return_value=_rows_result([]))

        response = client.get("/api/products/999")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Product not found"}


class TestHealth:
    """GET /health"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers
