"""
Pytest configuration and fixtures for the catalog search API tests.
"""
import fnmatch
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from core.cache import RedisCache
from engines.search.schemas import CandidateFilters, CandidateRecord

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def build_record(
    id: int,
    name: str,
    description: str = "",
    sku: str = "",
    price: float = 100.0,
    category_id: Optional[int] = 1,
    age_days: int = 0,
) -> CandidateRecord:
    """Build a candidate record; larger age_days means older."""
    return CandidateRecord(
        id=id,
        name=name,
        description=description,
        sku=sku,
        price=price,
        category_id=category_id,
        created_at=BASE_TIME - timedelta(days=age_days),
    )


class InMemoryCandidateProvider:
    """CandidateProvider over a fixed list of records, newest first."""

    def __init__(self, records: List[CandidateRecord]):
        self.records = records
        self.calls = []

    async def fetch(self, filters: CandidateFilters, limit: int, offset: int) -> List[CandidateRecord]:
        self.calls.append({"filters": filters, "limit": limit, "offset": offset})
        matching = [
            r for r in self.records
            if (filters.category_id is None or r.category_id == filters.category_id)
            and (filters.min_price is None or r.price >= filters.min_price)
            and (filters.max_price is None or r.price <= filters.max_price)
        ]
        matching.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return matching[offset:offset + limit]


class FakeRedis:
    """Dict-backed stand-in for the redis.asyncio client methods RedisCache uses."""

    def __init__(self):
        self.store: Dict[str, bytes] = {}
        self.ttls: Dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def exists(self, key):
        return 1 if key in self.store else 0

    async def scan_iter(self, match=None):
        for key in list(self.store):
            if match is None or fnmatch.fnmatch(key, match):
                yield key


class BrokenRedis:
    """Client whose every call fails as if the server were down."""

    async def get(self, key):
        raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("connection refused")

    async def delete(self, *keys):
        raise RedisConnectionError("connection refused")

    async def exists(self, key):
        raise RedisConnectionError("connection refused")


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def search_cache(fake_redis):
    """Search result cache backed by the in-memory Redis fake."""
    return RedisCache("search", default_ttl=1800, client=fake_redis)


@pytest.fixture
def broken_cache():
    """Search result cache whose backend is unreachable."""
    return RedisCache("search", default_ttl=1800, client=BrokenRedis())


# Test data fixtures

SAMPLE_RECORDS = [
    build_record(1, "Wireless Earbuds", "Bluetooth in-ear buds with charging case", "AUD-100", price=59.0, category_id=1, age_days=1),
    build_record(2, "Wired Headphones", "Over-ear studio headphones", "AUD-200", price=89.0, category_id=1, age_days=2),
    build_record(3, "Smart Watch", "Fitness tracker with heart rate monitor", "WEA-300", price=199.0, category_id=2, age_days=3),
    build_record(4, "Laptop Stand", "Adjustable aluminium stand for notebooks", "ACC-400", price=39.0, category_id=3, age_days=4),
    build_record(5, "Mechanical Keyboard", "Hot-swappable switches, RGB backlight", "ACC-500", price=129.0, category_id=3, age_days=5),
]


@pytest.fixture
def sample_records():
    """Return sample catalog records, newest first."""
    return list(SAMPLE_RECORDS)


@pytest.fixture
def candidate_provider(sample_records):
    return InMemoryCandidateProvider(sample_records)


@pytest.fixture
def make_record():
    """Factory fixture for candidate records."""
    return build_record


@pytest.fixture
def make_provider():
    """Factory fixture for in-memory candidate providers."""
    return InMemoryCandidateProvider
