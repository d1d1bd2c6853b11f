"""
Redis-backed key/value cache with per-domain key prefixes.

Each cache domain (products, search results) gets its own RedisCache
instance so keys never collide across unrelated cache usage. Every Redis
error is re-raised as CacheUnavailableError; callers decide how to degrade.
"""
import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from core.config import settings
from engines.search.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Redis client singleton (shared connection pool for all cache domains)
# ---------------------------------------------------------------------------
_redis_client: Optional[aioredis.Redis] = None


def get_redis_client() -> aioredis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = aioredis.from_url(settings.redis_url)
        logger.info("Redis client created")
    return _redis_client


async def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("Redis client closed")


class RedisCache:
    """Namespaced cache over a shared Redis client"""

    def __init__(self, prefix: str, default_ttl: int = 3600, client: Optional[aioredis.Redis] = None):
        self.prefix = prefix
        self.default_ttl = default_ttl
        self._client = client

    @property
    def client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await self.client.get(self._key(key))
        except RedisError as e:
            raise CacheUnavailableError(f"GET {self._key(key)} failed: {e}") from e

    async def set(self, key: str, value: bytes, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl
        try:
            await self.client.set(self._key(key), value, ex=ttl)
        except RedisError as e:
            raise CacheUnavailableError(f"SET {self._key(key)} failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(self._key(key))
        except RedisError as e:
            raise CacheUnavailableError(f"DEL {self._key(key)} failed: {e}") from e

    async def exists(self, key: str) -> bool:
        try:
            return await self.client.exists(self._key(key)) == 1
        except RedisError as e:
            raise CacheUnavailableError(f"EXISTS {self._key(key)} failed: {e}") from e

    async def flush(self) -> int:
        """Delete every key under this cache's prefix. Returns the number removed."""
        try:
            keys = [key async for key in self.client.scan_iter(match=f"{self.prefix}:*")]
            if not keys:
                return 0
            removed = await self.client.delete(*keys)
        except RedisError as e:
            raise CacheUnavailableError(f"FLUSH {self.prefix}:* failed: {e}") from e

        logger.info(f"Flushed {removed} keys from '{self.prefix}' cache")
        return removed


def get_search_cache() -> RedisCache:
    """FastAPI dependency for the search result cache"""
    return RedisCache(settings.search_cache_prefix, settings.search_cache_ttl)


def get_product_cache() -> RedisCache:
    """FastAPI dependency for the product cache"""
    return RedisCache(settings.product_cache_prefix, settings.product_cache_ttl)
