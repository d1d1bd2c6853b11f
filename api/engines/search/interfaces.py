"""
Collaborator interfaces consumed by the search engine.

The engine depends on these protocols rather than on SQLAlchemy or Redis
directly, so any catalog store or key/value cache can back it.
"""
from typing import List, Optional, Protocol

from .schemas import CandidateFilters, CandidateRecord


class CandidateProvider(Protocol):
    """
    Read-only, filtered access to catalog records.

    Results are ordered by recency (newest first), paginated with standard
    offset/limit semantics, and price bounds are inclusive.
    """

    async def fetch(self, filters: CandidateFilters, limit: int, offset: int) -> List[CandidateRecord]:
        ...


class ResultCache(Protocol):
    """
    Key/value store with per-entry TTL.

    Implementations raise CacheUnavailableError when the backend fails.
    """

    async def get(self, key: str) -> Optional[bytes]:
        ...

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...
