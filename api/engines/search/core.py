"""
Search Engine Core

Main orchestration class for typo-tolerant product search.
"""
import asyncio
import hashlib
from typing import List, Optional

from pydantic import ValidationError

from middleware.logging_middleware import get_logger

from .exceptions import CacheUnavailableError
from .interfaces import CandidateProvider, ResultCache
from .schemas import ScoredCandidate, SearchOptions, SearchResult
from .scoring_service import ScoringService
from .text_matching import tokenize

logger = get_logger(__name__)

# Relevance reported for unranked (empty query) listings
UNRANKED_RELEVANCE = 1.0


class SearchEngine:
    """
    Main Search Engine

    Ranks catalog records against a free-text query. Only a bounded window of
    recent records matching the structural filters is scored:
    max(limit * window_multiplier, window_min) records. Anything outside that
    window is never returned, however well its text matches, so results are
    precise within the window but not recall-complete over the catalog.

    Holds no state beyond its injected collaborators; build one per request.
    """

    def __init__(
        self,
        provider: CandidateProvider,
        cache: ResultCache,
        scoring_service: Optional[ScoringService] = None,
        cache_ttl: int = 1800,
        window_multiplier: int = 3,
        window_min: int = 60,
    ):
        self.provider = provider
        self.cache = cache
        self.scoring_service = scoring_service or ScoringService()
        self.cache_ttl = cache_ttl
        self.window_multiplier = window_multiplier
        self.window_min = window_min

    @classmethod
    def from_settings(cls, provider: CandidateProvider, cache: ResultCache, settings) -> "SearchEngine":
        return cls(
            provider=provider,
            cache=cache,
            scoring_service=ScoringService(
                min_relevance=settings.search_min_relevance,
                fuzzy_threshold=settings.search_fuzzy_threshold,
            ),
            cache_ttl=settings.search_cache_ttl,
            window_multiplier=settings.search_window_multiplier,
            window_min=settings.search_window_min,
        )

    def window_size(self, limit: int) -> int:
        return max(limit * self.window_multiplier, self.window_min)

    @staticmethod
    def normalize_query(query: str) -> str:
        return query.strip().lower()

    @staticmethod
    def cache_key(normalized_query: str, options: SearchOptions) -> str:
        """Deterministic key for a (query, filters, pagination) triple"""
        raw = f"{normalized_query}:{options.canonical_json()}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    async def search(self, query: Optional[str], options: Optional[SearchOptions] = None) -> List[ScoredCandidate]:
        """
        Search products with fuzzy and partial word matching

        Args:
            query: Free-text query; empty or blank lists products by recency
            options: Filters and pagination

        Returns:
            Ranked candidates, at most options.limit long

        Raises:
            RetrievalError: if the candidate provider fails
        """
        options = options or SearchOptions()

        if not query or not query.strip():
            return await self._list_recent(options)

        normalized = self.normalize_query(query)
        key = self.cache_key(normalized, options)

        cached = await self._read_cache(key)
        if cached is not None:
            logger.info(f"Search cache hit for '{normalized}' ({len(cached)} results)")
            return cached

        window = await self.provider.fetch(options.filters, self.window_size(options.limit), options.offset)

        query_tokens = tokenize(normalized)
        results = await asyncio.to_thread(
            self.scoring_service.rank, query_tokens, window, options.limit
        )

        logger.info(
            f"Search '{normalized}' scored {len(window)} candidates, returning {len(results)}"
        )

        await self._write_cache(key, results)
        return results

    async def _list_recent(self, options: SearchOptions) -> List[ScoredCandidate]:
        """Plain filtered listing, bypassing scoring and the result cache"""
        records = await self.provider.fetch(options.filters, options.limit, options.offset)
        return [
            ScoredCandidate(**record.model_dump(), relevance_score=UNRANKED_RELEVANCE)
            for record in records
        ]

    async def _read_cache(self, key: str) -> Optional[List[ScoredCandidate]]:
        try:
            payload = await self.cache.get(key)
        except CacheUnavailableError as e:
            logger.warning(f"Search cache read failed, computing directly: {e}")
            return None

        if payload is None:
            return None

        try:
            return SearchResult.model_validate_json(payload).items
        except ValidationError as e:
            logger.warning(f"Discarding undecodable search cache entry: {e}")
            return None

    async def _write_cache(self, key: str, results: List[ScoredCandidate]) -> None:
        payload = SearchResult(items=results).model_dump_json().encode("utf-8")
        try:
            await self.cache.set(key, payload, self.cache_ttl)
        except CacheUnavailableError as e:
            logger.warning(f"Search cache write failed, result not cached: {e}")
