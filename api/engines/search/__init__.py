"""
Search Engine

Typo-tolerant lexical ranking of catalog products.
"""

from .core import SearchEngine
from .candidate_service import ProductCandidateProvider
from .exceptions import CacheUnavailableError, InvalidFilterError, RetrievalError, SearchError
from .interfaces import CandidateProvider, ResultCache
from .schemas import CandidateFilters, CandidateRecord, ScoredCandidate, SearchOptions, SearchResult
from .scoring_service import ScoringService
from .text_matching import levenshtein_distance, tokenize

__all__ = [
    "SearchEngine",
    "ProductCandidateProvider",
    "ScoringService",
    "CandidateProvider",
    "ResultCache",
    "CandidateFilters",
    "CandidateRecord",
    "ScoredCandidate",
    "SearchOptions",
    "SearchResult",
    "SearchError",
    "InvalidFilterError",
    "RetrievalError",
    "CacheUnavailableError",
    "levenshtein_distance",
    "tokenize",
]
