"""
Lexical relevance scoring for catalog search.

Scoring Formula:
    For each query token t, against the candidate's searchable text T
    (name + description + SKU, lowercased):

        t is a literal substring of T              -> 1.0
        otherwise, best over candidate tokens c:
            c starts with t                        -> 0.9
            c contains t                           -> 0.8
            1 - lev(t, c) / max(len(t), len(c))    -> kept only above 0.7

    RELEVANCE = mean of the per-token scores over ALL query tokens, so a
    candidate matching one of three tokens is divided by three.

Candidates are accepted only when RELEVANCE > 0.5.
"""
import logging
from typing import Iterable, List, Sequence

from .schemas import CandidateRecord, ScoredCandidate
from .text_matching import levenshtein_distance, tokenize

logger = logging.getLogger(__name__)


class ScoringService:
    """Deterministic typo-tolerant relevance scoring."""

    EXACT_MATCH_SCORE = 1.0
    PREFIX_MATCH_SCORE = 0.9
    INFIX_MATCH_SCORE = 0.8

    def __init__(self, min_relevance: float = 0.5, fuzzy_threshold: float = 0.7):
        self.min_relevance = min_relevance
        self.fuzzy_threshold = fuzzy_threshold

    @staticmethod
    def similarity(a: str, b: str) -> float:
        """Edit distance normalised by the longer string: 1.0 identical, 0.0 disjoint."""
        longest = max(len(a), len(b))
        if longest == 0:
            return 1.0
        return 1 - levenshtein_distance(a, b) / longest

    def fuzzy_score(self, query_token: str, candidate_token: str) -> float:
        """Similarity, or 0.0 when it does not clear the fuzzy threshold."""
        similarity = self.similarity(query_token, candidate_token)
        return similarity if similarity > self.fuzzy_threshold else 0.0

    def token_score(self, query_token: str, text: str, candidate_tokens: Sequence[str]) -> float:
        """Best match strength of one query token against one candidate."""
        if query_token in text:
            return self.EXACT_MATCH_SCORE

        best = 0.0
        for candidate_token in candidate_tokens:
            if candidate_token.startswith(query_token):
                score = self.PREFIX_MATCH_SCORE
            elif query_token in candidate_token:
                score = self.INFIX_MATCH_SCORE
            else:
                score = self.fuzzy_score(query_token, candidate_token)
            best = max(best, score)
        return best

    def score(self, query_tokens: Sequence[str], candidate: CandidateRecord) -> float:
        """
        Relevance of a candidate to the tokenized query, in [0.0, 1.0].

        Returns 0.0 when the query has no tokens.
        """
        if not query_tokens:
            return 0.0

        text = candidate.searchable_text
        candidate_tokens = tokenize(text)
        total = sum(self.token_score(token, text, candidate_tokens) for token in query_tokens)
        return min(total / len(query_tokens), 1.0)

    def rank(
        self,
        query_tokens: Sequence[str],
        candidates: Iterable[CandidateRecord],
        limit: int,
    ) -> List[ScoredCandidate]:
        """
        Score, filter, sort and truncate candidates.

        Ordering is by relevance descending, then by id ascending, so equal
        scores always come back in the same order regardless of input order.
        """
        scored = []
        considered = 0
        for candidate in candidates:
            considered += 1
            relevance = self.score(query_tokens, candidate)
            if relevance > self.min_relevance:
                scored.append(
                    ScoredCandidate(**candidate.model_dump(), relevance_score=relevance)
                )

        scored.sort(key=lambda item: (-item.relevance_score, item.id))
        logger.debug(f"Accepted {len(scored)}/{considered} candidates above {self.min_relevance}")
        return scored[:limit]
