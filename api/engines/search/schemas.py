"""
Pydantic schemas for the Search Engine
"""
import json
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, validator

from .exceptions import InvalidFilterError


class CandidateFilters(BaseModel):
    """Structural filters pushed down to the candidate provider"""

    category_id: Optional[int] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)


class SearchOptions(BaseModel):
    """Filters and pagination for a single search call"""

    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    category_id: Optional[int] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)

    @validator("max_price")
    def validate_price_range(cls, v, values):
        if v is not None and values.get("min_price") is not None:
            if v < values["min_price"]:
                raise ValueError("max_price must be greater than or equal to min_price")
        return v

    @classmethod
    def build(cls, **params) -> "SearchOptions":
        """Validate raw parameters, raising InvalidFilterError on bad input."""
        try:
            return cls(**params)
        except ValidationError as e:
            raise InvalidFilterError(str(e)) from e

    @property
    def filters(self) -> CandidateFilters:
        return CandidateFilters(
            category_id=self.category_id,
            min_price=self.min_price,
            max_price=self.max_price,
        )

    def canonical_json(self) -> str:
        """Stable serialization used for cache keys"""
        return json.dumps(self.model_dump(), sort_keys=True, separators=(",", ":"))


class CandidateRecord(BaseModel):
    """A catalog record as seen by the ranking engine"""

    id: int
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    price: float
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    stock: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def searchable_text(self) -> str:
        """Name, description and SKU joined and lowercased"""
        return " ".join([self.name or "", self.description or "", self.sku or ""]).lower()


class ScoredCandidate(CandidateRecord):
    """Candidate annotated with its relevance to the query"""

    relevance_score: float = Field(ge=0.0, le=1.0)


class SearchResult(BaseModel):
    """Ranked search results, as stored in the result cache"""

    items: List[ScoredCandidate] = Field(default_factory=list)
