"""
Pydantic schemas for product-related API endpoints
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from engines.search.schemas import ScoredCandidate


class CategorySchema(BaseModel):
    """Category schema"""
    id: int
    name: str
    slug: str
    parent_id: Optional[int] = None
    order: int = 0

    class Config:
        from_attributes = True


class ProductSchema(BaseModel):
    """Complete product schema"""
    id: int
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    stock: int = 0
    category_id: Optional[int] = None
    category: Optional[CategorySchema] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    """Paginated product listing"""
    success: bool = True
    data: List[ProductSchema]


class ProductDetailResponse(BaseModel):
    """Single product detail response"""
    success: bool = True
    data: ProductSchema


class ProductSearchResponse(BaseModel):
    """Ranked search results"""
    success: bool = True
    data: List[ScoredCandidate]


class ErrorResponse(BaseModel):
    """Failure envelope shared by all product endpoints"""
    success: bool = False
    error: str
