"""
Product API routes
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.cache import RedisCache, get_product_cache, get_search_cache
from core.config import settings
from core.database import get_db
from database.models import Product
from engines.search import (
    CacheUnavailableError,
    InvalidFilterError,
    ProductCandidateProvider,
    RetrievalError,
    SearchEngine,
    SearchOptions,
)
from schemas.products import (
    ErrorResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductSchema,
    ProductSearchResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


def get_search_engine(
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_search_cache),
) -> SearchEngine:
    """FastAPI dependency building a per-request search engine"""
    return SearchEngine.from_settings(ProductCandidateProvider(db), cache, settings)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def _cache_get(cache: RedisCache, key: str) -> Optional[bytes]:
    try:
        return await cache.get(key)
    except CacheUnavailableError as e:
        logger.warning(f"Product cache read failed: {e}")
        return None


async def _cache_set(cache: RedisCache, key: str, value: bytes) -> None:
    try:
        await cache.set(key, value, cache.default_ttl)
    except CacheUnavailableError as e:
        logger.warning(f"Product cache write failed: {e}")


@router.get("", response_model=ProductListResponse, responses={400: {"model": ErrorResponse}})
async def get_products(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    category_id: Optional[int] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_product_cache),
):
    """Get products, newest first, with category and price filtering"""
    try:
        options = SearchOptions.build(
            limit=limit, offset=offset, category_id=category_id, min_price=min_price, max_price=max_price
        )
    except InvalidFilterError:
        return _error(400, "Invalid query parameters")

    cache_key = f"products:{options.canonical_json()}"
    cached = await _cache_get(cache, cache_key)
    if cached is not None:
        try:
            return ProductListResponse.model_validate_json(cached)
        except ValidationError:
            logger.warning(f"Discarding undecodable product cache entry {cache_key}")

    provider = ProductCandidateProvider(db)
    query = provider.build_query(options.filters, options.limit, options.offset).options(
        selectinload(Product.category)
    )

    try:
        result = await db.execute(query)
        products = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching products: {e}", exc_info=True)
        return _error(503, "Failed to fetch products")

    response = ProductListResponse(data=[ProductSchema.model_validate(p) for p in products])
    await _cache_set(cache, cache_key, response.model_dump_json().encode("utf-8"))
    return response


@router.get("/search", response_model=ProductSearchResponse, responses={400: {"model": ErrorResponse}})
async def search_products(
    query: str = Query(...),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    category_id: Optional[int] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Search products with typo tolerance and partial word matching"""
    try:
        options = SearchOptions.build(
            limit=limit, offset=offset, category_id=category_id, min_price=min_price, max_price=max_price
        )
    except InvalidFilterError:
        return _error(400, "Invalid search parameters")

    try:
        results = await engine.search(query, options)
    except RetrievalError as e:
        logger.error(f"Search failed for '{query}': {e}")
        return _error(503, "Failed to search products")

    return ProductSearchResponse(data=results)


@router.get("/{product_id}", response_model=ProductDetailResponse, responses={404: {"model": ErrorResponse}})
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_product_cache),
):
    """Get a single product by ID"""
    cache_key = f"product:{product_id}"
    cached = await _cache_get(cache, cache_key)
    if cached is not None:
        try:
            return ProductDetailResponse.model_validate_json(cached)
        except ValidationError:
            logger.warning(f"Discarding undecodable product cache entry {cache_key}")

    query = select(Product).options(selectinload(Product.category)).where(Product.id == product_id)

    try:
        result = await db.execute(query)
        product = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching product {product_id}: {e}", exc_info=True)
        return _error(503, "Failed to fetch product")

    if not product:
        return _error(404, "Product not found")

    response = ProductDetailResponse(data=ProductSchema.model_validate(product))
    await _cache_set(cache, cache_key, response.model_dump_json().encode("utf-8"))
    return response
