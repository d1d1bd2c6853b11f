"""
Candidate Service for Catalog Reads

Fetches filtered, recency-ordered product pages from the database.
"""
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Product

from .exceptions import RetrievalError
from .schemas import CandidateFilters, CandidateRecord

logger = logging.getLogger(__name__)


class ProductCandidateProvider:
    """CandidateProvider backed by the products table"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def build_query(self, filters: CandidateFilters, limit: int, offset: int):
        """Build the filtered, paginated select for a candidate page"""
        query = select(Product)

        if filters.category_id is not None:
            query = query.where(Product.category_id == filters.category_id)

        # Price bounds are inclusive; None means unbounded
        if filters.min_price is not None:
            query = query.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Product.price <= filters.max_price)

        return (
            query.order_by(Product.created_at.desc(), Product.id.desc())
            .offset(offset)
            .limit(limit)
        )

    async def fetch(self, filters: CandidateFilters, limit: int, offset: int) -> List[CandidateRecord]:
        """
        Fetch a page of candidate products

        Args:
            filters: Category and price constraints
            limit: Maximum number of records
            offset: Number of records to skip

        Returns:
            Records ordered newest first

        Raises:
            RetrievalError: if the database cannot serve the request
        """
        query = self.build_query(filters, limit, offset)

        try:
            result = await self.db.execute(query)
            products = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Candidate fetch failed: {e}", exc_info=True)
            raise RetrievalError("Catalog store unavailable") from e

        logger.info(f"Fetched {len(products)} candidates (limit={limit}, offset={offset})")
        return [CandidateRecord.model_validate(product) for product in products]
