"""
Database module for the product catalog
"""
from .models import Base, Category, Product

__all__ = [
    "Base",
    "Category",
    "Product",
]
