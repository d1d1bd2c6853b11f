"""
Catalog Search Engines Package

This package contains the core engines for the catalog search application:
- search: Tokenization, fuzzy matching and relevance ranking of products
"""

__version__ = "1.0.0"
