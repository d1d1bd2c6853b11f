"""
Exceptions raised by the search engine and its collaborators
"""


class SearchError(Exception):
    """Base class for search failures"""


class InvalidFilterError(SearchError):
    """Filter or pagination values are malformed (e.g. min_price > max_price)"""


class RetrievalError(SearchError):
    """The candidate provider could not serve the request"""


class CacheUnavailableError(SearchError):
    """A result cache read or write failed"""
