"""
Tests for search option validation and cache-key serialization.
"""
import pytest

from engines.search import InvalidFilterError, SearchOptions


class TestPriceRange:
    """Inclusive price bounds"""

    def test_equal_bounds_are_accepted(self):
        options = SearchOptions.build(min_price=25.0, max_price=25.0)
        assert (options.min_price, options.max_price) == (25.0, 25.0)

    def test_inverted_bounds_are_rejected(self):
        with pytest.raises(InvalidFilterError) as exc_info:
            SearchOptions.build(min_price=50.0, max_price=10.0)

        assert "max_price must be greater than or equal to min_price" in str(exc_info.value)

    @pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 101}, {"offset": -1}, {"min_price": -1}])
    def test_out_of_range_values_are_rejected(self, params):
        with pytest.raises(InvalidFilterError):
            SearchOptions.build(**params)


class TestCanonicalJson:
    """Stable serialization for cache keys"""

    def test_field_order_does_not_matter(self):
        assert (
            SearchOptions(limit=5, category_id=2).canonical_json()
            == SearchOptions(category_id=2, limit=5).canonical_json()
        )

    def test_zero_category_differs_from_no_category(self):
        assert SearchOptions(category_id=0).canonical_json() != SearchOptions().canonical_json()
