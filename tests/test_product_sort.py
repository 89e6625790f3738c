# tests/test_product_sort.py

"""Tests for render-time product ordering."""

import unittest

from fake_client import make_product

from catalog_sync.filters.product_sort import SortKey, sort_products


class TestSortProducts(unittest.TestCase):
    """Ordering by name and by count."""

    def setUp(self) -> None:
        self.products = [
            make_product("banana", 3, product_id="1"),
            make_product("Apple", 3, product_id="2"),
            make_product("cherry", 1, product_id="3"),
        ]

    def test_sort_by_name_ignores_case(self) -> None:
        ordered = sort_products(self.products, SortKey.NAME)
        self.assertEqual([p.name for p in ordered], ["Apple", "banana", "cherry"])

    def test_sort_by_count_is_stable(self) -> None:
        """Equal counts keep their original relative order."""
        ordered = sort_products(self.products, "count")
        self.assertEqual([p.id for p in ordered], ["3", "1", "2"])

    def test_input_not_mutated(self) -> None:
        sort_products(self.products, SortKey.NAME)
        self.assertEqual([p.id for p in self.products], ["1", "2", "3"])

    def test_unknown_key_rejected(self) -> None:
        with self.assertRaises(ValueError):
            sort_products(self.products, "weight")


if __name__ == "__main__":
    unittest.main()
