# catalog_sync/filters/product_sort.py

"""Render-time ordering of the product list."""

from collections.abc import Iterable
from enum import Enum

from catalog_sync.models.product import Product


class SortKey(str, Enum):
    NAME = "name"
    COUNT = "count"


def sort_products(
    products: Iterable[Product], key: SortKey | str,
) -> list[Product]:
    """Return a new list ordered by name (case-insensitive) or count.

    Ties keep their store order.
    """
    sort_key = SortKey(key)
    if sort_key is SortKey.COUNT:
        return sorted(products, key=lambda p: p.count)
    return sorted(products, key=lambda p: p.name.casefold())
