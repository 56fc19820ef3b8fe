"""
==============================================================================
Catalog Search Module
==============================================================================

Client-side free-text filtering over the fetched catalog.

Matching is a case-insensitive substring test against the product title
and team. No request is made; the view is recomputed on every keystroke.

==============================================================================
"""

from typing import List, Sequence

from .models import Product


def matches(product: Product, query: str) -> bool:
    """Check whether a product's title or team contains the query."""
    needle = query.lower()
    return needle in product.title.lower() or needle in product.team.lower()


def visible(items: Sequence[Product], query: str) -> List[Product]:
    """
    Filter products by free-text query.

    Args:
        items: Fetched catalog, in server order
        query: Raw search text (empty matches everything)

    Returns:
        New list of matching products, order preserved

    Example:
        >>> [p.title for p in visible(products, "ferrari")]
        ['Ferrari SF-24 1:18', 'Ferrari Home Jersey']
    """
    if not query:
        return list(items)
    return [product for product in items if matches(product, query)]
