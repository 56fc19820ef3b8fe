"""
==============================================================================
Cart Module
==============================================================================

Append-only shopping cart.

Adding the same product twice yields two entries; there is no quantity
field and no removal. The cart lives only as long as its owner.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from app.catalog.models import Product


# Module logger
logger = logging.getLogger(__name__)


class Cart:
    """
    Ordered, append-only collection of chosen products.

    Example:
        >>> cart = Cart()
        >>> cart.add(jersey)
        >>> cart.add(jersey)
        >>> cart.count()
        2
    """

    def __init__(self) -> None:
        self._entries: List[Product] = []

    @property
    def entries(self) -> Tuple[Product, ...]:
        """Snapshot of cart entries in insertion order."""
        return tuple(self._entries)

    def add(self, product: Product) -> None:
        """Append a product unconditionally."""
        self._entries.append(product)
        logger.info(f"🛒 Added to cart: {product.title} ({len(self._entries)} items)")

    def count(self) -> int:
        """Number of entries in the cart."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
