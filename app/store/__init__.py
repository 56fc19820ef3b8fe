"""
==============================================================================
Store Package - Storefront State Machine
==============================================================================

Classes:
--------
- StorefrontController: Fetch orchestration, filters, search and cart
- FilterState / CatalogState: Controller-owned state
- StorefrontSnapshot: Immutable view handed to renderers

==============================================================================
"""

from .controller import FETCH_ERROR_MESSAGE, StorefrontController
from .state import CatalogState, FetchStatus, FilterState, ProductView, StorefrontSnapshot

__all__ = [
    "FETCH_ERROR_MESSAGE",
    "StorefrontController",
    "CatalogState",
    "FetchStatus",
    "FilterState",
    "ProductView",
    "StorefrontSnapshot",
]
