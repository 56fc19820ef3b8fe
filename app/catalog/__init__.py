"""
==============================================================================
Catalog Package - Merchandise Retrieval and Search
==============================================================================

Product models, the catalog backend client and client-side search.

Classes:
--------
- Product: Pydantic model for merchandise items
- CategoryFilter: Server-side category filter values
- CatalogRemote: Async HTTP client for the catalog backend

==============================================================================
"""

from .models import ALL, TEAMS, CategoryFilter, Product, parse_products
from .remote import CatalogRemote, CatalogSource, build_params
from .search import matches, visible

__all__ = [
    "ALL",
    "TEAMS",
    "CategoryFilter",
    "Product",
    "parse_products",
    "CatalogRemote",
    "CatalogSource",
    "build_params",
    "matches",
    "visible",
]
