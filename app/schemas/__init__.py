"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Storefront: Filter, cart and snapshot schemas

==============================================================================
"""

from .storefront import (
    AddToCartRequest,
    FilterOptionsResponse,
    FiltersUpdate,
    StorefrontResponse,
)

__all__ = [
    # Storefront
    "AddToCartRequest",
    "FilterOptionsResponse",
    "FiltersUpdate",
    "StorefrontResponse",
]
