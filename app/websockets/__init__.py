"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for the storefront.

Handlers:
---------
- storefront: Snapshot streaming with filter, search and cart actions

==============================================================================
"""

from .storefront import router as storefront_router

__all__ = ["storefront_router"]
