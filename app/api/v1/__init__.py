"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- storefront: Storefront snapshot, filters, cart and retry

==============================================================================
"""

from . import health, storefront

__all__ = ["health", "storefront"]
