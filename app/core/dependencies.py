"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the storefront view binding.

The controller is created during application startup and stored on
``app.state``; routes and WebSocket handlers receive it through these
dependencies instead of importing a global.

Usage Examples:
--------------
    @router.get("")
    async def get_state(storefront: StorefrontController = Depends(get_storefront)):
        return storefront.snapshot()

==============================================================================
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import Request, WebSocket

from app.core.exceptions import storefront_not_ready

if TYPE_CHECKING:
    from app.store.controller import StorefrontController


# Module logger
logger = logging.getLogger(__name__)


def get_storefront(request: Request) -> "StorefrontController":
    """
    Get the storefront controller for an HTTP request.

    Raises:
        AppException: STOREFRONT_NOT_READY before startup completes
    """
    storefront = getattr(request.app.state, "storefront", None)
    if storefront is None:
        logger.warning("Storefront requested before startup")
        raise storefront_not_ready()
    return storefront


def get_storefront_ws(websocket: WebSocket) -> "StorefrontController":
    """Get the storefront controller for a WebSocket connection."""
    storefront = getattr(websocket.app.state, "storefront", None)
    if storefront is None:
        raise storefront_not_ready()
    return storefront
