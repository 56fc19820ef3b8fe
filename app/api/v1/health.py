"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Request

from app.store.controller import StorefrontController
from app.store.state import FetchStatus


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, storefront: Optional[StorefrontController]):
        self._storefront = storefront

    def check_catalog(self) -> dict:
        """Check catalog status."""
        if self._storefront is None:
            return {"status": "not_loaded", "products": 0}
        if self._storefront.status() == FetchStatus.ERROR:
            return {"status": "unhealthy", "products": len(self._storefront.items)}
        if self._storefront.is_loading():
            return {"status": "loading", "products": len(self._storefront.items)}
        return {"status": "healthy", "products": len(self._storefront.items)}

    def get_health(self) -> dict:
        """Get full health status."""
        catalog_info = self.check_catalog()

        overall = "healthy" if catalog_info["status"] in ("healthy", "loading") else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "catalog": catalog_info["status"]
            },
            "details": {
                "products_loaded": catalog_info["products"],
                "cart_count": self._storefront.cart_count() if self._storefront else 0
            }
        }


@router.get("")
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns API and catalog status.
    """
    controller = HealthController(getattr(request.app.state, "storefront", None))
    return controller.get_health()


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe for container orchestration."""
    return {"ready": getattr(request.app.state, "storefront", None) is not None}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
