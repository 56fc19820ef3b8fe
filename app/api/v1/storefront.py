"""
==============================================================================
Storefront Endpoints
==============================================================================

REST view binding over the storefront controller.

Mutating endpoints wait for in-flight catalog requests to settle and
return the resulting snapshot, so a single round trip shows the outcome.

==============================================================================
"""

import logging

from fastapi import APIRouter, Depends

from app.catalog.models import TEAMS, CategoryFilter
from app.core import exceptions
from app.core.dependencies import get_storefront
from app.schemas.storefront import (
    AddToCartRequest,
    FilterOptionsResponse,
    FiltersUpdate,
    StorefrontResponse,
)
from app.store.controller import StorefrontController


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storefront", tags=["Storefront"])


class StorefrontEndpointController:
    """Controller for storefront operations."""

    def __init__(self, storefront: StorefrontController):
        self._storefront = storefront

    def get_state(self) -> StorefrontResponse:
        """Current snapshot without waiting."""
        return StorefrontResponse(storefront=self._storefront.snapshot())

    async def settled_state(self) -> StorefrontResponse:
        """Snapshot after in-flight requests settle."""
        await self._storefront.wait_idle()
        return self.get_state()

    async def update_filters(self, update: FiltersUpdate) -> StorefrontResponse:
        """Apply filter changes in category, team, query order."""
        if update.category is not None:
            self._storefront.set_category(update.category)
        if update.team is not None:
            self._storefront.set_team(update.team)
        if update.query is not None:
            self._storefront.set_query(update.query)
        return await self.settled_state()

    def add_to_cart(self, request: AddToCartRequest) -> StorefrontResponse:
        """Add a product from the current catalog."""
        product = self._storefront.find_product(request.product_id)
        if product is None:
            logger.info(f"Cart add rejected, unknown product: {request.product_id}")
            raise exceptions.product_not_found(request.product_id)
        self._storefront.add_to_cart(product)
        return self.get_state()

    async def retry(self) -> StorefrontResponse:
        """Re-issue the catalog request for current filters."""
        self._storefront.retry()
        return await self.settled_state()

    @staticmethod
    def filter_options() -> FilterOptionsResponse:
        """Category and team values for the filter controls."""
        return FilterOptionsResponse(
            categories=[c.value for c in CategoryFilter],
            teams=list(TEAMS),
        )


@router.get("", response_model=StorefrontResponse)
async def get_storefront_state(
    wait: bool = False,
    storefront: StorefrontController = Depends(get_storefront)
):
    """Get the current storefront snapshot; ``wait`` settles pending fetches first."""
    controller = StorefrontEndpointController(storefront)
    if wait:
        return await controller.settled_state()
    return controller.get_state()


@router.get("/teams", response_model=FilterOptionsResponse)
async def get_filter_options():
    """Get category and team filter values."""
    return StorefrontEndpointController.filter_options()


@router.put("/filters", response_model=StorefrontResponse)
async def update_filters(
    update: FiltersUpdate,
    storefront: StorefrontController = Depends(get_storefront)
):
    """Change category, team and/or search query."""
    controller = StorefrontEndpointController(storefront)
    return await controller.update_filters(update)


@router.post("/cart", response_model=StorefrontResponse)
async def add_to_cart(
    request: AddToCartRequest,
    storefront: StorefrontController = Depends(get_storefront)
):
    """Add a product to the cart by id."""
    controller = StorefrontEndpointController(storefront)
    return controller.add_to_cart(request)


@router.post("/retry", response_model=StorefrontResponse)
async def retry_fetch(storefront: StorefrontController = Depends(get_storefront)):
    """Retry loading the catalog."""
    controller = StorefrontEndpointController(storefront)
    return await controller.retry()
