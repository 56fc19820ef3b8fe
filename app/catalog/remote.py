"""
==============================================================================
Catalog Remote Client Module
==============================================================================

Async HTTP client for the catalog backend.

Contract:
---------
    GET /api/products[?category=<jersey|car_model>][&team=<name>]

    200 → JSON list of products
    anything else → error

Every failure (transport error, non-success status, malformed body) is
raised as an AppException so callers handle a single error type.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

import httpx

from app.config import get_settings
from app.core import exceptions

from .models import ALL, Product, parse_products


# Module logger
logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/api/products"


class CatalogSource(Protocol):
    """Anything that can serve a filtered product list."""

    async def fetch_products(self, category: str, team: str) -> List[Product]:
        ...


def build_params(category: str, team: str) -> Dict[str, str]:
    """
    Build query parameters, omitting filters set to "all".

    Example:
        >>> build_params("jersey", "all")
        {'category': 'jersey'}
    """
    params: Dict[str, str] = {}
    if category != ALL:
        params["category"] = category
    if team != ALL:
        params["team"] = team
    return params


class CatalogRemote:
    """
    HTTP client for fetching products from the catalog backend.

    Owns an ``httpx.AsyncClient`` unless one is injected. Injected clients
    (for example with ``httpx.MockTransport``) are left open on ``aclose``.

    Example:
        >>> remote = CatalogRemote()
        >>> products = await remote.fetch_products("jersey", "Ferrari")
        >>> await remote.aclose()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the remote client.

        Args:
            base_url: Catalog base URL (uses settings if None)
            timeout: Request timeout in seconds (uses settings if None)
            client: Pre-configured client to use instead of creating one
            transport: Transport for the owned client (e.g. httpx.MockTransport)
        """
        settings = get_settings()
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(
            base_url=base_url or settings.catalog_base_url,
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )

    async def fetch_products(self, category: str, team: str) -> List[Product]:
        """
        Fetch products matching the given filters.

        Args:
            category: Category filter value or "all"
            team: Team name or "all"

        Returns:
            Products in response order

        Raises:
            AppException: CATALOG_UNAVAILABLE, CATALOG_BAD_STATUS or CATALOG_MALFORMED
        """
        params = build_params(category, team)
        logger.debug(f"GET {PRODUCTS_PATH} params={params}")

        try:
            request = self._client.build_request("GET", PRODUCTS_PATH, params=params)
        except (httpx.InvalidURL, ValueError) as e:
            # Unencodable filter values, e.g. lone surrogates
            logger.warning(f"Catalog request could not be built: {e!r}")
            raise exceptions.catalog_unavailable(type(e).__name__) from e

        try:
            response = await self._client.send(request)
        except httpx.HTTPError as e:
            logger.warning(f"Catalog request failed: {e!r}")
            raise exceptions.catalog_unavailable(str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.warning(f"Catalog returned status {response.status_code}")
            raise exceptions.catalog_bad_status(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning("Catalog returned a non-JSON body")
            raise exceptions.catalog_malformed("body is not JSON") from e

        products = parse_products(payload)
        logger.debug(f"Fetched {len(products)} products")
        return products

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this remote created it."""
        if self._owns_client:
            await self._client.aclose()
