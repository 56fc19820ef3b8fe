"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides sample catalog data, a fake catalog backend served through
httpx.MockTransport, a controllable catalog source for ordering tests,
and a FastAPI test client.

==============================================================================
"""

import asyncio
from typing import Any, Dict, Generator, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app.catalog.models import Product, parse_products
from app.catalog.remote import CatalogRemote
from app.core import exceptions
from app.main import Application


# ============================================================================
# SAMPLE DATA
# ============================================================================

CATALOG_PAYLOAD: List[Dict[str, Any]] = [
    {
        "id": "rb-home-24",
        "title": "Red Bull Racing Team Jersey 2024",
        "team": "Red Bull Racing",
        "category": "jersey",
        "price_inr": 6499,
        "image": "https://cdn.example.com/rb-home-24.jpg",
    },
    {
        "id": "fer-sf24-118",
        "title": "SF-24 1:18 Scale Model",
        "team": "Ferrari",
        "category": "car_model",
        "price_inr": 15999,
    },
    {
        "id": "fer-home-24",
        "title": "Scuderia Ferrari Home Jersey",
        "team": "Ferrari",
        "category": "jersey",
        "price_inr": 7999,
    },
    {
        "_id": 404,
        "title": "W15 1:43 Scale Model",
        "team": "Mercedes",
        "category": "car_model",
        "price_inr": 4999,
        "image": None,
    },
    {
        "id": "mcl-polo-24",
        "title": "Papaya Polo",
        "team": "McLaren",
        "category": "jersey",
        "price_inr": 5499,
    },
]


def build_products(payload: Optional[List[Dict[str, Any]]] = None) -> List[Product]:
    """Parse sample payload into products."""
    return parse_products(payload if payload is not None else CATALOG_PAYLOAD)


async def flush(rounds: int = 5) -> None:
    """Let scheduled tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ============================================================================
# FAKE CATALOG BACKEND (HTTP)
# ============================================================================

class FakeCatalogBackend:
    """
    In-process stand-in for the catalog HTTP backend.

    Filters CATALOG_PAYLOAD by the category/team query parameters and
    records every request. Set ``fail_status`` to answer with an error.
    """

    def __init__(self, payload: Optional[List[Dict[str, Any]]] = None):
        self.payload = payload if payload is not None else CATALOG_PAYLOAD
        self.requests: List[httpx.Request] = []
        self.fail_status: Optional[int] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"detail": "unavailable"})

        category = request.url.params.get("category")
        team = request.url.params.get("team")
        items = [
            item for item in self.payload
            if (category is None or item["category"] == category)
            and (team is None or item["team"] == team)
        ]
        return httpx.Response(200, json=items)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last_params(self) -> Dict[str, str]:
        return dict(self.requests[-1].url.params)


# ============================================================================
# CONTROLLABLE SOURCE (ORDERING)
# ============================================================================

class ControlledSource:
    """
    Catalog source whose responses are released explicitly by the test.

    Each call parks on a future; ``respond``/``fail`` settle call ``index``
    in whatever order the test chooses.
    """

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []
        self._futures: List[asyncio.Future] = []

    async def fetch_products(self, category: str, team: str) -> List[Product]:
        future = asyncio.get_running_loop().create_future()
        self.calls.append((category, team))
        self._futures.append(future)
        return await future

    def respond(self, index: int, products: List[Product]) -> None:
        self._futures[index].set_result(products)

    def fail(self, index: int, error: Optional[Exception] = None) -> None:
        self._futures[index].set_exception(
            error or exceptions.catalog_unavailable("connection reset")
        )


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def products() -> List[Product]:
    """All sample products in server order."""
    return build_products()


@pytest.fixture
def backend() -> FakeCatalogBackend:
    """Fake catalog HTTP backend."""
    return FakeCatalogBackend()


@pytest.fixture
def client(backend: FakeCatalogBackend) -> Generator[TestClient, None, None]:
    """Test client with the catalog remote wired to the fake backend."""
    application = Application(
        remote_factory=lambda: CatalogRemote(
            base_url="http://catalog.test",
            transport=backend.transport(),
        )
    )
    with TestClient(application.app) as test_client:
        yield test_client
