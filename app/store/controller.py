"""
==============================================================================
Storefront Controller Module
==============================================================================

Catalog state machine coordinating remote fetches, filters, search and cart.

Fetch Lifecycle (per request epoch):
------------------------------------
    issued ──► settled-success ─┐
       │                        ├──► terminal   (epoch still latest)
       └────► settled-error ────┘
       │
       └────► superseded                        (a newer epoch was issued)

Every category/team change issues a request with a new epoch. A response
is committed only if its epoch is still the latest issued one, so the last
issued request wins regardless of arrival order. Superseded responses are
observed and dropped; nothing is cancelled at the transport level.

Threading Model:
----------------
One asyncio event loop drives everything. Network awaits are the only
suspension points, so no locking is needed; the epoch comparison is the
whole guard. The controller must be created inside a running loop.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Set, Tuple, Union

from app.cart import Cart
from app.catalog.models import CategoryFilter, Product
from app.catalog.remote import CatalogSource
from app.catalog.search import visible
from app.core import exceptions
from app.core.exceptions import AppException

from .state import CatalogState, FetchStatus, FilterState, ProductView, StorefrontSnapshot


# Module logger
logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to load products"

Listener = Callable[["StorefrontController"], None]


class StorefrontController:
    """
    Owner of catalog, filter and cart state for one shopper.

    Views call the mutators and read the query surface; they are told about
    changes through ``subscribe`` and never hold authoritative state.

    Attributes:
        _source: Catalog backend (CatalogRemote or a stand-in)
        _filters: Current category/team/query
        _catalog: Fetched items and request lifecycle
        _cart: Append-only cart

    Example:
        >>> controller = StorefrontController(CatalogRemote())
        >>> controller.set_category("jersey")
        >>> await controller.wait_idle()
        >>> [p.title for p in controller.visible_products()]
    """

    def __init__(self, source: CatalogSource, cart: Optional[Cart] = None) -> None:
        """
        Initialize state and issue the initial fetch for all products.

        Args:
            source: Catalog backend to fetch from
            cart: Cart to accumulate into (new empty cart if None)

        Raises:
            RuntimeError: If no event loop is running
        """
        self._source = source
        self._filters = FilterState()
        self._catalog = CatalogState()
        self._cart = cart if cart is not None else Cart()
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Task] = set()

        self.fetch(self._filters.category, self._filters.team)

    # =========================================================================
    # FETCH ORCHESTRATION
    # =========================================================================

    def fetch(self, category: Union[CategoryFilter, str], team: str) -> asyncio.Task:
        """
        Issue a catalog request under a new epoch.

        The epoch, loading flag and cleared error are applied before this
        returns; the request itself runs as a task on the current loop.

        Args:
            category: Category filter value or "all"
            team: Team name or "all"

        Returns:
            Task settling the request
        """
        category = CategoryFilter.parse(category)

        self._catalog.request_epoch += 1
        epoch = self._catalog.request_epoch
        self._catalog.loading = True
        self._catalog.error = None

        logger.info(f"📡 Fetch #{epoch}: category={category.value} team={team}")

        task = asyncio.get_running_loop().create_task(
            self._settle(epoch, category.value, team)
        )
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

        self._notify()
        return task

    def retry(self) -> asyncio.Task:
        """Re-issue the request for the current filters."""
        return self.fetch(self._filters.category, self._filters.team)

    async def _settle(self, epoch: int, category: str, team: str) -> None:
        """Await one request and commit its outcome if still current."""
        try:
            products = await self._source.fetch_products(category, team)
        except AppException as e:
            self._settle_failure(epoch, e)
            return
        except Exception as e:
            logger.exception(f"Unexpected error in fetch #{epoch}")
            self._settle_failure(epoch, exceptions.internal_error(repr(e)))
            return

        if not self._is_current(epoch):
            logger.debug(f"Dropping response of superseded fetch #{epoch}")
            return

        self._catalog.items = tuple(products)
        self._catalog.loading = False
        logger.info(f"✅ Fetch #{epoch} committed {len(products)} products")
        self._notify()

    def _settle_failure(self, epoch: int, error: AppException) -> None:
        """Record a failed request unless a newer one has been issued."""
        if not self._is_current(epoch):
            logger.debug(f"Dropping failure of superseded fetch #{epoch}: {error.code}")
            return
        logger.warning(f"⚠️ Fetch #{epoch} failed: {error.code} {error.message}")
        self._catalog.error = FETCH_ERROR_MESSAGE
        self._catalog.loading = False
        self._notify()

    def _is_current(self, epoch: int) -> bool:
        return epoch == self._catalog.request_epoch

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Catalog fetch crashed: {task.exception()!r}")

    async def wait_idle(self) -> None:
        """Wait until no request is in flight, including ones issued meanwhile."""
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.wait(pending)

    # =========================================================================
    # MUTATORS
    # =========================================================================

    def set_category(self, category: Union[CategoryFilter, str]) -> Optional[asyncio.Task]:
        """
        Change the category filter and refetch.

        Returns:
            The issued task, or None if the category is unchanged

        Raises:
            AppException: INVALID_CATEGORY for unknown values
        """
        category = CategoryFilter.parse(category)
        if category == self._filters.category:
            return None
        self._filters.category = category
        return self.fetch(category, self._filters.team)

    def set_team(self, team: str) -> Optional[asyncio.Task]:
        """
        Change the team filter and refetch.

        Team names are opaque; anything other than "all" is sent as-is.

        Returns:
            The issued task, or None if the team is unchanged
        """
        if team == self._filters.team:
            return None
        self._filters.team = team
        return self.fetch(self._filters.category, team)

    def set_query(self, query: str) -> None:
        """Change the free-text search. Never refetches."""
        if query == self._filters.query:
            return
        self._filters.query = query
        self._notify()

    def add_to_cart(self, product: Product) -> None:
        """Append a product to the cart."""
        self._cart.add(product)
        self._notify()

    # =========================================================================
    # QUERY SURFACE
    # =========================================================================

    @property
    def category(self) -> CategoryFilter:
        return self._filters.category

    @property
    def team(self) -> str:
        return self._filters.team

    @property
    def query(self) -> str:
        return self._filters.query

    @property
    def request_epoch(self) -> int:
        return self._catalog.request_epoch

    @property
    def items(self) -> Tuple[Product, ...]:
        """Products from the latest committed response."""
        return self._catalog.items

    def visible_products(self) -> List[Product]:
        """Catalog items matching the current query."""
        return visible(self._catalog.items, self._filters.query)

    def is_loading(self) -> bool:
        return self._catalog.loading

    def error_message(self) -> Optional[str]:
        return self._catalog.error

    def cart_count(self) -> int:
        return self._cart.count()

    def cart_entries(self) -> Tuple[Product, ...]:
        return self._cart.entries

    def find_product(self, product_id: str) -> Optional[Product]:
        """Look up a product in the current catalog by id."""
        for product in self._catalog.items:
            if product.id == product_id:
                return product
        return None

    def status(self) -> FetchStatus:
        """
        Classify what the product area should show.

        Loading takes precedence over a stale list, and an empty result is
        reported separately from a failed fetch.
        """
        if self._catalog.loading:
            return FetchStatus.LOADING
        if self._catalog.error:
            return FetchStatus.ERROR
        if not self.visible_products():
            return FetchStatus.EMPTY
        return FetchStatus.READY

    def snapshot(self) -> StorefrontSnapshot:
        """Build an immutable view of the current state."""
        products = self.visible_products()
        return StorefrontSnapshot(
            category=self._filters.category,
            team=self._filters.team,
            query=self._filters.query,
            status=self.status(),
            loading=self._catalog.loading,
            error=self._catalog.error,
            products=[ProductView.from_product(p) for p in products],
            total=len(products),
            cart_count=self._cart.count(),
        )

    # =========================================================================
    # CHANGE NOTIFICATION
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after every state change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Storefront listener failed: {e!r}")
