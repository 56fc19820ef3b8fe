"""
==============================================================================
Storefront State Module
==============================================================================

State owned by the storefront controller and the snapshot handed to views.

- FilterState: category/team (server-side) and query (client-side)
- CatalogState: fetched items plus loading/error and the request epoch
- StorefrontSnapshot: immutable view of everything a renderer needs

==============================================================================
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from app.catalog.models import ALL, CategoryFilter, Product
from app.utils.formatting import format_inr


class FilterState(BaseModel):
    """Current filter parameters."""

    model_config = ConfigDict(validate_assignment=True)

    category: CategoryFilter = CategoryFilter.ALL
    team: str = ALL
    query: str = ""


class CatalogState(BaseModel):
    """
    Fetched catalog and the lifecycle of the latest request.

    Attributes:
        items: Products from the latest committed response, in server order
        loading: True while the latest issued request is unsettled
        error: User-facing message when the latest request failed
        request_epoch: Identifier of the most recently issued request
    """

    model_config = ConfigDict(validate_assignment=True)

    items: Tuple[Product, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    request_epoch: int = Field(default=0, ge=0)


class FetchStatus(str, Enum):
    """What the product area should display."""

    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


class ProductView(BaseModel):
    """Product as rendered on a card."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    team: str
    category: str
    price_inr: int
    price_display: str
    image: Optional[str] = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductView":
        """Create view from Product model."""
        return cls(
            id=product.id,
            title=product.title,
            team=product.team,
            category=product.category,
            price_inr=product.price_inr,
            price_display=format_inr(product.price_inr),
            image=product.image,
        )


class StorefrontSnapshot(BaseModel):
    """Point-in-time view of the storefront."""

    model_config = ConfigDict(frozen=True)

    category: CategoryFilter
    team: str
    query: str
    status: FetchStatus
    loading: bool
    error: Optional[str] = None
    products: List[ProductView] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    cart_count: int = Field(default=0, ge=0)
