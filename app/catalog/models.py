"""
==============================================================================
Product Models Module
==============================================================================

Pydantic models for merchandise returned by the catalog backend.

==============================================================================
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from app.core import exceptions


# Sentinel shared by the category and team filters
ALL = "all"

# Teams offered by the storefront's team picker. Presentation only: the
# catalog accepts any team string.
TEAMS: List[str] = [
    ALL,
    "Red Bull Racing",
    "Ferrari",
    "Mercedes",
    "McLaren",
    "Aston Martin",
    "Alpine",
    "Williams",
    "RB",
    "Kick Sauber",
    "Haas",
]


class CategoryFilter(str, Enum):
    """Server-side category filter values."""

    ALL = ALL
    JERSEY = "jersey"
    CAR_MODEL = "car_model"

    @classmethod
    def parse(cls, value: Any) -> "CategoryFilter":
        """
        Coerce a raw value into a category filter.

        Raises:
            AppException: INVALID_CATEGORY for unknown values
        """
        try:
            return cls(value)
        except ValueError:
            raise exceptions.invalid_category(str(value)) from None


class Product(BaseModel):
    """
    Merchandise item as served by the catalog backend.

    Immutable once parsed. The identifier may arrive as ``id`` or ``_id``
    and as a number or string; it is always exposed as a string.

    Attributes:
        id: Stable product identifier
        title: Display title
        team: Team name (opaque string)
        category: Product category (e.g., "jersey", "car_model")
        price_inr: Price in whole rupees
        image: Optional image URL
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"), description="Product identifier")
    title: str = Field(..., description="Product title")
    team: str = Field(..., description="Team name")
    category: str = Field(..., description="Product category")
    price_inr: int = Field(..., ge=0, description="Price in rupees")
    image: Optional[str] = Field(default=None, description="Image URL")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        """Accept numeric identifiers."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


_PRODUCT_LIST = TypeAdapter(List[Product])


def parse_products(payload: Any) -> List[Product]:
    """
    Validate a decoded JSON body as a list of products.

    Args:
        payload: Decoded response body

    Returns:
        Products in payload order

    Raises:
        AppException: CATALOG_MALFORMED if the payload is not a product list
    """
    try:
        return _PRODUCT_LIST.validate_python(payload)
    except ValidationError as e:
        raise exceptions.catalog_malformed(f"{e.error_count()} validation error(s)") from e
