"""
==============================================================================
Storefront Schemas Module
==============================================================================

Request and response schemas for the storefront view binding.

==============================================================================
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from app.store.state import StorefrontSnapshot


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class FiltersUpdate(BaseModel):
    """Filter changes; omitted fields are left as they are."""
    category: Optional[str] = Field(default=None, max_length=50)
    team: Optional[str] = Field(default=None, min_length=1, max_length=100)
    query: Optional[str] = Field(default=None, max_length=200)

    @field_validator("category")
    @classmethod
    def strip_whitespace(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None

    @field_validator("team")
    @classmethod
    def validate_team(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Team cannot be blank")
        return v


class AddToCartRequest(BaseModel):
    """Add one product from the current catalog to the cart."""
    product_id: str = Field(..., min_length=1, max_length=100)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class StorefrontResponse(BaseModel):
    """Storefront snapshot wrapper."""
    success: bool = Field(default=True)
    storefront: StorefrontSnapshot


class FilterOptionsResponse(BaseModel):
    """Values offered by the category buttons and team picker."""
    success: bool = Field(default=True)
    categories: List[str]
    teams: List[str]
