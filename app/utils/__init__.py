"""
==============================================================================
Utilities Package
==============================================================================

Utility functions for the storefront.

Modules:
--------
- formatting: Rupee price formatting with Indian digit grouping

==============================================================================
"""

from .formatting import format_inr, group_indian

__all__ = [
    "format_inr",
    "group_indian",
]
