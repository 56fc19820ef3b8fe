"""
==============================================================================
Core Package
==============================================================================

Core infrastructure for the storefront.

This package provides:
- Custom exception handling with consistent error responses
- Exception factory functions for common error scenarios
- FastAPI dependency for the storefront controller

Modules:
--------
- exceptions: AppException class and error factory functions
- dependencies: FastAPI dependency injection functions

Usage:
------
    from app.core import AppException, get_storefront

    # Or use exception factory functions via module
    from app.core import exceptions
    raise exceptions.product_not_found("rb-jersey-24")

==============================================================================
"""

from .exceptions import (
    AppException,
    register_exception_handlers,
)
from .dependencies import get_storefront

__all__ = [
    # Exceptions
    "AppException",
    "register_exception_handlers",
    # Dependencies
    "get_storefront",
]
