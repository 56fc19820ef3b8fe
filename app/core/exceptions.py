"""
Application Exception Handling

Single AppException class for all storefront errors with FastAPI integration.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Catalog fetch failures are raised by the remote client and recovered
    by the storefront controller; the rest surface through the view binding
    as JSON error responses.

    Usage:
        raise AppException("Product not found", "PRODUCT_NOT_FOUND", 404)
        raise AppException("Bad status", "CATALOG_BAD_STATUS", 502, {"status": 500})

    Error Codes:
        Catalog Remote:
            - CATALOG_UNAVAILABLE (502)
            - CATALOG_BAD_STATUS (502)
            - CATALOG_MALFORMED (502)

        Storefront:
            - INVALID_CATEGORY (400)
            - PRODUCT_NOT_FOUND (404)
            - STOREFRONT_NOT_READY (503)

        General:
            - INTERNAL_ERROR (500), unexpected catalog source failures
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "PRODUCT_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def catalog_unavailable(reason: str) -> AppException:
    """Create exception for a network-level catalog failure."""
    return AppException(
        "Catalog backend is unreachable",
        "CATALOG_UNAVAILABLE",
        502,
        {"reason": reason}
    )


def catalog_bad_status(status: int) -> AppException:
    """Create exception for a non-success catalog response."""
    return AppException(
        f"Catalog backend returned status {status}",
        "CATALOG_BAD_STATUS",
        502,
        {"status": status}
    )


def catalog_malformed(reason: str) -> AppException:
    """Create exception for a catalog body that is not a product list."""
    return AppException(
        "Catalog response is not a valid product list",
        "CATALOG_MALFORMED",
        502,
        {"reason": reason}
    )


def invalid_category(value: str) -> AppException:
    """Create invalid category filter exception."""
    return AppException(
        f"Unknown category: {value}",
        "INVALID_CATEGORY",
        400,
        {"category": value}
    )


def product_not_found(product_id: str) -> AppException:
    """Create product not found exception."""
    return AppException(
        "Product not found in current catalog",
        "PRODUCT_NOT_FOUND",
        404,
        {"product_id": product_id}
    )


def storefront_not_ready() -> AppException:
    """Create exception for requests arriving before startup completes."""
    return AppException(
        "Storefront is not initialized",
        "STOREFRONT_NOT_READY",
        503
    )


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)
