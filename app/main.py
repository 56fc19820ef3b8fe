"""
==============================================================================
F1 Store India - Application Entry Point
==============================================================================

FastAPI application exposing the storefront state machine with:
- RESTful snapshot, filter, cart and retry endpoints
- WebSocket snapshot streaming
- Catalog backend client lifecycle

Usage:
------
    # Development
    uvicorn app.main:app --reload

    # Production
    uvicorn app.main:app --host 0.0.0.0 --port 3000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.core.exceptions import register_exception_handlers
from app.api.router import api_router
from app.websockets import storefront_router
from app.catalog.remote import CatalogRemote
from app.store.controller import StorefrontController


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Handles application lifecycle including:
    - Catalog client and storefront controller startup
    - Middleware configuration
    - Router registration
    - Exception handler setup

    Args:
        remote_factory: Builds the catalog remote (CatalogRemote if None)
    """

    def __init__(self, remote_factory: Optional[Callable[[], CatalogRemote]] = None):
        """Initialize the application."""
        self._settings = get_settings()
        self._remote_factory = remote_factory or CatalogRemote
        self._remote: Optional[CatalogRemote] = None
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Merchandise storefront with team filters, search and cart",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        self._configure_middleware(app)
        register_exception_handlers(app)
        self._register_routers(app)
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        await self._startup(app)
        yield
        await self._shutdown(app)

    async def _startup(self, app: FastAPI) -> None:
        """Create the catalog client and load the initial catalog."""
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name}")
        logger.info(f"📡 Catalog backend: {self._settings.catalog_base_url}")
        logger.info("=" * 60)

        self._remote = self._remote_factory()
        storefront = StorefrontController(self._remote)
        await storefront.wait_idle()
        app.state.storefront = storefront

        if storefront.error_message():
            logger.warning(f"⚠️ Initial catalog load failed: {storefront.error_message()}")
        else:
            logger.info(f"✅ Loaded {len(storefront.items)} products")

        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")

    async def _shutdown(self, app: FastAPI) -> None:
        """Settle in-flight fetches and close the catalog client."""
        logger.info("🛑 Shutting down...")
        storefront: Optional[StorefrontController] = getattr(app.state, "storefront", None)
        if storefront is not None:
            await storefront.wait_idle()
            app.state.storefront = None
        if self._remote is not None:
            await self._remote.aclose()
            self._remote = None
        logger.info("✅ Shutdown complete")

    def _configure_middleware(self, app: FastAPI) -> None:
        """Configure application middleware."""
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_routers(self, app: FastAPI) -> None:
        """Register API routers."""
        app.include_router(api_router)
        app.include_router(storefront_router)

    def _register_root(self, app: FastAPI) -> None:
        """Register root endpoint."""

        @app.get("/")
        async def root():
            """Describe the available entry points."""
            return {
                "name": self._settings.app_name,
                "storefront": "/api/v1/storefront",
                "websocket": "/ws/storefront",
                "docs": "/docs",
            }

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
