"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management for the storefront using Pydantic Settings.

A single cached Settings instance is shared by the catalog client, the
FastAPI view binding and the logging setup.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Catalog backend URL resolution with a UI-origin fallback

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the storefront
        app_env: Environment mode (development/staging/production)
        debug: Enable debug logging
        host: Server bind address for the view binding
        port: Server port for the view binding
        backend_url: Catalog backend base URL (optional)
        ui_origin: Origin the storefront UI is served from
        request_timeout_seconds: Timeout for catalog requests
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings(backend_url="https://api.example.com")
        >>> settings.catalog_base_url
        'https://api.example.com'
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="F1 Store India",
        description="Display name for the storefront"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # CATALOG BACKEND SETTINGS
    # =========================================================================
    backend_url: Optional[str] = Field(
        default=None,
        description="Base URL of the catalog backend"
    )

    ui_origin: str = Field(
        default="http://localhost:3000",
        description="Origin of the storefront UI, used when backend_url is unset"
    )

    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single catalog request"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """Normalize the environment name, defaulting unknown values."""
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("backend_url")
    @classmethod
    def normalize_backend_url(cls, value: Optional[str]) -> Optional[str]:
        """Drop trailing slashes; an empty backend URL counts as unset."""
        if value is None:
            return None
        return value.strip().rstrip("/") or None

    @field_validator("ui_origin")
    @classmethod
    def normalize_ui_origin(cls, value: str) -> str:
        """Drop trailing slashes from the UI origin."""
        return value.strip().rstrip("/")

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def catalog_base_url(self) -> str:
        """
        Resolve the base URL for catalog requests.

        The configured backend URL wins. Otherwise the UI origin is used,
        with the development UI port (3000) swapped for the API port (8000).

        Returns:
            Base URL without a trailing slash
        """
        if self.backend_url:
            return self.backend_url
        return self.ui_origin.replace(":3000", ":8000")

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"catalog_base_url={self.catalog_base_url!r})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Returns:
        Global Settings instance
    """
    settings = Settings()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
