"""
Application settings and configuration management.

Uses Pydantic for validation and environment variable loading.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import os
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Base configuration settings.

    Settings are loaded from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Environment
    environment: Literal["development", "production", "testing"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Application
    app_name: str = Field(default="OrderSeed", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///data/orderseed.db",
        description="SQLAlchemy async database URL",
    )
    database_echo: bool = Field(default=False, description="Log emitted SQL")

    # Generator
    historical_order_count: int = Field(
        default=10000, ge=0, description="Orders spread over the history range"
    )
    recent_order_count: int = Field(
        default=50, ge=0, description="In-flight orders generated for today"
    )
    max_date_attempts: int = Field(
        default=1000, ge=1, description="Rejection draws before enumerating open days"
    )
    employee_access_mask: int = Field(
        default=0, ge=0, description="Permission bits required to take orders"
    )
    resolve_sold_items: bool = Field(
        default=False, description="Resolve item lines for each sellable component"
    )
    include_item_surcharges: bool = Field(
        default=False, description="Add item surcharges to order totals"
    )
    random_seed: Optional[int] = Field(
        default=None, description="Seed for a reproducible run (None = random)"
    )
    generator_config_path: Optional[str] = Field(
        default=None, description="JSON file overriding the default weight tables"
    )

    # Timeouts (None disables)
    fetch_timeout_seconds: Optional[float] = Field(
        default=30.0, description="Reference data fetch timeout"
    )
    persist_timeout_seconds: Optional[float] = Field(
        default=300.0, description="Bulk insert timeout"
    )

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_workers: int = Field(default=1, description="Number of API workers")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(
        default="text", description="Log format"
    )

    # Security
    allowed_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5000"],
        description="Allowed CORS origins",
    )


class DevelopmentSettings(Settings):
    """Development environment settings."""

    environment: Literal["development"] = "development"
    debug: bool = True
    log_level: str = "DEBUG"


class ProductionSettings(Settings):
    """Production environment settings."""

    environment: Literal["production"] = "production"
    debug: bool = False
    log_level: str = "WARNING"
    log_format: Literal["json", "text"] = "json"


class TestingSettings(Settings):
    """Testing environment settings."""

    environment: Literal["testing"] = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    historical_order_count: int = 200  # Keep test runs fast
    recent_order_count: int = 10


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings based on environment.

    Uses lru_cache to ensure settings are loaded only once.

    Returns:
        Settings instance for current environment
    """
    env = os.getenv("ENVIRONMENT", "development").lower()

    if env == "production":
        return ProductionSettings()
    elif env == "testing":
        return TestingSettings()
    else:
        return DevelopmentSettings()


# Global settings instance
settings = get_settings()
