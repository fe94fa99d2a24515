"""Application configuration using Pydantic Settings.

This module provides centralized configuration management with environment
variable validation, type coercion, and default values.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """Application settings with environment variable validation.

    All settings can be overridden via environment variables.
    The TMDB API key should be provided via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Application
    # ========================================
    app_env: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    app_name: str = Field(
        default="Cinema",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log output format (json for production, console for dev)",
    )

    # ========================================
    # Server
    # ========================================
    host: str = Field(
        default="127.0.0.1",
        description="Server host",
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port",
    )

    # ========================================
    # Movie Catalog API (TMDB)
    # ========================================
    tmdb_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="TMDB API key, appended to every request as api_key",
    )
    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3",
        description="Base URL of the movie catalog API",
    )
    tmdb_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Catalog API request timeout in seconds",
    )
    page_size: int = Field(
        default=20,
        ge=1,
        description="Results per page returned by the catalog API",
    )

    # ========================================
    # Images & Deep Links
    # ========================================
    image_base_url: str = Field(
        default="https://image.tmdb.org/t/p",
        description="Base URL for poster and backdrop images",
    )
    poster_size: str = Field(default="w500", description="Poster size tier")
    backdrop_size: str = Field(default="w780", description="Backdrop size tier")
    thumbnail_size: str = Field(default="w200", description="Thumbnail size tier")
    deep_link_scheme: str = Field(
        default="cinema",
        description="URI scheme used for movie deep links",
    )

    # ========================================
    # Persistent Store
    # ========================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/cinema.db",
        description="Database URL with async driver",
    )
    store_ready_timeout: float = Field(
        default=2.0,
        ge=0,
        description="Seconds a consumer waits for the store before falling back",
    )

    # ========================================
    # Response Cache
    # ========================================
    response_cache_ttl: int = Field(
        default=86400,
        ge=1,
        description="Seconds before a cached page response is stale (24 hours)",
    )
    response_cache_sweep_interval: int = Field(
        default=3600,
        ge=0,
        description="Seconds between expired-entry sweeps (0 disables the sweep)",
    )

    # ========================================
    # Image Cache
    # ========================================
    image_cache_dir: str = Field(
        default="./data/image_cache",
        description="Directory for the on-disk image cache",
    )
    image_memory_count_limit: int = Field(
        default=100,
        ge=1,
        description="Maximum number of images held in memory",
    )
    image_memory_cost_limit: int = Field(
        default=50 * 1024 * 1024,
        ge=1,
        description="Maximum total bytes held in the memory tier (50 MB)",
    )
    image_disk_max_age: int = Field(
        default=7 * 24 * 60 * 60,
        ge=1,
        description="Seconds before a cached image file is swept (7 days)",
    )

    # ========================================
    # Search
    # ========================================
    search_debounce_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Delay after the last keystroke before a search is issued",
    )

    # ========================================
    # Derived Properties
    # ========================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == Environment.PRODUCTION

    @property
    def use_json_logs(self) -> bool:
        """Check if JSON logging should be used."""
        return self.log_format == LogFormat.JSON or self.is_production

    @field_validator("tmdb_base_url", "image_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints and image paths are appended with a leading slash."""
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    This function is cached to avoid re-reading environment variables
    on every access. Use dependency injection in FastAPI routes.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
